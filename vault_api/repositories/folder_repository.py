"""Repository for vault folder CRUD and subtree queries."""

from typing import List, NamedTuple, Optional
from sqlalchemy import delete, func, select
from sqlalchemy.orm import Query

from ..exceptions import FolderNotFoundError
from ..models.vault import VaultFolder, VaultFile
from .base import BaseRepository


class SubtreeStats(NamedTuple):
    """Size of a folder subtree, the folder itself included."""
    folder_count: int
    file_count: int
    total_bytes: int


class FolderRepository(BaseRepository[VaultFolder]):
    """CRUD for vault_folders. Writes flush; the caller owns the transaction."""

    model_class = VaultFolder
    not_found_error = FolderNotFoundError

    def _vault_query(self, vault_id: int) -> Query:
        return self.db.query(VaultFolder).filter(VaultFolder.vault_id == vault_id)

    def create(self, vault_id: int, name: str, parent_id: Optional[int] = None) -> VaultFolder:
        folder = VaultFolder(
            vault_id=vault_id,
            name=name,
            parent_id=parent_id,
            is_system_folder=False,
        )
        self.db.add(folder)
        self.db.flush()
        self.db.refresh(folder)
        return folder

    def get_roots(self, vault_id: int) -> List[VaultFolder]:
        return (
            self._vault_query(vault_id)
            .filter(VaultFolder.parent_id.is_(None))
            .order_by(VaultFolder.created_at, VaultFolder.id)
            .all()
        )

    def get_children(self, folder_id: int) -> List[VaultFolder]:
        return (
            self.db.query(VaultFolder)
            .filter(VaultFolder.parent_id == folder_id)
            .order_by(VaultFolder.created_at, VaultFolder.id)
            .all()
        )

    def rename(self, folder: VaultFolder, name: str) -> VaultFolder:
        folder.name = name
        self.db.flush()
        return folder

    def subtree_stats(self, folder_id: int) -> SubtreeStats:
        """Count folders and files under *folder_id* and sum the file sizes."""
        subtree = (
            select(VaultFolder.id)
            .where(VaultFolder.id == folder_id)
            .cte(name="subtree", recursive=True)
        )
        subtree = subtree.union_all(
            select(VaultFolder.id).where(VaultFolder.parent_id == subtree.c.id)
        )
        subtree_ids = select(subtree.c.id)

        folder_count = self.db.execute(
            select(func.count()).select_from(subtree)
        ).scalar_one()
        file_count, total_bytes = self.db.execute(
            select(func.count(VaultFile.id), func.coalesce(func.sum(VaultFile.size), 0))
            .where(VaultFile.folder_id.in_(subtree_ids))
        ).one()
        return SubtreeStats(int(folder_count), int(file_count), int(total_bytes))

    def delete(self, folder_id: int) -> bool:
        """Delete one folder row. The database cascades to subfolders and files.

        Returns False when the row was already gone.
        """
        result = self.db.execute(
            delete(VaultFolder)
            .where(VaultFolder.id == folder_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
