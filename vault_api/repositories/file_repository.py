"""Repository for vault file metadata."""

from typing import List, Optional
from sqlalchemy import delete
from sqlalchemy.orm import Query

from ..exceptions import VaultFileNotFoundError
from ..models.vault import VaultFile, VaultFolder
from .base import BaseRepository


class FileRepository(BaseRepository[VaultFile]):
    """CRUD for vault_files. A file belongs to a vault through its folder."""

    model_class = VaultFile
    not_found_error = VaultFileNotFoundError

    def _vault_query(self, vault_id: int) -> Query:
        return (
            self.db.query(VaultFile)
            .join(VaultFolder, VaultFile.folder_id == VaultFolder.id)
            .filter(VaultFolder.vault_id == vault_id)
        )

    def create(
        self,
        folder_id: int,
        size: int,
        name: Optional[str] = None,
        content_type: Optional[str] = None,
        storage_key: Optional[str] = None,
    ) -> VaultFile:
        file = VaultFile(
            folder_id=folder_id,
            size=size,
            name=name,
            content_type=content_type,
            storage_key=storage_key,
        )
        self.db.add(file)
        self.db.flush()
        self.db.refresh(file)
        return file

    def get_by_folder(self, folder_id: int) -> List[VaultFile]:
        return (
            self.db.query(VaultFile)
            .filter(VaultFile.folder_id == folder_id)
            .order_by(VaultFile.created_at, VaultFile.id)
            .all()
        )

    def delete(self, file_id: int) -> bool:
        """Delete one file row. Returns False when it was already gone."""
        result = self.db.execute(
            delete(VaultFile)
            .where(VaultFile.id == file_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0
