"""Service for the vault folder tree: create, rename, cascade delete, listing."""

import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.orm import Session

from ..database import storage_guard, unit_of_work
from ..exceptions import FolderNotFoundError, SystemFolderProtectedError, ValidationError
from ..models.vault import Vault, VaultFile, VaultFolder
from ..repositories.file_repository import FileRepository
from ..repositories.folder_repository import FolderRepository
from .quota_ledger import QuotaLedger

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255


@dataclass
class FolderContents:
    folder: VaultFolder
    subfolders: List[VaultFolder]
    files: List[VaultFile]


def clean_name(name: Optional[str], field: str = "name") -> str:
    """Trim a folder name. Raises ValidationError when nothing is left."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Folder name is required", field=field)
    name = name.strip()
    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(
            f"Folder name cannot exceed {MAX_NAME_LENGTH} characters", field=field
        )
    return name


class FolderTreeService:
    """Business logic for one vault's folder tree.

    Every method takes the resolved vault; folders outside it are reported
    as not found.

    Public methods:
        create_folder     -- new regular folder at root or under a parent
        rename_folder     -- rename a regular folder
        delete_folder     -- remove a folder subtree and release its bytes
        list_children     -- subfolders and files of one folder
        list_root_folders -- root-level folders of the vault
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = FolderRepository(db)
        self.file_repo = FileRepository(db)
        self.ledger = QuotaLedger(db)

    def create_folder(self, vault: Vault, name: str, parent_id: Optional[int] = None) -> VaultFolder:
        """Create a regular folder. The parent, if given, must be in the same vault."""
        name = clean_name(name)

        with unit_of_work(self.db, "create folder"):
            if parent_id is not None:
                self.repo.get_in_vault(vault.id, parent_id)
            folder = self.repo.create(vault.id, name, parent_id)

        logger.info(
            "Folder created",
            extra={"vault_id": vault.id, "folder_id": folder.id, "parent_id": parent_id},
        )
        return folder

    def rename_folder(self, vault: Vault, folder_id: int, new_name: str) -> VaultFolder:
        new_name = clean_name(new_name)

        with unit_of_work(self.db, "rename folder"):
            folder = self.repo.get_in_vault(vault.id, folder_id)
            if folder.is_system_folder:
                raise SystemFolderProtectedError(folder_id, "renamed")
            self.repo.rename(folder, new_name)

        logger.info("Folder renamed", extra={"vault_id": vault.id, "folder_id": folder_id})
        return folder

    def delete_folder(self, vault: Vault, folder_id: int) -> int:
        """Delete a folder with all descendant folders and files.

        The subtree removal and the ledger release of every contained file's
        size commit as one transaction. Returns the bytes released.
        """
        vault_id = vault.id

        with unit_of_work(self.db, "delete folder"):
            self.ledger.lock(vault_id)
            folder = self.repo.get_in_vault(vault_id, folder_id)
            if folder.is_system_folder:
                raise SystemFolderProtectedError(folder_id, "deleted")

            stats = self.repo.subtree_stats(folder_id)
            if not self.repo.delete(folder_id):
                raise FolderNotFoundError(folder_id)
            self.ledger.apply_delta(vault_id, -stats.total_bytes)

        logger.info(
            "Folder deleted",
            extra={
                "vault_id": vault_id,
                "folder_id": folder_id,
                "folders_removed": stats.folder_count,
                "files_removed": stats.file_count,
                "bytes_released": stats.total_bytes,
            },
        )
        return stats.total_bytes

    def get_folder(self, vault: Vault, folder_id: int) -> VaultFolder:
        with storage_guard(self.db, "load folder"):
            return self.repo.get_in_vault(vault.id, folder_id)

    def list_children(self, vault: Vault, folder_id: int) -> FolderContents:
        """Subfolders and files of a folder, both in creation order."""
        with storage_guard(self.db, "list folder contents"):
            folder = self.repo.get_in_vault(vault.id, folder_id)
            return FolderContents(
                folder=folder,
                subfolders=self.repo.get_children(folder.id),
                files=self.file_repo.get_by_folder(folder.id),
            )

    def list_root_folders(self, vault: Vault) -> List[VaultFolder]:
        with storage_guard(self.db, "list root folders"):
            return self.repo.get_roots(vault.id)
