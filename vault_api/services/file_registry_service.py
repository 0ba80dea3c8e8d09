"""File registry: metadata rows for uploaded files and their quota claims."""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..database import storage_guard, unit_of_work
from ..exceptions import QuotaExceededError, ValidationError, VaultFileNotFoundError
from ..models.vault import Vault, VaultFile
from ..repositories.file_repository import FileRepository
from ..repositories.folder_repository import FolderRepository
from .quota_ledger import QuotaLedger

logger = logging.getLogger(__name__)


class FileRegistryService:
    """Business logic for file metadata.

    Byte upload and download happen in the object store; this service is
    called once an upload completes (``record_file_created``) and when a
    file is removed (``delete_file``). Both keep the ledger in step with
    the rows in the same transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = FileRepository(db)
        self.folder_repo = FolderRepository(db)
        self.ledger = QuotaLedger(db)

    def record_file_created(
        self,
        vault: Vault,
        folder_id: int,
        size: int,
        name: Optional[str] = None,
        content_type: Optional[str] = None,
        storage_key: Optional[str] = None,
    ) -> VaultFile:
        """Insert a file row and claim its size from the vault's quota.

        Raises QuotaExceededError, leaving nothing written, when the file
        does not fit in the remaining quota.
        """
        if isinstance(size, bool) or not isinstance(size, int) or size < 0:
            raise ValidationError("File size must be a non-negative integer", field="size")
        # Never fits, and may exceed what the size column can hold.
        if size > vault.storage_limit:
            raise QuotaExceededError(size, self.ledger.remaining(vault))
        if name is not None:
            name = name.strip() or None

        vault_id = vault.id
        with unit_of_work(self.db, "record file"):
            self.ledger.lock(vault_id)
            self.folder_repo.get_in_vault(vault_id, folder_id)
            self.ledger.apply_delta(vault_id, size, enforce_limit=True)
            file = self.repo.create(
                folder_id,
                size,
                name=name,
                content_type=content_type,
                storage_key=storage_key,
            )

        logger.info(
            "File recorded",
            extra={"vault_id": vault_id, "folder_id": folder_id, "file_id": file.id, "size": size},
        )
        return file

    def get_file(self, vault: Vault, file_id: int) -> VaultFile:
        with storage_guard(self.db, "load file"):
            return self.repo.get_in_vault(vault.id, file_id)

    def delete_file(self, vault: Vault, file_id: int) -> int:
        """Delete a file row and release its recorded size. Returns the bytes released."""
        vault_id = vault.id

        with unit_of_work(self.db, "delete file"):
            self.ledger.lock(vault_id)
            file = self.repo.get_in_vault(vault_id, file_id)
            size = file.size

            if not self.repo.delete(file_id):
                raise VaultFileNotFoundError(file_id)
            self.ledger.apply_delta(vault_id, -size)

        logger.info(
            "File deleted",
            extra={"vault_id": vault_id, "file_id": file_id, "bytes_released": size},
        )
        return size
