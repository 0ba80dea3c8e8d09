"""Vault lifecycle: lazy, idempotent provisioning of a vault and its system folder.

Every vault operation starts here. ``resolve_vault`` is read-like but may
write: the first call for an identity inserts the vault row and the
reserved system folder. Both inserts are get-or-insert against a unique
index, so concurrent first requests converge on the same rows.
"""

import logging
from typing import Callable, List, Optional, Tuple, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import settings
from ..database import storage_guard
from ..exceptions import StorageUnavailableError
from ..models.vault import Vault, VaultFolder
from ..repositories.folder_repository import FolderRepository
from ..repositories.vault_repository import VaultRepository

logger = logging.getLogger(__name__)

RowT = TypeVar("RowT")


class VaultService:
    """Entry point resolving an identity to its vault.

    Public methods:
        resolve_vault     -- get or provision the vault, ensure the system folder
        get_summary       -- resolved vault plus its root folders
        get_system_folder -- the vault's reserved folder
    """

    def __init__(self, db: Session, storage_limit: Optional[int] = None):
        self.db = db
        self.vault_repo = VaultRepository(db)
        self.folder_repo = FolderRepository(db)
        self.storage_limit = (
            settings.default_storage_limit_bytes if storage_limit is None else storage_limit
        )

    def resolve_vault(self, owner_id: str) -> Vault:
        """Return the vault for *owner_id*, creating it and its system folder if absent."""
        with storage_guard(self.db, "resolve vault"):
            vault = self._get_or_insert(
                lookup=lambda: self.vault_repo.get_by_owner(owner_id),
                insert=lambda: self.vault_repo.create(owner_id, self.storage_limit),
                what="vault",
            )
            vault_id = vault.id
            self._get_or_insert(
                lookup=lambda: self.vault_repo.get_system_folder(vault_id),
                insert=lambda: self.vault_repo.create_system_folder(
                    vault_id, settings.system_folder_name
                ),
                what="system folder",
            )
            return vault

    def get_summary(self, owner_id: str) -> Tuple[Vault, List[VaultFolder]]:
        vault = self.resolve_vault(owner_id)
        with storage_guard(self.db, "list root folders"):
            return vault, self.folder_repo.get_roots(vault.id)

    def get_system_folder(self, vault: Vault) -> VaultFolder:
        with storage_guard(self.db, "load system folder"):
            folder = self.vault_repo.get_system_folder(vault.id)
        if folder is None:
            raise StorageUnavailableError(f"System folder missing for vault {vault.id}")
        return folder

    def _get_or_insert(
        self,
        lookup: Callable[[], Optional[RowT]],
        insert: Callable[[], RowT],
        what: str,
    ) -> RowT:
        """Look up a row; insert it if absent; on a unique-index race re-read the winner."""
        row = lookup()
        if row is not None:
            return row

        try:
            row = insert()
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            row = lookup()
            if row is None:
                raise
            logger.info("Concurrent %s provisioning; using existing row", what)
            return row

        logger.info("Provisioned %s", what, extra={"row_id": row.id})
        return row
