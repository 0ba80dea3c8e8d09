"""Repository for vault rows and their reserved system folder."""

from typing import Optional
from sqlalchemy.orm import Session
from ..models.vault import Vault, VaultFolder


class VaultRepository:
    """Lookup and insert for vaults and system folders.

    Inserts only flush; the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def get_by_owner(self, owner_id: str) -> Optional[Vault]:
        return self.db.query(Vault).filter(Vault.owner_id == owner_id).first()

    def create(self, owner_id: str, storage_limit: int) -> Vault:
        vault = Vault(owner_id=owner_id, storage_used=0, storage_limit=storage_limit)
        self.db.add(vault)
        self.db.flush()
        return vault

    def get_system_folder(self, vault_id: int) -> Optional[VaultFolder]:
        return (
            self.db.query(VaultFolder)
            .filter(
                VaultFolder.vault_id == vault_id,
                VaultFolder.is_system_folder.is_(True),
                VaultFolder.parent_id.is_(None),
            )
            .first()
        )

    def create_system_folder(self, vault_id: int, name: str) -> VaultFolder:
        folder = VaultFolder(vault_id=vault_id, name=name, parent_id=None, is_system_folder=True)
        self.db.add(folder)
        self.db.flush()
        return folder
