"""Quota ledger: byte accounting on the vault row.

``storage_used`` is only ever changed here, and only with a single SQL
``UPDATE`` that does the arithmetic in the database. Callers run these
methods inside their own ``unit_of_work`` so the ledger change commits or
rolls back together with the structural change it accounts for.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from ..exceptions import QuotaExceededError, StorageUnavailableError
from ..models.vault import Vault

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StorageUsage:
    storage_used: int
    storage_limit: int
    remaining: int


class QuotaLedger:
    """Reads and atomic deltas against ``vaults.storage_used``."""

    def __init__(self, db: Session):
        self.db = db

    @staticmethod
    def remaining(vault: Vault) -> int:
        """Bytes left before the limit; never negative."""
        return max(vault.storage_limit - vault.storage_used, 0)

    def usage(self, vault: Vault) -> StorageUsage:
        return StorageUsage(
            storage_used=vault.storage_used,
            storage_limit=vault.storage_limit,
            remaining=self.remaining(vault),
        )

    def lock(self, vault_id: int) -> None:
        """Take the vault row's write lock for the rest of the transaction.

        A no-op UPDATE rather than SELECT ... FOR UPDATE so that SQLite, which
        ignores row locks, still starts its write transaction here. Every
        ledger-affecting operation locks first, so they serialise per vault.
        """
        result = self.db.execute(
            update(Vault)
            .where(Vault.id == vault_id)
            .values(storage_used=Vault.storage_used)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise StorageUnavailableError(f"Vault row missing: {vault_id}")

    def apply_delta(self, vault_id: int, delta: int, enforce_limit: bool = False) -> None:
        """Add *delta* bytes (negative to release) to the vault's usage.

        The result is clamped at zero. With ``enforce_limit`` a positive delta
        only applies when it fits under ``storage_limit``; otherwise
        ``QuotaExceededError`` is raised and the caller's transaction must
        roll back.
        """
        new_used = Vault.storage_used + delta
        stmt = (
            update(Vault)
            .where(Vault.id == vault_id)
            .values(storage_used=case((new_used < 0, 0), else_=new_used))
            .execution_options(synchronize_session=False)
        )
        if enforce_limit and delta > 0:
            stmt = stmt.where(new_used <= Vault.storage_limit)

        result = self.db.execute(stmt)
        if result.rowcount > 0:
            logger.debug("Ledger delta applied", extra={"vault_id": vault_id, "delta": delta})
            return

        remaining = self.db.execute(
            select(Vault.storage_limit - Vault.storage_used).where(Vault.id == vault_id)
        ).scalar()
        if remaining is None:
            raise StorageUnavailableError(f"Vault row missing: {vault_id}")
        raise QuotaExceededError(requested=delta, remaining=max(remaining, 0))
