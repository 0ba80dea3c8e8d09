"""Base repository with shared vault-scoped lookups.

Every folder and file lookup in this service is scoped to one vault: a row
that exists but belongs to another vault is indistinguishable from a
missing one. Subclasses set ``model_class``, ``not_found_error`` and
implement ``_vault_query`` to express how their rows reach a vault.
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import VaultException
from ..models.vault import MAX_ROW_ID

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., VaultFolder)
        not_found_error: Exception class raised by get_in_vault
    """

    model_class: Type[ModelT]
    not_found_error: Type[VaultException]

    def __init__(self, db: Session):
        self.db = db

    def _vault_query(self, vault_id: int) -> Query:
        """Query restricted to rows owned by *vault_id*."""
        raise NotImplementedError

    def get_in_vault_optional(self, vault_id: int, entity_id: int) -> Optional[ModelT]:
        """Get entity by primary key within a vault, or None."""
        # Ids outside the key column's range cannot name a row.
        if not 0 < entity_id <= MAX_ROW_ID:
            return None
        return self._vault_query(vault_id).filter(self.model_class.id == entity_id).first()

    def get_in_vault(self, vault_id: int, entity_id: int) -> ModelT:
        """Get entity by primary key within a vault. Raises not_found_error if missing."""
        entity = self.get_in_vault_optional(vault_id, entity_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity
