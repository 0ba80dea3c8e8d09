"""Vault models: per-user quota container, folder tree and file metadata."""

from sqlalchemy import (
    BigInteger, Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index,
    Integer, String, text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

# Largest value an Integer key column holds on every supported backend.
MAX_ROW_ID = 2_147_483_647


class Vault(Base):
    """One per owner identity. Carries the quota ledger."""

    __tablename__ = "vaults"
    __table_args__ = (
        CheckConstraint("storage_used >= 0", name="ck_vaults_storage_used_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_id = Column(String(255), nullable=False, unique=True)
    storage_used = Column(BigInteger, nullable=False, default=0)
    storage_limit = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    folders = relationship("VaultFolder", back_populates="vault", passive_deletes=True)


class VaultFolder(Base):
    """A folder in a vault. ``parent_id`` NULL means root level."""

    __tablename__ = "vault_folders"
    __table_args__ = (
        Index("ix_vault_folders_vault_parent", "vault_id", "parent_id"),
        # At most one system folder per vault.
        Index(
            "uq_vault_folders_system",
            "vault_id",
            unique=True,
            sqlite_where=text("is_system_folder = 1"),
            postgresql_where=text("is_system_folder"),
        ),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    vault_id = Column(Integer, ForeignKey("vaults.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(Integer, ForeignKey("vault_folders.id", ondelete="CASCADE"), nullable=True)
    name = Column(String(255), nullable=False)
    is_system_folder = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    vault = relationship("Vault", back_populates="folders")
    files = relationship("VaultFile", back_populates="folder", passive_deletes=True)


class VaultFile(Base):
    """Metadata for one uploaded file. The bytes live in the object store."""

    __tablename__ = "vault_files"
    __table_args__ = (
        Index("ix_vault_files_folder_id", "folder_id"),
        CheckConstraint("size >= 0", name="ck_vault_files_size_non_negative"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    folder_id = Column(Integer, ForeignKey("vault_folders.id", ondelete="CASCADE"), nullable=False)
    name = Column(String(255), nullable=True)
    content_type = Column(String(255), nullable=True)
    storage_key = Column(String(1024), nullable=True)
    size = Column(BigInteger, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    folder = relationship("VaultFolder", back_populates="files")
