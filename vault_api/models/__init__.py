"""Database models."""

from .vault import Vault, VaultFolder, VaultFile

__all__ = ["Vault", "VaultFolder", "VaultFile"]
