"""Data access repositories."""

from .base import BaseRepository
from .vault_repository import VaultRepository
from .folder_repository import FolderRepository, SubtreeStats
from .file_repository import FileRepository

__all__ = [
    "BaseRepository",
    "VaultRepository",
    "FolderRepository",
    "SubtreeStats",
    "FileRepository",
]
