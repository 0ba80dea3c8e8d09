"""Business logic services."""

from .quota_ledger import QuotaLedger, StorageUsage
from .vault_service import VaultService
from .folder_tree_service import FolderTreeService, FolderContents
from .file_registry_service import FileRegistryService

__all__ = [
    "QuotaLedger",
    "StorageUsage",
    "VaultService",
    "FolderTreeService",
    "FolderContents",
    "FileRegistryService",
]
