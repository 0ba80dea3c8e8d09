"""Pydantic schemas for request/response validation."""

from .vault import (
    VaultResponse,
    StorageUsageResponse,
    FolderCreate,
    FolderRename,
    FolderResponse,
    VaultSummaryResponse,
    FileRecordCreate,
    FileResponse,
    FolderContentsResponse,
)

__all__ = [
    "VaultResponse",
    "StorageUsageResponse",
    "FolderCreate",
    "FolderRename",
    "FolderResponse",
    "VaultSummaryResponse",
    "FileRecordCreate",
    "FileResponse",
    "FolderContentsResponse",
]
