"""Schemas for the vault API."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional, List


# --- Vault schemas ---

class VaultResponse(BaseModel):
    """Vault row with its quota figures."""
    id: int
    storage_used: int
    storage_limit: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class StorageUsageResponse(BaseModel):
    storage_used: int
    storage_limit: int
    remaining: int

    class Config:
        from_attributes = True


# --- Folder schemas ---

class FolderCreate(BaseModel):
    """Create a folder at root (parent_id omitted) or under a parent."""
    name: str
    parent_id: Optional[int] = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name is required")
        return v


class FolderRename(BaseModel):
    name: str

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Folder name is required")
        return v


class FolderResponse(BaseModel):
    """Folder in API responses."""
    id: int
    vault_id: int
    parent_id: Optional[int] = None
    name: str
    is_system_folder: bool = False
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class VaultSummaryResponse(BaseModel):
    vault: VaultResponse
    root_folders: List[FolderResponse]


# --- File schemas ---

class FileRecordCreate(BaseModel):
    """Upload-completion notice from the object store collaborator."""
    size: int = Field(ge=0)
    name: Optional[str] = Field(default=None, max_length=255)
    content_type: Optional[str] = Field(default=None, max_length=255)
    storage_key: Optional[str] = Field(default=None, max_length=1024)


class FileResponse(BaseModel):
    """File metadata in API responses."""
    id: int
    folder_id: int
    name: Optional[str] = None
    content_type: Optional[str] = None
    storage_key: Optional[str] = None
    size: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class FolderContentsResponse(BaseModel):
    folder: FolderResponse
    subfolders: List[FolderResponse]
    files: List[FileResponse]
