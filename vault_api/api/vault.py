"""API routes for the caller's storage vault.

Every endpoint is scoped to the authenticated identity. The vault is
resolved (and provisioned on first use) from the auth context, never from
the request body, so one user can never address another user's folders or
files: foreign ids are answered with 404.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..core.auth import Identity, require_identity
from ..database import get_db
from ..models.vault import Vault
from ..services import FileRegistryService, FolderTreeService, QuotaLedger, VaultService
from ..schemas.vault import (
    FileRecordCreate,
    FileResponse,
    FolderContentsResponse,
    FolderCreate,
    FolderRename,
    FolderResponse,
    StorageUsageResponse,
    VaultSummaryResponse,
)

router = APIRouter(prefix="/api/vault", tags=["vault"])


def get_vault(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
) -> Vault:
    """Resolve the caller's vault, creating it and its system folder if needed."""
    return VaultService(db).resolve_vault(identity.owner_id)


@router.get("", response_model=VaultSummaryResponse)
def get_vault_summary(
    db: Session = Depends(get_db),
    identity: Identity = Depends(require_identity),
):
    """Vault usage figures plus the root-level folders, oldest first."""
    vault, root_folders = VaultService(db).get_summary(identity.owner_id)
    return {"vault": vault, "root_folders": root_folders}


@router.get("/storage", response_model=StorageUsageResponse)
def get_storage_usage(
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    return QuotaLedger(db).usage(vault)


@router.post("/folders", response_model=FolderResponse, status_code=201)
def create_folder(
    data: FolderCreate,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """Create a folder at root or under a parent in the caller's vault."""
    return FolderTreeService(db).create_folder(vault, data.name, data.parent_id)


@router.get("/folders/{folder_id}", response_model=FolderContentsResponse)
def get_folder_contents(
    folder_id: int,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """The folder with its subfolders and files, in creation order."""
    contents = FolderTreeService(db).list_children(vault, folder_id)
    return {
        "folder": contents.folder,
        "subfolders": contents.subfolders,
        "files": contents.files,
    }


@router.patch("/folders/{folder_id}", response_model=FolderResponse)
def rename_folder(
    folder_id: int,
    data: FolderRename,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """Rename a folder. The system folder answers 403."""
    return FolderTreeService(db).rename_folder(vault, folder_id, data.name)


@router.delete("/folders/{folder_id}", status_code=204)
def delete_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """Delete a folder, its descendants and their files, releasing their bytes."""
    FolderTreeService(db).delete_folder(vault, folder_id)


@router.post("/folders/{folder_id}/files", response_model=FileResponse, status_code=201)
def record_file(
    folder_id: int,
    data: FileRecordCreate,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """Record a completed upload and claim its size from the quota (413 when it does not fit)."""
    return FileRegistryService(db).record_file_created(
        vault,
        folder_id,
        data.size,
        name=data.name,
        content_type=data.content_type,
        storage_key=data.storage_key,
    )


@router.get("/files/{file_id}", response_model=FileResponse)
def get_file(
    file_id: int,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    return FileRegistryService(db).get_file(vault, file_id)


@router.delete("/files/{file_id}", status_code=204)
def delete_file(
    file_id: int,
    db: Session = Depends(get_db),
    vault: Vault = Depends(get_vault),
):
    """Delete a file's metadata and release its size from the quota."""
    FileRegistryService(db).delete_file(vault, file_id)
