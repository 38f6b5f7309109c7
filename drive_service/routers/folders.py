# drive_service/routers/folders.py

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ..dependencies import get_current_user, get_storage, parent_id_query
from ..errors import InvalidMoveError
from ..models.records import Folder, User
from ..models.schemas import FolderCreate, FolderResponse, FolderUpdate, MessageResponse
from ..monitoring.metrics import folders_deleted, storage_used_bytes
from ..services.storage import StorageEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/folders", tags=["folders"])


def get_active_folder(folder_id: int, user: User, storage: StorageEngine, detail: str = "Folder not found") -> Folder:
    folder = storage.get_folder_by_id(folder_id, user_id=user.id)
    if folder is None or folder.is_deleted:
        raise HTTPException(status_code=404, detail=detail)
    return folder


@router.post("", response_model=FolderResponse, status_code=status.HTTP_201_CREATED)
async def create_folder(
    folder_data: FolderCreate,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Create a new folder"""
    # NotFoundError from the engine covers a missing parent
    folder = storage.create_folder(
        name=folder_data.name,
        user_id=current_user.id,
        parent_id=folder_data.parent_id,
    )
    return FolderResponse.model_validate(folder)


@router.get("", response_model=List[FolderResponse])
async def list_folders(
    parent_id: Optional[int] = Depends(parent_id_query),
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """List user's folders directly below a parent (root when omitted)"""
    return [FolderResponse.model_validate(f) for f in storage.get_folders(current_user.id, parent_id)]


@router.get("/{folder_id}", response_model=FolderResponse)
async def get_folder(
    folder_id: int,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Get a specific folder"""
    return FolderResponse.model_validate(get_active_folder(folder_id, current_user, storage))


@router.put("/{folder_id}", response_model=FolderResponse)
async def update_folder(
    folder_id: int,
    folder_data: FolderUpdate,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Update folder name or move to different parent"""
    get_active_folder(folder_id, current_user, storage)

    updates = folder_data.model_dump(exclude_unset=True)
    if updates.get("name") is None:
        updates.pop("name", None)

    new_parent = updates.get("parent_id")
    if new_parent is not None:
        get_active_folder(new_parent, current_user, storage, detail="Parent folder not found")
        # Moving under itself or a descendant would turn the tree into a cycle
        if storage.is_descendant(new_parent, folder_id):
            raise InvalidMoveError("Cannot move folder into itself or one of its subfolders")

    updated = storage.update_folder(folder_id, **updates)
    return FolderResponse.model_validate(updated)


@router.delete("/{folder_id}", response_model=MessageResponse)
async def delete_folder(
    folder_id: int,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Delete a folder with all of its files and subfolders"""
    folder = storage.get_folder_by_id(folder_id, user_id=current_user.id)
    if folder is None or not storage.delete_folder(folder_id):
        raise HTTPException(status_code=404, detail="Folder not found")

    if not folder.is_deleted:
        folders_deleted.inc()
    storage_used_bytes.set(current_user.storage_used)
    return MessageResponse(message="Folder deleted successfully")
