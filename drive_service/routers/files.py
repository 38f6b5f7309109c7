# drive_service/routers/files.py

import logging
from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, HTTPException, Query, Response

from ..dependencies import folder_id_query, get_current_user, get_settings, get_storage
from ..config import Settings
from ..models.records import File, User
from ..models.schemas import FileResponse, FileUpdate, FileWithContentResponse, MessageResponse
from ..monitoring.metrics import files_deleted, storage_used_bytes
from ..services.content import decode_data_url
from ..services.storage import StorageEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


def get_active_file(file_id: int, user: User, storage: StorageEngine) -> File:
    """Caller's file, or 404 if it is missing, foreign or deleted"""
    file = storage.get_file_by_id(file_id, user_id=user.id)
    if file is None or file.is_deleted:
        raise HTTPException(status_code=404, detail="File not found")
    return file


def content_disposition(filename: str) -> str:
    """Attachment header with an ASCII fallback and an RFC 5987 UTF-8 name"""
    fallback = filename.encode("ascii", "ignore").decode("ascii").replace('"', '\\"') or "download"
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename)}"
    return header


@router.get("", response_model=List[FileResponse])
async def list_files(
    folder_id: Optional[int] = Depends(folder_id_query),
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """List the caller's files directly inside a folder (root when omitted)"""
    return [FileResponse.model_validate(f) for f in storage.get_files(current_user.id, folder_id)]


@router.get("/recent", response_model=List[FileResponse])
async def recent_files(
    limit: Optional[int] = Query(None, ge=0),
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Most recently updated files across all folders"""
    if limit is None:
        limit = settings.DEFAULT_RECENT_LIMIT
    return [FileResponse.model_validate(f) for f in storage.get_recent_files(current_user.id, limit)]


@router.get("/{file_id}", response_model=FileWithContentResponse)
async def get_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """File metadata plus its stored data URL, used for previews"""
    file = get_active_file(file_id, current_user, storage)
    return FileWithContentResponse(
        **file.model_dump(),
        data_url=storage.get_file_content(file.id),
    )


@router.put("/{file_id}", response_model=FileResponse)
async def update_file(
    file_id: int,
    file_data: FileUpdate,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Rename, star/unstar or move a file"""
    get_active_file(file_id, current_user, storage)

    updates = file_data.model_dump(exclude_unset=True)
    # name and is_starred are not nullable; an explicit null leaves them as they are
    updates = {k: v for k, v in updates.items() if v is not None or k == "folder_id"}

    target_folder = updates.get("folder_id")
    if target_folder is not None:
        folder = storage.get_folder_by_id(target_folder, user_id=current_user.id)
        if folder is None or folder.is_deleted:
            raise HTTPException(status_code=404, detail="Folder not found")

    updated = storage.update_file(file_id, **updates)
    return FileResponse.model_validate(updated)


@router.delete("/{file_id}", response_model=MessageResponse)
async def delete_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Move a file to the trash and release its bytes from the quota"""
    file = storage.get_file_by_id(file_id, user_id=current_user.id)
    if file is None or not storage.delete_file(file_id):
        raise HTTPException(status_code=404, detail="File not found")

    if not file.is_deleted:
        files_deleted.inc()
    storage_used_bytes.set(current_user.storage_used)
    return MessageResponse(message="File deleted successfully")


@router.get("/{file_id}/download")
async def download_file(
    file_id: int,
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Stream the raw bytes back with the MIME type they were uploaded with"""
    file = get_active_file(file_id, current_user, storage)

    content = storage.get_file_content(file.id)
    if not content:
        raise HTTPException(status_code=404, detail="File content not found")

    mime_type, data = decode_data_url(content)
    return Response(
        content=data,
        headers={
            "Content-Type": mime_type,
            "Content-Disposition": content_disposition(file.name),
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
    )
