# drive_service/routers/upload.py

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from ..config import Settings
from ..dependencies import get_current_user, get_settings, get_storage, parse_optional_id
from ..errors import FileTooLargeError, QuotaExceededError
from ..models.records import User
from ..models.schemas import FileResponse
from ..monitoring.metrics import bytes_uploaded, files_uploaded, storage_used_bytes, uploads_rejected
from ..services.content import DEFAULT_MIME_TYPE, encode_data_url
from ..services.storage import StorageEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["upload"])


def check_quota(user: User, size: int) -> None:
    """Refuse an upload that would push the user past their storage limit"""
    if user.storage_used + size > user.storage_limit:
        logger.warning(
            "Quota exceeded for user %s: need %d, have %d available",
            user.username,
            size,
            max(0, user.storage_limit - user.storage_used),
        )
        uploads_rejected.labels(reason="quota").inc()
        raise QuotaExceededError(user.storage_limit, user.storage_used, size)


@router.post("/upload", response_model=FileResponse, status_code=status.HTTP_201_CREATED)
async def upload_file(
    file: Optional[UploadFile] = File(None),
    folder_id: Optional[str] = Form(None, alias="folderId"),
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
    settings: Settings = Depends(get_settings),
):
    """Upload a single file (buffered in memory) into a folder or the root"""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Read one byte past the ceiling so oversize bodies are detected without
    # buffering all of them
    data = await file.read(settings.MAX_UPLOAD_SIZE + 1)
    if not data:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if len(data) > settings.MAX_UPLOAD_SIZE:
        uploads_rejected.labels(reason="size").inc()
        raise FileTooLargeError(file.size or len(data), settings.MAX_UPLOAD_SIZE)

    target_folder = parse_optional_id(folder_id, ("body", "folderId"))
    if target_folder is not None:
        folder = storage.get_folder_by_id(target_folder, user_id=current_user.id)
        if folder is None or folder.is_deleted:
            raise HTTPException(status_code=404, detail="Folder not found")

    size = len(data)
    check_quota(current_user, size)

    mime_type = file.content_type or DEFAULT_MIME_TYPE
    created = storage.create_file(
        name=file.filename,
        type=mime_type,
        size=size,
        user_id=current_user.id,
        folder_id=target_folder,
        path=str(uuid.uuid4()),
    )
    storage.set_file_content(created.id, encode_data_url(data, mime_type))

    files_uploaded.inc()
    bytes_uploaded.inc(size)
    storage_used_bytes.set(current_user.storage_used)
    logger.info("📤 Uploaded %s (%.1fKB) for user %s", file.filename, size / 1024, current_user.username)

    return FileResponse.model_validate(created)
