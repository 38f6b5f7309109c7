# drive_service/routers/storage.py

from fastapi import APIRouter, Depends

from ..dependencies import get_current_user, get_storage
from ..models.records import User
from ..models.schemas import StorageStats
from ..services.storage import StorageEngine

router = APIRouter(prefix="/api", tags=["storage"])


@router.get("/storage/stats", response_model=StorageStats)
async def get_storage_stats(
    current_user: User = Depends(get_current_user),
    storage: StorageEngine = Depends(get_storage),
):
    """Get user storage statistics"""
    quota = current_user.storage_limit
    used = current_user.storage_used
    return StorageStats(
        quota=quota,
        used=used,
        available=max(0, quota - used),
        percentage_used=round(used / quota * 100, 2) if quota else 0.0,
        total_files=storage.count_files(current_user.id),
    )
