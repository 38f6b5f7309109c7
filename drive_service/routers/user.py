# drive_service/routers/user.py

from fastapi import APIRouter, Depends

from ..dependencies import get_current_user
from ..models.records import User
from ..models.schemas import UserResponse

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/user", response_model=UserResponse)
async def read_current_user(current_user: User = Depends(get_current_user)):
    """Current user with quota figures (the password is never returned)"""
    return UserResponse.model_validate(current_user)
