# drive_service/dependencies.py
from typing import Optional, Tuple

from fastapi import Depends, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError

from .config import Settings
from .models.records import User
from .services.storage import StorageEngine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage(request: Request) -> StorageEngine:
    """Storage engine owned by the running application"""
    return request.app.state.storage


def parse_optional_id(value: Optional[str], loc: Tuple[str, str]) -> Optional[int]:
    """Ids arrive as strings; missing or empty means the root level."""
    if value is None or not value.strip():
        return None
    try:
        return int(value)
    except ValueError:
        raise RequestValidationError([{
            "type": "int_parsing",
            "loc": loc,
            "msg": "Input should be a valid integer",
            "input": value,
        }])


def folder_id_query(folder_id: Optional[str] = Query(None, alias="folderId")) -> Optional[int]:
    return parse_optional_id(folder_id, ("query", "folderId"))


def parent_id_query(parent_id: Optional[str] = Query(None, alias="parentId")) -> Optional[int]:
    return parse_optional_id(parent_id, ("query", "parentId"))


async def get_current_user(
    storage: StorageEngine = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> User:
    """Resolve the caller.

    There is no authentication yet: every request acts as the configured demo
    account. Routes pass ``current_user.id`` on to the engine so a real
    identity can be swapped in here later.
    """
    user = storage.get_user_by_username(settings.DEMO_USERNAME)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user
