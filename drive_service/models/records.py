# drive_service/models/records.py
"""In-memory records held by the storage engine.

Children are never stored on their parent; they are found by filtering the
whole population on ``parent_id`` / ``folder_id``.
"""
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(BaseModel):
    id: int
    username: str
    password: str
    storage_limit: int = 104857600  # 100MB
    storage_used: int = 0


class Folder(BaseModel):
    id: int
    name: str
    user_id: int
    parent_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_deleted: bool = False


class File(BaseModel):
    id: int
    name: str
    type: str
    size: int
    path: Optional[str] = None  # random identifier, not a filesystem path
    user_id: int
    folder_id: Optional[int] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    is_starred: bool = False
    is_deleted: bool = False
