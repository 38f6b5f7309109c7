# drive_service/models/schemas.py

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Wire models are camelCase on the JSON side, snake_case in Python"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# User Schemas
class UserResponse(CamelModel):
    id: int
    username: str
    storage_limit: int
    storage_used: int


# File Schemas
class FileResponse(CamelModel):
    id: int
    name: str
    type: str
    size: int
    path: Optional[str]
    user_id: int
    folder_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    is_starred: bool
    is_deleted: bool


class FileWithContentResponse(FileResponse):
    data_url: Optional[str] = None


class FileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    folder_id: Optional[int] = None
    is_starred: Optional[bool] = None


# Folder Schemas
class FolderCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    parent_id: Optional[int] = None


class FolderUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    parent_id: Optional[int] = None


class FolderResponse(CamelModel):
    id: int
    name: str
    user_id: int
    parent_id: Optional[int]
    created_at: datetime
    updated_at: datetime
    is_deleted: bool


# Storage Schemas
class StorageStats(CamelModel):
    quota: int
    used: int
    available: int
    percentage_used: float
    total_files: int


class MessageResponse(BaseModel):
    message: str
