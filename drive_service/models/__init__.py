# drive_service/models/__init__.py
"""In-memory records and API schemas"""
from .records import User, Folder, File
__all__ = ["User", "Folder", "File"]
from .schemas import *
