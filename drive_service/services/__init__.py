# drive_service/services/__init__.py
"""Business logic services"""
from .storage import StorageEngine
from .content import encode_data_url, decode_data_url
