# drive_service/services/content.py
"""Data-URL framing for stored file bytes (``data:<mime>;base64,<payload>``)"""
import base64
import binascii
import re
from typing import Tuple

from ..errors import MalformedContentError

DATA_URL_RE = re.compile(r"^data:(.+);base64,(.+)$", re.DOTALL)
DEFAULT_MIME_TYPE = "application/octet-stream"


def encode_data_url(data: bytes, mime_type: str) -> str:
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type or DEFAULT_MIME_TYPE};base64,{payload}"


def decode_data_url(content: str) -> Tuple[str, bytes]:
    """Split a stored data URL into ``(mime_type, raw_bytes)``.

    Raises MalformedContentError when the string does not match the data-URL
    pattern or the payload is not valid base64.
    """
    match = DATA_URL_RE.match(content)
    if not match:
        raise MalformedContentError()

    mime_type, payload = match.groups()
    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise MalformedContentError("Invalid base64 payload in file content")
    return mime_type or DEFAULT_MIME_TYPE, data
