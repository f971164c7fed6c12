from __future__ import annotations

import base64
import binascii
import os
from typing import Any

RESPONSE_PREVIEW_BYTES = 500

_MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    "mp3": "audio/mpeg",
    "m4a": "audio/mp4",
    "wav": "audio/wav",
    "pdf": "application/pdf",
    "json": "application/json",
    "txt": "text/plain",
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "xml": "application/xml",
    "zip": "application/zip",
}
DEFAULT_MIME_TYPE = "application/octet-stream"


def debug_enabled(flag: bool = False) -> bool:
    if flag:
        return True
    return "rest" in (os.getenv("DEBUG", "") or "")


def debug(message: str, *args: Any, enabled: bool = False) -> None:
    try:
        if debug_enabled(enabled):
            print(f"restenvelope: {message}", *args)
    except Exception:
        pass


def preview(content: bytes) -> str:
    return content[:RESPONSE_PREVIEW_BYTES].decode("utf-8", errors="replace")


def b64url_encode(data: bytes) -> str:
    """Encode to the URL-safe base64 alphabet without padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    """Decode URL-safe base64, tolerating missing padding.

    Raises:
        ValueError: If the text is not valid base64url.
    """
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, altchars=b"-_", validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64url data: {exc}") from exc


def b64_decode_lenient(text: str) -> bytes:
    """Decode a secret given as base64url first, then standard base64."""
    try:
        return b64url_decode(text)
    except ValueError:
        pass
    padded = text + "=" * (-len(text) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 data: {exc}") from exc


def mime_type_for_path(path: str | os.PathLike[str]) -> str:
    ext = os.path.splitext(os.fspath(path))[1].lstrip(".").lower()
    return _MIME_TYPES.get(ext, DEFAULT_MIME_TYPE)


__all__ = [
    "b64url_encode",
    "b64url_decode",
    "b64_decode_lenient",
    "debug",
    "debug_enabled",
    "mime_type_for_path",
    "preview",
    "DEFAULT_MIME_TYPE",
]
