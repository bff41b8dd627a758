from collections.abc import Mapping
from pathlib import PurePosixPath

from core.utils.constants import DEFAULT_ASSET_CONTENT_TYPE

EXTENSION_CONTENT_TYPES: Mapping[str, str] = {
    ".html": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".ico": "image/x-icon",
    ".webp": "image/webp",
}


def detect_content_type(key: str) -> str:
    suffix = PurePosixPath(key).suffix.lower()
    return EXTENSION_CONTENT_TYPES.get(suffix, DEFAULT_ASSET_CONTENT_TYPE)
