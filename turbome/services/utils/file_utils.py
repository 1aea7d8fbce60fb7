import hashlib
import pathlib
from datetime import datetime, timezone

from .constants import BINARY_EXTENSIONS, DEFAULT_MIME_TYPE, MARKDOWN_EXTENSIONS, MIME_TYPES


def get_mime_type(file_path: str) -> str:
    """Map a file extension to its MIME type."""
    return MIME_TYPES.get(pathlib.PurePath(file_path).suffix.lower(), DEFAULT_MIME_TYPE)


def is_binary_file(file_path: str) -> bool:
    """Check if a file is served as binary (base64) based on its extension."""
    return pathlib.PurePath(file_path).suffix.lower() in BINARY_EXTENSIONS


def is_markdown_file(file_path: str) -> bool:
    return pathlib.PurePath(file_path).suffix.lower() in MARKDOWN_EXTENSIONS


def get_mtime(stat_info) -> datetime:
    """Modification time of a stat result as an aware UTC datetime."""
    return datetime.fromtimestamp(stat_info.st_mtime, tz=timezone.utc)


def sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
