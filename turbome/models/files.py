from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

Encoding = Literal["text", "base64"]
RequestedEncoding = Literal["auto", "text", "base64"]


class FileRecord(BaseModel):
    """A file under the storage root. `content` is omitted for metadata-only reads."""

    file_name: str
    file_path: str
    size: int
    encoding: Encoding
    mime_type: str
    is_binary: bool
    last_modified: datetime
    content: str | None = None
    content_sha256: str | None = None


class SaveResult(BaseModel):
    file_path: str
    size: int
    encoding: Encoding = "text"
    last_modified: datetime
    created: bool
    committed: bool = False
    operation: Literal["save", "rename"] = "save"
    renamed_from: str | None = None


class DeleteResult(BaseModel):
    file_path: str
    committed: bool = False


class CommitOptions(BaseModel):
    """Commit metadata attached to a write."""

    commit_message: str
    author_name: str | None = None
    author_email: str | None = None


class MarkdownRecord(BaseModel):
    """A markdown file split into frontmatter and body."""

    file_name: str
    file_path: str
    size: int
    last_modified: datetime
    content: str
    frontmatter: dict[str, Any] | None = None


class UpdateFrontmatterResult(BaseModel):
    file_path: str
    size: int
    last_modified: datetime
    updated_keys: list[str]
    current_frontmatter: dict[str, Any]
    committed: bool = False


class DeleteFrontmatterResult(BaseModel):
    file_path: str
    size: int
    last_modified: datetime
    deleted_keys: list[str]
    remaining_frontmatter: dict[str, Any]
    committed: bool = False
