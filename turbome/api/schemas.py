"""Request bodies for the REST API.

Per-item fields are optional on purpose: a batch item with a missing field is
reported in the batch's ``errors`` instead of rejecting the whole request.
"""

import json
from typing import Any

from fastapi import HTTPException
from pydantic import BaseModel, Field


class FileSaveItem(BaseModel):
    file_path: str | None = None
    content: str | None = None
    encoding: str = "text"
    commit_message: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    previous_path: str | None = None


class SaveFilesRequest(BaseModel):
    files: list[FileSaveItem] = Field(default_factory=list)


class DeleteFilesRequest(BaseModel):
    file_paths: list[str] = Field(default_factory=list)
    commit_message: str | None = None
    author_name: str | None = None
    author_email: str | None = None


class MarkdownSaveItem(BaseModel):
    file_path: str | None = None
    content: str | None = None
    frontmatter: dict[str, Any] | None = None
    commit_message: str | None = None
    author_name: str | None = None
    author_email: str | None = None
    previous_path: str | None = None


class SaveMarkdownsRequest(BaseModel):
    files: list[MarkdownSaveItem] = Field(default_factory=list)


class FrontmatterUpdateItem(BaseModel):
    file_path: str | None = None
    frontmatter_updates: Any = None
    commit_message: str | None = None
    author_name: str | None = None
    author_email: str | None = None


class UpdateFrontmatterRequest(BaseModel):
    files: list[FrontmatterUpdateItem] = Field(default_factory=list)


class FrontmatterDeleteItem(BaseModel):
    file_path: str | None = None
    frontmatter_keys: list[str] = Field(default_factory=list)
    commit_message: str | None = None
    author_name: str | None = None
    author_email: str | None = None


class DeleteFrontmatterRequest(BaseModel):
    files: list[FrontmatterDeleteItem] = Field(default_factory=list)


def parse_file_paths(values: list[str] | None) -> list[str]:
    """
    Normalize the ``file_paths`` query parameter.

    Accepts repeated parameters (``?file_paths=a&file_paths=b``) as well as a
    single JSON array (``?file_paths=["a","b"]``).

    Raises:
        HTTPException: If no path is given.
    """
    paths: list[str] = []
    for value in values or []:
        try:
            decoded = json.loads(value)
        except ValueError:
            decoded = value
        if isinstance(decoded, list):
            paths.extend(str(item) for item in decoded)
        else:
            paths.append(value)

    if not paths:
        raise HTTPException(status_code=400, detail="Please provide at least one file path")
    return paths


def parse_file_types(value: str | None) -> list[str]:
    """Split ``"md, txt"`` into ``["md", "txt"]``."""
    if not value:
        return []
    return [ext.strip() for ext in value.split(",") if ext.strip()]
