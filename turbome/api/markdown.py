"""Markdown files with frontmatter: ``/api/v1/files``."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from turbome.api.schemas import (
    DeleteFrontmatterRequest,
    SaveMarkdownsRequest,
    UpdateFrontmatterRequest,
    parse_file_paths,
)
from turbome.services.file_storage import FileStorage
from turbome.services.markdown import MarkdownService
from turbome.utils.dependencies import get_file_storage, get_markdown_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/files", tags=["markdown"])


@router.get("/blob")
def get_blobs(
    file_paths: list[str] | None = Query(default=None),
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, Any]:
    """File metadata without content."""
    batch = storage.read_many(parse_file_paths(file_paths), metadata_only=True)
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json", exclude_none=True),
        "message": batch.summary("file blobs", "read"),
    }


@router.get("/markdown")
def get_markdowns(
    file_paths: list[str] | None = Query(default=None),
    markdown: MarkdownService = Depends(get_markdown_service),
) -> dict[str, Any]:
    """Markdown files split into frontmatter and body."""
    batch = markdown.read_many(parse_file_paths(file_paths))
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("markdown files", "read"),
    }


@router.put("/markdown")
async def save_markdowns(
    body: SaveMarkdownsRequest,
    markdown: MarkdownService = Depends(get_markdown_service),
) -> dict[str, Any]:
    if not body.files:
        raise HTTPException(status_code=400, detail="Please provide at least one file to save")

    batch = await markdown.save_many([item.model_dump() for item in body.files])
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("markdown files", "processed"),
    }


@router.put("/markdown/frontmatter")
async def update_frontmatter(
    body: UpdateFrontmatterRequest,
    markdown: MarkdownService = Depends(get_markdown_service),
) -> dict[str, Any]:
    """Merge keys into the frontmatter of each file."""
    if not body.files:
        raise HTTPException(status_code=400, detail="Please provide at least one file to update")

    batch = await markdown.update_frontmatter_many([item.model_dump() for item in body.files])
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("frontmatter updates", "applied"),
    }


@router.delete("/markdown/frontmatter")
async def delete_frontmatter(
    body: DeleteFrontmatterRequest,
    markdown: MarkdownService = Depends(get_markdown_service),
) -> dict[str, Any]:
    """Remove frontmatter keys from each file; ``["*"]`` removes the whole block."""
    if not body.files:
        raise HTTPException(status_code=400, detail="Please provide at least one file to update")

    batch = await markdown.delete_frontmatter_many([item.model_dump() for item in body.files])
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("frontmatter deletions", "applied"),
    }
