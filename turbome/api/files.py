"""Plain file CRUD: ``/api/files``."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from turbome.api.schemas import DeleteFilesRequest, SaveFilesRequest, parse_file_paths
from turbome.models.files import RequestedEncoding
from turbome.services.file_storage import FileStorage
from turbome.utils.dependencies import get_file_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/files", tags=["files"])


@router.get("")
def get_files(
    file_paths: list[str] | None = Query(default=None),
    encoding: RequestedEncoding = "auto",
    metadata_only: bool = False,
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, Any]:
    """Read one or more files. Paths that fail are listed in ``errors``."""
    paths = parse_file_paths(file_paths)
    batch = storage.read_many(paths, encoding=encoding, metadata_only=metadata_only)
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("files", "read"),
    }


@router.put("")
async def save_files(
    body: SaveFilesRequest,
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, Any]:
    """Create, overwrite or rename files and commit each change."""
    if not body.files:
        raise HTTPException(status_code=400, detail="Please provide at least one file to save")

    batch = await storage.save_many([item.model_dump() for item in body.files])
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("files", "saved"),
    }


@router.delete("")
async def delete_files(
    file_paths: list[str] | None = Query(default=None),
    commit_message: str | None = None,
    author_name: str | None = None,
    author_email: str | None = None,
    storage: FileStorage = Depends(get_file_storage),
) -> dict[str, Any]:
    """Delete files and commit each removal."""
    request = DeleteFilesRequest(
        file_paths=parse_file_paths(file_paths),
        commit_message=commit_message,
        author_name=author_name,
        author_email=author_email,
    )
    batch = await storage.delete_many(
        request.file_paths,
        commit_message=request.commit_message,
        author_name=request.author_name,
        author_email=request.author_email,
    )
    return {
        "success": batch.success,
        "data": batch.model_dump(mode="json"),
        "message": batch.summary("files", "deleted"),
    }
