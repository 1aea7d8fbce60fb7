"""Workspace grouping: ``/api/v1/workspaces``."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from turbome.api.schemas import parse_file_types
from turbome.services.utils.constants import DEFAULT_WORKSPACE_FILE_LIMIT
from turbome.services.workspace_index import WorkspaceIndex
from turbome.utils.dependencies import get_workspace_index

router = APIRouter(prefix="/api/v1/workspaces", tags=["workspaces"])


@router.get("")
def get_workspaces(
    limit: int = Query(default=DEFAULT_WORKSPACE_FILE_LIMIT, ge=1),
    include_hidden: bool = False,
    file_types: str | None = None,
    index: WorkspaceIndex = Depends(get_workspace_index),
) -> dict[str, Any]:
    """Files carrying ``workspace:`` in their first lines, grouped by workspace name."""
    listing = index.list_workspaces(
        limit=limit,
        include_hidden=include_hidden,
        file_types=parse_file_types(file_types),
    )
    return {"success": True, "data": listing.model_dump()}
