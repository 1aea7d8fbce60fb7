"""Filename and content search: ``/api/search``."""

from typing import Any

from fastapi import APIRouter, Depends, Query

from turbome.api.schemas import parse_file_types
from turbome.models.search import SearchResults, SearchType
from turbome.services.base import ValidationError
from turbome.services.search_index import SearchIndex
from turbome.services.utils.constants import DEFAULT_SEARCH_LIMIT, MAX_SEARCH_LIMIT
from turbome.utils.dependencies import get_search_index

router = APIRouter(prefix="/api/search", tags=["search"])


@router.get("")
def search(
    q: str = "",
    type: SearchType = "both",
    limit: int = Query(default=DEFAULT_SEARCH_LIMIT, ge=1, le=MAX_SEARCH_LIMIT),
    include_hidden: bool = False,
    file_types: str | None = None,
    index: SearchIndex = Depends(get_search_index),
) -> dict[str, Any]:
    try:
        results = index.search(
            q,
            type=type,
            limit=limit,
            include_hidden=include_hidden,
            file_types=parse_file_types(file_types),
        )
    except ValidationError as e:
        empty = SearchResults(query=q, search_type=type)
        return {"success": False, "data": empty.model_dump(), "message": e.message}

    return {"success": True, "data": results.model_dump()}
