"""Repository history and settings: ``/api/v1/git``."""

import logging
import math
from typing import Any

from fastapi import APIRouter, Depends, Query

from turbome.models.git import CommitsPage, CommitsQuery
from turbome.services.base import NotFoundError
from turbome.services.git_repository import GitRepository
from turbome.services.utils.constants import DEFAULT_PER_PAGE, MAX_PER_PAGE
from turbome.utils.dependencies import get_git_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/git", tags=["git"])

NOT_A_REPOSITORY = "Not a git repository"


async def _require_repository(git: GitRepository) -> None:
    if not await git.is_repository():
        raise NotFoundError(NOT_A_REPOSITORY)


@router.get("/commits")
async def get_commits(
    page: int = Query(default=1, ge=1),
    per_page: int = Query(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE),
    ref_name: str = "HEAD",
    since: str | None = None,
    until: str | None = None,
    path: str | None = None,
    author: str | None = None,
    search: str | None = None,
    git: GitRepository = Depends(get_git_repository),
) -> dict[str, Any]:
    """
    One page of commits, newest first.

    A storage root that is not a repository yields ``success: false`` and an
    empty page rather than an error status.
    """
    query = CommitsQuery(
        page=page,
        per_page=per_page,
        ref_name=ref_name,
        since=since,
        until=until,
        path=path,
        author=author,
        search=search,
    )

    if not await git.is_repository():
        logger.info("Commit history requested outside a git repository")
        return {
            "success": False,
            "data": CommitsPage(page=page, per_page=per_page).model_dump(mode="json"),
            "message": NOT_A_REPOSITORY,
        }

    commits, total_count = await git.log(query)
    total_pages = math.ceil(total_count / per_page) if total_count else 0
    result = CommitsPage(
        commits=commits,
        total_count=total_count,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_prev_page=page > 1,
    )
    return {"success": True, "data": result.model_dump(mode="json")}


@router.get("/commits/{commit_id}/stats")
async def get_commit_stats(
    commit_id: str,
    git: GitRepository = Depends(get_git_repository),
) -> dict[str, Any]:
    """Lines added and removed by one commit."""
    await _require_repository(git)
    stats = await git.commit_stats(commit_id)
    return {"success": True, "data": stats.model_dump()}


@router.get("/config")
async def get_config(git: GitRepository = Depends(get_git_repository)) -> dict[str, Any]:
    await _require_repository(git)
    return {"success": True, "data": await git.get_config()}


@router.get("/branches")
async def get_branches(git: GitRepository = Depends(get_git_repository)) -> dict[str, Any]:
    await _require_repository(git)
    branches = await git.branches()
    return {"success": True, "data": branches.model_dump()}


@router.get("/status")
async def get_status(git: GitRepository = Depends(get_git_repository)) -> dict[str, Any]:
    """Working tree changes as reported by ``git status --porcelain``."""
    await _require_repository(git)
    entries = await git.status()
    return {"success": True, "data": [entry.model_dump() for entry in entries]}
