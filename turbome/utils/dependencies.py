"""
Configuration and dependency management for the TurboMe server.
"""

import logging
from functools import lru_cache
from pathlib import Path

from fastapi import Depends

from turbome.services.file_storage import FileStorage
from turbome.services.git_repository import GitRepository
from turbome.services.markdown import MarkdownService
from turbome.services.search_index import SearchIndex
from turbome.services.workspace_index import WorkspaceIndex
from turbome.utils.config import ServiceConfig

logger = logging.getLogger(__name__)


@lru_cache
def get_base_config() -> ServiceConfig:
    """
    Retrieves the base server configuration from environment variables.

    This function is cached to avoid repeatedly reading and parsing environment
    variables.

    Returns:
        A cached instance of the ServiceConfig.
    """
    return ServiceConfig()


@lru_cache
def get_storage_root() -> Path:
    """
    Returns the storage root once it has been validated.

    Raises:
        ConfigurationError: If STORAGE_DIR is missing or not a directory.
    """
    root = get_base_config().get_storage_dir()
    logger.info(f"Using storage directory: {root}")
    return root


# --- Service Providers ---
# The services hold no state besides the storage root, so they are cheap to
# build per request. Overriding get_storage_root swaps the root for all of them.


def get_git_repository(
    root: Path = Depends(get_storage_root),
    config: ServiceConfig = Depends(get_base_config),
) -> GitRepository:
    return GitRepository(
        root,
        timeout=config.GIT_TIMEOUT,
        commit_timeout=config.GIT_COMMIT_TIMEOUT,
        probe_timeout=config.GIT_PROBE_TIMEOUT,
        default_branch=config.GIT_DEFAULT_BRANCH,
    )


def get_file_storage(
    root: Path = Depends(get_storage_root),
    git: GitRepository = Depends(get_git_repository),
) -> FileStorage:
    return FileStorage(root, git)


def get_markdown_service(storage: FileStorage = Depends(get_file_storage)) -> MarkdownService:
    return MarkdownService(storage)


def get_workspace_index(root: Path = Depends(get_storage_root)) -> WorkspaceIndex:
    return WorkspaceIndex(root)


def get_search_index(root: Path = Depends(get_storage_root)) -> SearchIndex:
    return SearchIndex(root)
