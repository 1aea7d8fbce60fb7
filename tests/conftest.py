import shutil
import subprocess
from unittest.mock import AsyncMock

import pytest

from turbome.services.file_storage import FileStorage
from turbome.services.git_repository import GitRepository


@pytest.fixture
def storage_root(tmp_path):
    """An empty storage root that is not a git repository."""
    root = tmp_path / "storage"
    root.mkdir()
    return root


@pytest.fixture
def mock_git():
    """A GitRepository stand-in that reports no repository."""
    git = AsyncMock(spec=GitRepository)
    git.is_repository.return_value = False
    return git


@pytest.fixture
def storage(storage_root, mock_git):
    return FileStorage(storage_root, mock_git)


@pytest.fixture
def git_root(storage_root):
    """A storage root with an initialized repository and a local identity."""
    subprocess.run(["git", "init", "--quiet"], cwd=storage_root, check=True)
    for key, value in (
        ("user.name", "Test User"),
        ("user.email", "test@example.com"),
        ("commit.gpgsign", "false"),
    ):
        subprocess.run(["git", "config", key, value], cwd=storage_root, check=True)
    return storage_root


@pytest.fixture
def git_repository(git_root):
    return GitRepository(git_root)


@pytest.fixture
def write_file(storage_root):
    """Create a file under the storage root, including parent directories."""

    def _write(relative_path: str, content: str):
        path = storage_root / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    return _write


def pytest_collection_modifyitems(items):
    """Skip tests marked ``requires_git`` when git is not installed."""
    if shutil.which("git") is not None:
        return
    skip = pytest.mark.skip(reason="git executable not available")
    for item in items:
        if "requires_git" in item.keywords:
            item.add_marker(skip)
