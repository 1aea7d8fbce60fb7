import logging
import re
from itertools import islice
from pathlib import Path

from turbome.models.workspace import WorkspaceFile, WorkspaceGroup, WorkspaceListing
from turbome.services.utils.constants import (
    DEFAULT_WORKSPACE_FILE_LIMIT,
    MAX_WORKSPACE_MATCHES,
    WORKSPACE_KEY,
    WORKSPACE_SCAN_LINES,
)
from turbome.services.utils.file_utils import is_binary_file
from turbome.services.utils.frontmatter import strip_quotes
from turbome.services.utils.search_utils import relative_posix, walk_files

logger = logging.getLogger(__name__)

_WORKSPACE_LINE_RE = re.compile(rf"^{WORKSPACE_KEY}:\s*(.+)$")


def find_workspace_lines(file_path: Path, max_lines: int = WORKSPACE_SCAN_LINES) -> list[tuple[int, str]]:
    """
    Find ``workspace: <name>`` lines within the head of a file.

    Returns:
        ``(line_number, workspace_name)`` pairs, line numbers starting at 1.
    """
    matches = []
    with file_path.open("r", encoding="utf-8", errors="replace") as f:
        for line_number, line in enumerate(islice(f, max_lines), start=1):
            match = _WORKSPACE_LINE_RE.match(line.rstrip("\r\n"))
            if not match:
                continue
            name = strip_quotes(match.group(1).strip()).strip()
            if name:
                matches.append((line_number, name))
    return matches


class WorkspaceIndex:
    """
    Groups files by the ``workspace`` key in their frontmatter.

    Nothing is stored: every query walks the storage root again, so moved or
    renamed files show up under their new path on the next call.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def list_workspaces(
        self,
        limit: int = DEFAULT_WORKSPACE_FILE_LIMIT,
        include_hidden: bool = False,
        file_types: list[str] | None = None,
    ) -> WorkspaceListing:
        """
        Scan the tree and group matching files by workspace name.

        Args:
            limit: Maximum number of files listed per workspace. ``count`` still
                reports the full number of matches.
            include_hidden: Whether to scan dot-files and dot-directories.
            file_types: Extensions to restrict the scan to, e.g. ``["md"]``.

        Returns:
            Workspaces sorted by file count, largest first.
        """
        found: list[WorkspaceFile] = []
        for file_path in walk_files(self.root, include_hidden, file_types):
            if is_binary_file(file_path.name):
                continue
            try:
                lines = find_workspace_lines(file_path)
            except OSError as e:
                logger.warning(f"Skipping unreadable file {file_path}: {e}")
                continue

            relative_path = relative_posix(file_path, self.root)
            for line_number, name in lines:
                found.append(
                    WorkspaceFile(
                        path=relative_path,
                        filename=file_path.name,
                        workspace=name,
                        line=line_number,
                    )
                )
            if len(found) >= MAX_WORKSPACE_MATCHES:
                logger.info(f"Workspace scan stopped after {MAX_WORKSPACE_MATCHES} matches")
                found = found[:MAX_WORKSPACE_MATCHES]
                break

        grouped: dict[str, list[WorkspaceFile]] = {}
        for item in found:
            grouped.setdefault(item.workspace, []).append(item)

        workspaces = [
            WorkspaceGroup(workspace=name, files=files[:limit], count=len(files))
            for name, files in grouped.items()
        ]
        workspaces.sort(key=lambda group: group.count, reverse=True)

        return WorkspaceListing(
            workspaces=workspaces,
            total_workspaces=len(workspaces),
            total_files=len(found),
        )
