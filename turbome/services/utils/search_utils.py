import os
import pathlib
from collections.abc import Iterator

from .constants import SEARCH_CONTEXT_CHARS, VCS_DIRECTORIES


def normalize_file_types(file_types: list[str] | None) -> set[str]:
    """Turn ``["md", ".TXT", " "]`` into ``{".md", ".txt"}``."""
    normalized = set()
    for ext in file_types or []:
        ext = ext.strip().lower().lstrip(".")
        if ext:
            normalized.add(f".{ext}")
    return normalized


def walk_files(
    root: pathlib.Path,
    include_hidden: bool = False,
    file_types: list[str] | None = None,
) -> Iterator[pathlib.Path]:
    """
    Yield regular files under ``root`` in a stable, sorted order.

    Args:
        root: Directory to scan.
        include_hidden: Whether to descend into dot-directories and yield dot-files.
        file_types: Optional extensions (without the dot) to restrict the scan to.
    """
    extensions = normalize_file_types(file_types)

    for dirpath, dirs, files in os.walk(root):
        # Prune in place so os.walk does not descend into skipped directories
        dirs[:] = sorted(
            d for d in dirs
            if d not in VCS_DIRECTORIES and (include_hidden or not d.startswith("."))
        )

        for name in sorted(files):
            if not include_hidden and name.startswith("."):
                continue
            if extensions and pathlib.PurePath(name).suffix.lower() not in extensions:
                continue
            file_path = pathlib.Path(dirpath) / name
            if file_path.is_file():
                yield file_path


def relative_posix(path: pathlib.Path, root: pathlib.Path) -> str:
    return path.relative_to(root).as_posix()


def calculate_filename_score(filename: str, query: str) -> int:
    """Exact match beats prefix beats substring; shorter names score higher."""
    lower_filename = filename.lower()
    lower_query = query.lower()

    score = 0
    if lower_filename == lower_query:
        score += 100
    elif lower_filename.startswith(lower_query):
        score += 80
    elif lower_query in lower_filename:
        score += 60

    score += max(0, 50 - len(filename))
    return score


def calculate_content_score(content: str, query: str, filename: str) -> int:
    lower_content = content.lower()
    lower_query = query.lower()

    score = lower_content.count(lower_query) * 20

    if lower_query in filename.lower():
        score += 30

    # Whole-word match
    if f" {lower_query} " in lower_content:
        score += 15

    if len(content) > 200:
        score -= 5

    return score


def extract_matched_text(content: str, query: str) -> str:
    """Cut a window of context around the first match, with ellipses where truncated."""
    index = content.lower().find(query.lower())
    if index == -1:
        return content[:100]

    start = max(0, index - SEARCH_CONTEXT_CHARS)
    end = min(len(content), index + len(query) + SEARCH_CONTEXT_CHARS)

    result = content[start:end]
    if start > 0:
        result = "..." + result
    if end < len(content):
        result = result + "..."
    return result
