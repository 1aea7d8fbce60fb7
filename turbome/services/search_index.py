import logging
from pathlib import Path

from turbome.models.search import SearchResult, SearchResults, SearchType
from turbome.services.base import ValidationError
from turbome.services.utils.constants import (
    DEFAULT_SEARCH_LIMIT,
    MAX_CONTENT_MATCHES,
    MAX_FILENAME_MATCHES,
    MAX_SEARCH_LIMIT,
)
from turbome.services.utils.file_utils import is_binary_file
from turbome.services.utils.search_utils import (
    calculate_content_score,
    calculate_filename_score,
    extract_matched_text,
    relative_posix,
    walk_files,
)

logger = logging.getLogger(__name__)


class SearchIndex:
    """Filename and full-text search over the storage root, scored on the fly."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def search_filenames(
        self,
        query: str,
        include_hidden: bool = False,
        file_types: list[str] | None = None,
    ) -> list[SearchResult]:
        """Files whose basename contains ``query``, ignoring case."""
        lower_query = query.lower()
        results = []
        for file_path in walk_files(self.root, include_hidden, file_types):
            if lower_query not in file_path.name.lower():
                continue
            results.append(
                SearchResult(
                    type="file",
                    path=relative_posix(file_path, self.root),
                    filename=file_path.name,
                    score=calculate_filename_score(file_path.name, query),
                )
            )
            if len(results) >= MAX_FILENAME_MATCHES:
                break
        return results

    def search_content(
        self,
        query: str,
        include_hidden: bool = False,
        file_types: list[str] | None = None,
    ) -> list[SearchResult]:
        """One result per matching line, with a context window around the first hit."""
        lower_query = query.lower()
        results = []
        for file_path in walk_files(self.root, include_hidden, file_types):
            if is_binary_file(file_path.name):
                continue
            relative_path = relative_posix(file_path, self.root)
            try:
                with file_path.open("r", encoding="utf-8", errors="replace") as f:
                    for line_number, line in enumerate(f, start=1):
                        line = line.rstrip("\r\n")
                        if lower_query not in line.lower():
                            continue
                        results.append(
                            SearchResult(
                                type="content",
                                path=relative_path,
                                filename=file_path.name,
                                line=line_number,
                                content=line.strip(),
                                matched_text=extract_matched_text(line, query),
                                score=calculate_content_score(line, query, file_path.name),
                            )
                        )
                        if len(results) >= MAX_CONTENT_MATCHES:
                            return results
            except OSError as e:
                logger.warning(f"Skipping unreadable file {file_path}: {e}")
        return results

    def search(
        self,
        q: str,
        type: SearchType = "both",
        limit: int = DEFAULT_SEARCH_LIMIT,
        include_hidden: bool = False,
        file_types: list[str] | None = None,
    ) -> SearchResults:
        """
        Run a filename and/or content search and merge the results by score.

        Raises:
            ValidationError: If the query is blank.
        """
        if not q or not q.strip():
            raise ValidationError("Search query is required")
        limit = max(1, min(limit, MAX_SEARCH_LIMIT))

        results: list[SearchResult] = []
        if type in ("filename", "both"):
            results.extend(self.search_filenames(q, include_hidden, file_types))
        if type in ("content", "both"):
            results.extend(self.search_content(q, include_hidden, file_types))

        results.sort(key=lambda result: result.score, reverse=True)
        logger.debug(f"Search '{q}' ({type}) matched {len(results)} results")
        return SearchResults(
            results=results[:limit],
            total_count=len(results),
            query=q,
            search_type=type,
        )
