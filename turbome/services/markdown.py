import logging
from typing import Any

from turbome.models.common import BatchResult
from turbome.models.files import (
    CommitOptions,
    DeleteFrontmatterResult,
    MarkdownRecord,
    SaveResult,
    UpdateFrontmatterResult,
)
from turbome.services.base import InvalidPathError, ServiceError, ValidationError
from turbome.services.file_storage import FileStorage
from turbome.services.utils import frontmatter
from turbome.services.utils.file_utils import is_markdown_file
from turbome.utils.path_utils import is_safe_path

logger = logging.getLogger(__name__)

DELETE_ALL_KEYS = "*"


class MarkdownService:
    """
    Markdown files as frontmatter plus body, stored through FileStorage.

    All writes go through the storage service, so they share its path checks
    and its best-effort commit behaviour.
    """

    def __init__(self, storage: FileStorage) -> None:
        self.storage = storage

    def _check_markdown_path(self, file_path: str) -> None:
        if not is_safe_path(file_path):
            raise InvalidPathError(file_path)
        if not is_markdown_file(file_path):
            raise ValidationError(f"File '{file_path}' is not a markdown file")

    def _check_frontmatter(self, fm: dict[str, Any] | None) -> None:
        # The block is line-oriented: a key or value spanning lines would end it early.
        for key, value in (fm or {}).items():
            if not key or any(ch in key for ch in ":\r\n"):
                raise ValidationError(f"Invalid frontmatter key: {key!r}")
            items = value if isinstance(value, (list, tuple)) else [value]
            if any(isinstance(item, str) and ("\n" in item or "\r" in item) for item in items):
                raise ValidationError(f"Frontmatter value for '{key}' must be a single line")

    def _read_text(self, file_path: str) -> tuple[dict[str, Any] | None, str]:
        record = self.storage.read(file_path, encoding="text")
        return frontmatter.parse(record.content or "")

    def read(self, file_path: str) -> MarkdownRecord:
        """
        Read a markdown file split into frontmatter and body.

        Raises:
            InvalidPathError: If the path is unsafe.
            ValidationError: If the path is not a markdown file.
            NotFoundError: If the file does not exist.
        """
        self._check_markdown_path(file_path)
        record = self.storage.read(file_path, encoding="text")
        fm, body = frontmatter.parse(record.content or "")
        return MarkdownRecord(
            file_name=record.file_name,
            file_path=record.file_path,
            size=record.size,
            last_modified=record.last_modified,
            content=body,
            frontmatter=fm,
        )

    def read_many(self, file_paths: list[str]) -> BatchResult[MarkdownRecord]:
        batch = BatchResult[MarkdownRecord](total_count=len(file_paths))
        for file_path in file_paths:
            try:
                batch.record_result(self.read(file_path))
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to read markdown file {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "READ_ERROR", str(e))
        return batch

    async def save(
        self,
        file_path: str,
        content: str,
        options: CommitOptions,
        fm: dict[str, Any] | None = None,
    ) -> SaveResult:
        """Write ``fm`` and ``content`` as one markdown file, then try to commit it."""
        self._check_markdown_path(file_path)
        self._check_frontmatter(fm)
        return await self.storage.write(
            file_path, frontmatter.serialize(fm, content), "text", options
        )

    async def rename(
        self,
        old_path: str,
        new_path: str,
        content: str,
        options: CommitOptions,
        fm: dict[str, Any] | None = None,
    ) -> SaveResult:
        for path in (old_path, new_path):
            if not is_safe_path(path):
                raise InvalidPathError(path)
        if not is_markdown_file(old_path) or not is_markdown_file(new_path):
            raise ValidationError("Both old and new paths must be markdown files")
        self._check_frontmatter(fm)

        return await self.storage.rename(
            old_path, new_path, frontmatter.serialize(fm, content), "text", options
        )

    async def save_many(self, requests: list[dict[str, Any]]) -> BatchResult[SaveResult]:
        """
        Save or rename several markdown files.

        Each request carries ``file_path``, ``content``, ``commit_message`` and
        optionally ``author_name``, ``author_email``, ``previous_path`` and
        ``frontmatter``. A request with ``previous_path`` different from
        ``file_path`` is a rename.
        """
        batch = BatchResult[SaveResult](total_count=len(requests))
        for request in requests:
            file_path = request.get("file_path") or "unknown"
            if not request.get("file_path") or not request.get("commit_message"):
                batch.record_error(
                    file_path,
                    "VALIDATION_ERROR",
                    "Missing required fields: file_path, content, commit_message",
                )
                continue

            options = CommitOptions(
                commit_message=request["commit_message"],
                author_name=request.get("author_name"),
                author_email=request.get("author_email"),
            )
            content = request.get("content") or ""
            previous_path = request.get("previous_path")
            try:
                if previous_path and previous_path != file_path:
                    result = await self.rename(
                        previous_path, file_path, content, options, request.get("frontmatter")
                    )
                else:
                    result = await self.save(file_path, content, options, request.get("frontmatter"))
                batch.record_result(result)
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to save markdown file {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "SAVE_ERROR", str(e))
        return batch

    async def update_frontmatter(
        self,
        file_path: str,
        updates: dict[str, Any],
        options: CommitOptions,
    ) -> UpdateFrontmatterResult:
        """
        Merge ``updates`` into the file's frontmatter, keeping the body as is.

        Raises:
            NotFoundError: If the file does not exist.
        """
        self._check_markdown_path(file_path)
        self._check_frontmatter(updates)
        current, body = self._read_text(file_path)
        merged = {**(current or {}), **updates}

        result = await self.storage.write(
            file_path, frontmatter.serialize(merged, body), "text", options
        )
        return UpdateFrontmatterResult(
            file_path=file_path,
            size=result.size,
            last_modified=result.last_modified,
            updated_keys=list(updates),
            current_frontmatter=merged,
            committed=result.committed,
        )

    async def delete_frontmatter(
        self,
        file_path: str,
        keys: list[str],
        options: CommitOptions,
    ) -> DeleteFrontmatterResult:
        """
        Remove keys from the file's frontmatter. ``["*"]`` removes the whole block.

        Raises:
            ValidationError: If the file has no frontmatter block, ``*`` is mixed
                with other keys, or none of the keys is present.
        """
        self._check_markdown_path(file_path)
        if not keys:
            raise ValidationError(
                'frontmatter_keys must be a non-empty array. Use ["*"] to delete all frontmatter.'
            )

        current, body = self._read_text(file_path)
        if current is None:
            raise ValidationError(f"File '{file_path}' has no frontmatter to delete")

        remaining = dict(current)
        wildcard = keys == [DELETE_ALL_KEYS]
        if wildcard:
            # An empty block is still a block, so "*" strips it.
            deleted = list(current)
            remaining = {}
        else:
            if DELETE_ALL_KEYS in keys:
                raise ValidationError(
                    f'Wildcard "*" must be used alone to delete all frontmatter in file \'{file_path}\''
                )
            deleted = []
            for key in keys:
                if key in remaining:
                    del remaining[key]
                    deleted.append(key)

        if not deleted and not wildcard:
            raise ValidationError(f"No matching frontmatter keys found to delete in file '{file_path}'")

        # An empty map serializes to the bare body.
        result = await self.storage.write(
            file_path, frontmatter.serialize(remaining, body), "text", options
        )
        return DeleteFrontmatterResult(
            file_path=file_path,
            size=result.size,
            last_modified=result.last_modified,
            deleted_keys=deleted,
            remaining_frontmatter=remaining,
            committed=result.committed,
        )

    async def update_frontmatter_many(
        self, requests: list[dict[str, Any]]
    ) -> BatchResult[UpdateFrontmatterResult]:
        batch = BatchResult[UpdateFrontmatterResult](total_count=len(requests))
        for request in requests:
            file_path = request.get("file_path") or "unknown"
            updates = request.get("frontmatter_updates")
            if not request.get("file_path") or updates is None or not request.get("commit_message"):
                batch.record_error(
                    file_path,
                    "VALIDATION_ERROR",
                    "Missing required fields: file_path, frontmatter_updates, commit_message",
                )
                continue
            if not isinstance(updates, dict):
                batch.record_error(
                    file_path,
                    "VALIDATION_ERROR",
                    "frontmatter_updates must be an object with key-value pairs",
                )
                continue

            try:
                batch.record_result(
                    await self.update_frontmatter(file_path, updates, _commit_options(request))
                )
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to update frontmatter of {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "UPDATE_ERROR", str(e))
        return batch

    async def delete_frontmatter_many(
        self, requests: list[dict[str, Any]]
    ) -> BatchResult[DeleteFrontmatterResult]:
        batch = BatchResult[DeleteFrontmatterResult](total_count=len(requests))
        for request in requests:
            file_path = request.get("file_path") or "unknown"
            if not request.get("file_path") or not request.get("commit_message"):
                batch.record_error(
                    file_path,
                    "VALIDATION_ERROR",
                    "Missing required fields: file_path, frontmatter_keys, commit_message",
                )
                continue

            try:
                batch.record_result(
                    await self.delete_frontmatter(
                        file_path, request.get("frontmatter_keys") or [], _commit_options(request)
                    )
                )
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to delete frontmatter of {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "DELETE_ERROR", str(e))
        return batch


def _commit_options(request: dict[str, Any]) -> CommitOptions:
    return CommitOptions(
        commit_message=request["commit_message"],
        author_name=request.get("author_name"),
        author_email=request.get("author_email"),
    )
