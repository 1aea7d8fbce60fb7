import base64
import binascii
import logging
from pathlib import Path

from turbome.models.common import BatchResult
from turbome.models.files import (
    CommitOptions,
    DeleteResult,
    Encoding,
    FileRecord,
    RequestedEncoding,
    SaveResult,
)
from turbome.services.base import NotFoundError, ServiceError, ValidationError
from turbome.services.git_repository import GitRepository
from turbome.services.utils.file_utils import get_mime_type, get_mtime, is_binary_file, sha256_hex
from turbome.utils.path_utils import resolve_storage_path

logger = logging.getLogger(__name__)


class FileStorage:
    """
    Reads and writes files under the storage root.

    The filesystem is authoritative: a write succeeds once the bytes are on
    disk. Staging and committing the change afterwards is best effort and a
    git failure is only logged.
    """

    def __init__(self, root: Path, git: GitRepository) -> None:
        self.root = root
        self.git = git

    def resolve(self, file_path: str) -> Path:
        return resolve_storage_path(self.root, file_path)

    def _stat_file(self, file_path: str, full_path: Path):
        try:
            stat_info = full_path.stat()
        except FileNotFoundError:
            raise NotFoundError(f"File '{file_path}' does not exist") from None
        if not full_path.is_file():
            raise ValidationError(f"Path '{file_path}' is not a file")
        return stat_info

    def read(
        self,
        file_path: str,
        encoding: RequestedEncoding = "auto",
        metadata_only: bool = False,
    ) -> FileRecord:
        """
        Read a file and its metadata.

        Args:
            file_path: Path relative to the storage root.
            encoding: ``auto`` picks base64 for binary files and text otherwise.
            metadata_only: Skip reading the content.

        Raises:
            InvalidPathError: If the path is unsafe.
            NotFoundError: If the file does not exist.
            ValidationError: If the path is not a regular file, or a binary
                file is requested as text.
        """
        full_path = self.resolve(file_path)
        stat_info = self._stat_file(file_path, full_path)

        binary = is_binary_file(file_path)
        resolved_encoding: Encoding
        if encoding == "auto":
            resolved_encoding = "base64" if binary else "text"
        else:
            resolved_encoding = encoding

        if binary and resolved_encoding == "text":
            raise ValidationError(
                f"File '{file_path}' is a binary file and cannot be encoded as text. "
                "Use base64 encoding instead."
            )

        record = FileRecord(
            file_name=full_path.name,
            file_path=file_path,
            size=stat_info.st_size,
            encoding=resolved_encoding,
            mime_type=get_mime_type(file_path),
            is_binary=binary,
            last_modified=get_mtime(stat_info),
        )
        if metadata_only:
            return record

        data = full_path.read_bytes()
        if resolved_encoding == "text":
            try:
                record.content = data.decode("utf-8")
            except UnicodeDecodeError:
                raise ValidationError(
                    f"File '{file_path}' is not valid UTF-8 text. Use base64 encoding instead."
                ) from None
        else:
            record.content = base64.b64encode(data).decode("ascii")
        record.content_sha256 = sha256_hex(data)
        return record

    def read_many(
        self,
        file_paths: list[str],
        encoding: RequestedEncoding = "auto",
        metadata_only: bool = False,
    ) -> BatchResult[FileRecord]:
        """Read several files; one failing path never fails the batch."""
        batch = BatchResult[FileRecord](total_count=len(file_paths))
        for file_path in file_paths:
            try:
                batch.record_result(self.read(file_path, encoding, metadata_only))
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to read {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "READ_ERROR", str(e))
        return batch

    async def _commit_best_effort(
        self,
        options: CommitOptions,
        add: list[str] | None = None,
        remove: list[str] | None = None,
    ) -> bool:
        """Stage and commit a change if the root is a repository. Never raises."""
        described = ", ".join((add or []) + (remove or []))
        try:
            if not await self.git.is_repository():
                logger.info(f"Not a git repository, skipping git operations for: {described}")
                return False
            if add:
                await self.git.add_paths(add)
            if remove:
                await self.git.remove_paths(remove)
            return await self.git.commit(
                options.commit_message,
                author_name=options.author_name,
                author_email=options.author_email,
            )
        except ServiceError as e:
            logger.warning(f"Git operations failed for {described}: {e.message}")
            return False

    def _write_bytes(self, file_path: str, content: str, encoding: Encoding) -> tuple[Path, bool]:
        full_path = self.resolve(file_path)
        if full_path.is_dir():
            raise ValidationError(f"Path '{file_path}' is a directory")

        if encoding == "base64":
            try:
                data = base64.b64decode(content, validate=True)
            except (binascii.Error, ValueError):
                raise ValidationError(f"Content for '{file_path}' is not valid base64") from None
        else:
            data = content.encode("utf-8")

        existed = full_path.exists()
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        return full_path, not existed

    async def write(
        self,
        file_path: str,
        content: str,
        encoding: Encoding,
        options: CommitOptions,
    ) -> SaveResult:
        """
        Create or overwrite a file, then try to commit it.

        Raises:
            InvalidPathError: If the path is unsafe.
            ValidationError: If the path is a directory or base64 content is malformed.
        """
        full_path, created = self._write_bytes(file_path, content, encoding)
        stat_info = full_path.stat()
        logger.info(f"File {'created' if created else 'updated'}: {file_path}")

        committed = await self._commit_best_effort(options, add=[file_path])
        return SaveResult(
            file_path=file_path,
            size=stat_info.st_size,
            encoding=encoding,
            last_modified=get_mtime(stat_info),
            created=created,
            committed=committed,
        )

    async def rename(
        self,
        old_path: str,
        new_path: str,
        content: str,
        encoding: Encoding,
        options: CommitOptions,
    ) -> SaveResult:
        """
        Move a file by writing the new path and deleting the old one.

        The new file is written first; git then stages both sides in one
        commit; finally the old file is unlinked if git has not already
        removed it. The old path is gone afterwards whether or not the commit
        succeeded.

        Raises:
            InvalidPathError: If either path is unsafe.
            NotFoundError: If the old file does not exist.
        """
        old_full_path = self.resolve(old_path)
        self.resolve(new_path)
        self._stat_file(old_path, old_full_path)

        new_full_path, _ = self._write_bytes(new_path, content, encoding)
        stat_info = new_full_path.stat()

        committed = await self._commit_best_effort(options, add=[new_path], remove=[old_path])

        try:
            old_full_path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to remove old file {old_path}: {e}")

        logger.info(f"File renamed: {old_path} -> {new_path}")
        return SaveResult(
            file_path=new_path,
            size=stat_info.st_size,
            encoding=encoding,
            last_modified=get_mtime(stat_info),
            created=False,
            committed=committed,
            operation="rename",
            renamed_from=old_path,
        )

    async def delete(self, file_path: str, options: CommitOptions | None = None) -> DeleteResult:
        """
        Delete a file, then try to commit the removal.

        Raises:
            InvalidPathError: If the path is unsafe.
            NotFoundError: If the file does not exist.
        """
        full_path = self.resolve(file_path)
        self._stat_file(file_path, full_path)

        full_path.unlink()
        logger.info(f"File deleted: {file_path}")

        options = options or CommitOptions(commit_message=f"Delete {file_path}")
        committed = await self._commit_best_effort(options, remove=[file_path])
        return DeleteResult(file_path=file_path, committed=committed)

    async def delete_many(
        self,
        file_paths: list[str],
        commit_message: str | None = None,
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> BatchResult[DeleteResult]:
        batch = BatchResult[DeleteResult](total_count=len(file_paths))
        for file_path in file_paths:
            options = CommitOptions(
                commit_message=commit_message or f"Delete {file_path}",
                author_name=author_name,
                author_email=author_email,
            )
            try:
                batch.record_result(await self.delete(file_path, options))
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to delete {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "DELETE_ERROR", str(e))
        return batch

    async def save_many(self, requests: list[dict]) -> BatchResult[SaveResult]:
        """
        Save or rename several files.

        Each request carries ``file_path``, ``content``, ``encoding`` and
        ``commit_message``, optionally ``author_name``, ``author_email`` and
        ``previous_path``.
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

            encoding = request.get("encoding") or "text"
            if encoding not in ("text", "base64"):
                batch.record_error(file_path, "VALIDATION_ERROR", f"Unsupported encoding '{encoding}'")
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
                    result = await self.rename(previous_path, file_path, content, encoding, options)
                else:
                    result = await self.write(file_path, content, encoding, options)
                batch.record_result(result)
            except ServiceError as e:
                batch.record_error(file_path, e.error_code, e.message)
            except OSError as e:
                logger.error(f"Failed to save {file_path}: {e}", exc_info=True)
                batch.record_error(file_path, "SAVE_ERROR", str(e))
        return batch
