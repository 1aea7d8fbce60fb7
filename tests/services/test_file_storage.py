"""
Unit tests for FileStorage: reads, writes, renames and best-effort commits.
"""

import base64
from unittest.mock import patch

import pytest

from turbome.models.files import CommitOptions
from turbome.models.git import CommitsQuery
from turbome.services.base import GitError, InvalidPathError, NotFoundError, ValidationError
from turbome.services.file_storage import FileStorage

OPTIONS = CommitOptions(commit_message="Update file")
PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00binary"


class TestRead:

    def test_read_text_file(self, storage, write_file):
        write_file("notes/todo.md", "# Todo\n")

        record = storage.read("notes/todo.md")

        assert record.file_name == "todo.md"
        assert record.encoding == "text"
        assert record.mime_type == "text/markdown"
        assert record.is_binary is False
        assert record.content == "# Todo\n"
        assert record.size == 7
        assert len(record.content_sha256) == 64

    def test_binary_file_defaults_to_base64(self, storage, storage_root):
        (storage_root / "image.png").write_bytes(PNG_BYTES)

        record = storage.read("image.png")

        assert record.encoding == "base64"
        assert base64.b64decode(record.content) == PNG_BYTES

    def test_binary_file_rejects_text_encoding(self, storage, storage_root):
        (storage_root / "image.png").write_bytes(PNG_BYTES)

        with pytest.raises(ValidationError):
            storage.read("image.png", encoding="text")

    def test_text_file_can_be_read_as_base64(self, storage, write_file):
        write_file("a.txt", "hello")
        assert storage.read("a.txt", encoding="base64").content == base64.b64encode(b"hello").decode()

    def test_metadata_only_skips_content(self, storage, write_file):
        write_file("a.md", "hello")

        record = storage.read("a.md", metadata_only=True)

        assert record.content is None
        assert record.size == 5

    def test_missing_file(self, storage):
        with pytest.raises(NotFoundError):
            storage.read("missing.md")

    def test_directory_is_not_a_file(self, storage, storage_root):
        (storage_root / "folder").mkdir()
        with pytest.raises(ValidationError):
            storage.read("folder")

    def test_unsafe_path_never_reaches_the_filesystem(self, storage):
        with patch("turbome.services.file_storage.Path.stat") as mock_stat:
            with pytest.raises(InvalidPathError):
                storage.read("../etc/passwd")
        mock_stat.assert_not_called()

    def test_read_many_collects_per_path_errors(self, storage, write_file):
        write_file("a.md", "a")

        batch = storage.read_many(["a.md", "missing.md", "/abs.md"])

        assert batch.success is True
        assert batch.total_count == 3
        assert batch.success_count == 1
        assert batch.error_count == 2
        assert [e.error_code for e in batch.errors] == ["NOT_FOUND", "INVALID_PATH"]
        assert batch.errors[0].file_path == "missing.md"


class TestWrite:

    @pytest.mark.asyncio
    async def test_created_flag(self, storage, storage_root):
        first = await storage.write("new/dir/a.md", "one", "text", OPTIONS)
        second = await storage.write("new/dir/a.md", "two", "text", OPTIONS)

        assert first.created is True
        assert second.created is False
        assert (storage_root / "new/dir/a.md").read_text() == "two"
        assert second.size == 3

    @pytest.mark.asyncio
    async def test_base64_content_is_decoded(self, storage, storage_root):
        encoded = base64.b64encode(PNG_BYTES).decode()

        result = await storage.write("image.png", encoded, "base64", OPTIONS)

        assert (storage_root / "image.png").read_bytes() == PNG_BYTES
        assert result.encoding == "base64"

    @pytest.mark.asyncio
    async def test_invalid_base64_is_rejected(self, storage, storage_root):
        with pytest.raises(ValidationError):
            await storage.write("image.png", "not base64!!", "base64", OPTIONS)
        assert not (storage_root / "image.png").exists()

    @pytest.mark.asyncio
    async def test_skips_git_outside_a_repository(self, storage, mock_git):
        result = await storage.write("a.md", "x", "text", OPTIONS)

        assert result.committed is False
        mock_git.add_paths.assert_not_called()
        mock_git.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_stages_and_commits_inside_a_repository(self, storage, mock_git):
        mock_git.is_repository.return_value = True
        mock_git.commit.return_value = True
        options = CommitOptions(commit_message="Add a", author_name="Jane", author_email="jane@example.com")

        result = await storage.write("a.md", "x", "text", options)

        assert result.committed is True
        mock_git.add_paths.assert_awaited_once_with(["a.md"])
        mock_git.commit.assert_awaited_once_with(
            "Add a", author_name="Jane", author_email="jane@example.com"
        )

    @pytest.mark.asyncio
    async def test_git_failure_does_not_fail_the_write(self, storage, mock_git, storage_root):
        mock_git.is_repository.return_value = True
        mock_git.commit.side_effect = GitError("Git command failed: git commit: boom")

        result = await storage.write("a.md", "kept", "text", OPTIONS)

        assert result.committed is False
        assert (storage_root / "a.md").read_text() == "kept"

    @pytest.mark.asyncio
    async def test_save_many_reports_items_independently(self, storage):
        batch = await storage.save_many(
            [
                {"file_path": "a.md", "content": "a", "commit_message": "Add a"},
                {"file_path": "b.md", "content": "b", "commit_message": ""},
                {"file_path": "c.md", "content": "c", "commit_message": "Add c"},
            ]
        )

        assert batch.success is True
        assert batch.success_count == 2
        assert batch.error_count == 1
        assert batch.errors[0].file_path == "b.md"
        assert batch.errors[0].error_code == "VALIDATION_ERROR"


class TestRenameAndDelete:

    @pytest.mark.asyncio
    async def test_rename_moves_the_file(self, storage, write_file, storage_root):
        write_file("a.md", "original")

        result = await storage.rename("a.md", "folder/b.md", "original", "text", OPTIONS)

        assert result.operation == "rename"
        assert result.renamed_from == "a.md"
        assert result.file_path == "folder/b.md"
        assert (storage_root / "folder/b.md").read_text() == "original"
        assert not (storage_root / "a.md").exists()

    @pytest.mark.asyncio
    async def test_rename_completes_when_commit_fails(self, storage, mock_git, write_file, storage_root):
        mock_git.is_repository.return_value = True
        mock_git.commit.side_effect = GitError("Git command failed: git commit: boom")
        write_file("a.md", "original")

        result = await storage.rename("a.md", "b.md", "original", "text", OPTIONS)

        assert result.committed is False
        mock_git.add_paths.assert_awaited_once_with(["b.md"])
        mock_git.remove_paths.assert_awaited_once_with(["a.md"])
        assert (storage_root / "b.md").read_text() == "original"
        assert not (storage_root / "a.md").exists()

    @pytest.mark.asyncio
    async def test_rename_of_missing_file(self, storage, storage_root):
        with pytest.raises(NotFoundError):
            await storage.rename("missing.md", "b.md", "x", "text", OPTIONS)
        assert not (storage_root / "b.md").exists()

    @pytest.mark.asyncio
    async def test_delete(self, storage, mock_git, write_file, storage_root):
        mock_git.is_repository.return_value = True
        write_file("a.md", "x")

        result = await storage.delete("a.md")

        assert result.file_path == "a.md"
        assert not (storage_root / "a.md").exists()
        mock_git.remove_paths.assert_awaited_once_with(["a.md"])
        assert mock_git.commit.await_args.args[0] == "Delete a.md"

    @pytest.mark.asyncio
    async def test_delete_missing_file(self, storage):
        with pytest.raises(NotFoundError):
            await storage.delete("missing.md")

    @pytest.mark.asyncio
    async def test_delete_many_uses_given_message(self, storage, mock_git, write_file):
        mock_git.is_repository.return_value = True
        write_file("a.md", "x")

        batch = await storage.delete_many(["a.md", "missing.md"], commit_message="Clean up")

        assert batch.success_count == 1
        assert batch.errors[0].error_code == "NOT_FOUND"
        assert mock_git.commit.await_args.args[0] == "Clean up"


@pytest.mark.requires_git
class TestFileStorageWithGit:

    @pytest.mark.asyncio
    async def test_save_rename_delete_are_committed(self, git_root, git_repository):
        storage = FileStorage(git_root, git_repository)

        await storage.write("a.md", "first", "text", CommitOptions(commit_message="Add a"))
        await storage.rename("a.md", "b.md", "first", "text", CommitOptions(commit_message="Rename a"))
        await storage.delete("b.md")

        commits, total = await git_repository.log(CommitsQuery())
        assert total == 3
        assert [c.title for c in commits] == ["Delete b.md", "Rename a", "Add a"]
        assert await git_repository.status() == []
