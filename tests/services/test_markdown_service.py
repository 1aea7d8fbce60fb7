"""
Unit tests for MarkdownService: frontmatter reads, saves and partial edits.
"""

import pytest

from turbome.models.files import CommitOptions
from turbome.services.base import InvalidPathError, NotFoundError, ValidationError
from turbome.services.markdown import MarkdownService

OPTIONS = CommitOptions(commit_message="Edit frontmatter")
DOCUMENT = '---\nworkspace: "Inbox"\npriority: 2\npinned: true\n---\n# Title\n\nBody text\n'
BODY = "# Title\n\nBody text\n"


@pytest.fixture
def markdown(storage):
    return MarkdownService(storage)


class TestRead:

    def test_splits_frontmatter_and_body(self, markdown, write_file):
        write_file("note.md", DOCUMENT)

        record = markdown.read("note.md")

        assert record.frontmatter == {"workspace": "Inbox", "priority": 2, "pinned": True}
        assert record.content == BODY

    def test_file_without_frontmatter(self, markdown, write_file):
        write_file("plain.md", BODY)

        record = markdown.read("plain.md")

        assert record.frontmatter is None
        assert record.content == BODY

    def test_rejects_non_markdown(self, markdown, write_file):
        write_file("data.json", "{}")
        with pytest.raises(ValidationError):
            markdown.read("data.json")

    def test_read_many(self, markdown, write_file):
        write_file("note.md", DOCUMENT)

        batch = markdown.read_many(["note.md", "missing.md", "../x.md"])

        assert batch.success_count == 1
        assert [e.error_code for e in batch.errors] == ["NOT_FOUND", "INVALID_PATH"]


class TestSave:

    @pytest.mark.asyncio
    async def test_save_writes_frontmatter_block(self, markdown, storage_root):
        result = await markdown.save("new.md", BODY, OPTIONS, {"workspace": "Inbox", "pinned": False})

        assert result.created is True
        assert (storage_root / "new.md").read_text() == (
            '---\nworkspace: "Inbox"\npinned: false\n---\n' + BODY
        )

    @pytest.mark.asyncio
    async def test_save_without_frontmatter_writes_body(self, markdown, storage_root):
        await markdown.save("new.md", BODY, OPTIONS)
        assert (storage_root / "new.md").read_text() == BODY

    @pytest.mark.asyncio
    async def test_save_rejects_unsafe_and_non_markdown_paths(self, markdown):
        with pytest.raises(InvalidPathError):
            await markdown.save("../new.md", BODY, OPTIONS)
        with pytest.raises(ValidationError):
            await markdown.save("new.txt", BODY, OPTIONS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "fm",
        [{"title": "a\n---\nb"}, {"tags": ["ok", "x\ry"]}, {"bad:key": "v"}, {"": "v"}],
    )
    async def test_save_rejects_frontmatter_that_breaks_the_block(self, markdown, storage_root, fm):
        with pytest.raises(ValidationError):
            await markdown.save("new.md", BODY, OPTIONS, fm)
        assert not (storage_root / "new.md").exists()

    @pytest.mark.asyncio
    async def test_save_many_with_rename(self, markdown, write_file, storage_root):
        write_file("a.md", DOCUMENT)

        batch = await markdown.save_many(
            [
                {
                    "file_path": "b.md",
                    "previous_path": "a.md",
                    "content": BODY,
                    "frontmatter": {"workspace": "Done"},
                    "commit_message": "Move a to b",
                },
                {"file_path": "c.md", "content": "c", "commit_message": ""},
                {"file_path": "d.md", "content": "d", "commit_message": "Add d"},
            ]
        )

        assert batch.success is True
        assert (batch.success_count, batch.error_count) == (2, 1)
        assert batch.results[0].operation == "rename"
        assert batch.results[0].renamed_from == "a.md"
        assert not (storage_root / "a.md").exists()
        assert (storage_root / "b.md").read_text() == '---\nworkspace: "Done"\n---\n' + BODY

    @pytest.mark.asyncio
    async def test_rename_requires_markdown_on_both_sides(self, markdown, write_file):
        write_file("a.md", BODY)
        with pytest.raises(ValidationError):
            await markdown.rename("a.md", "a.txt", BODY, OPTIONS)


class TestUpdateFrontmatter:

    @pytest.mark.asyncio
    async def test_merges_keys_and_keeps_body(self, markdown, write_file, storage_root):
        write_file("note.md", DOCUMENT)

        result = await markdown.update_frontmatter("note.md", {"workspace": "Done", "owner": "jane"}, OPTIONS)

        assert result.updated_keys == ["workspace", "owner"]
        assert result.current_frontmatter == {
            "workspace": "Done",
            "priority": 2,
            "pinned": True,
            "owner": "jane",
        }
        assert markdown.read("note.md").content == BODY

    @pytest.mark.asyncio
    async def test_adds_block_to_plain_file(self, markdown, write_file, storage_root):
        write_file("plain.md", BODY)

        await markdown.update_frontmatter("plain.md", {"workspace": "Inbox"}, OPTIONS)

        assert (storage_root / "plain.md").read_text() == '---\nworkspace: "Inbox"\n---\n' + BODY

    @pytest.mark.asyncio
    async def test_rejects_multiline_value_and_leaves_file_untouched(self, markdown, write_file, storage_root):
        write_file("note.md", DOCUMENT)

        with pytest.raises(ValidationError, match="single line"):
            await markdown.update_frontmatter("note.md", {"title": "a\n---\ninjected: true"}, OPTIONS)

        assert (storage_root / "note.md").read_text() == DOCUMENT

    @pytest.mark.asyncio
    async def test_missing_file(self, markdown):
        with pytest.raises(NotFoundError):
            await markdown.update_frontmatter("missing.md", {"a": 1}, OPTIONS)

    @pytest.mark.asyncio
    async def test_update_many_validates_items(self, markdown, write_file):
        write_file("note.md", DOCUMENT)

        batch = await markdown.update_frontmatter_many(
            [
                {"file_path": "note.md", "frontmatter_updates": {"a": 1}, "commit_message": "Set a"},
                {"file_path": "note.md", "frontmatter_updates": ["a"], "commit_message": "Bad"},
                {"file_path": "note.md", "frontmatter_updates": {"a": 2}},
            ]
        )

        assert (batch.success_count, batch.error_count) == (1, 2)
        assert all(e.error_code == "VALIDATION_ERROR" for e in batch.errors)


class TestDeleteFrontmatter:

    @pytest.mark.asyncio
    async def test_deletes_only_named_key(self, markdown, write_file):
        write_file("note.md", DOCUMENT)

        result = await markdown.delete_frontmatter("note.md", ["workspace"], OPTIONS)

        assert result.deleted_keys == ["workspace"]
        assert result.remaining_frontmatter == {"priority": 2, "pinned": True}
        record = markdown.read("note.md")
        assert record.frontmatter == {"priority": 2, "pinned": True}
        assert record.content == BODY

    @pytest.mark.asyncio
    async def test_wildcard_removes_whole_block(self, markdown, write_file, storage_root):
        write_file("note.md", DOCUMENT)

        result = await markdown.delete_frontmatter("note.md", ["*"], OPTIONS)

        assert result.deleted_keys == ["workspace", "priority", "pinned"]
        assert result.remaining_frontmatter == {}
        assert (storage_root / "note.md").read_text() == BODY

    @pytest.mark.asyncio
    async def test_wildcard_strips_empty_block(self, markdown, write_file, storage_root):
        write_file("note.md", "---\n---\n" + BODY)

        result = await markdown.delete_frontmatter("note.md", ["*"], OPTIONS)

        assert result.deleted_keys == []
        assert result.remaining_frontmatter == {}
        assert (storage_root / "note.md").read_text() == BODY

    @pytest.mark.asyncio
    async def test_named_key_in_empty_block_is_not_found(self, markdown, write_file):
        write_file("note.md", "---\n---\n" + BODY)
        with pytest.raises(ValidationError, match="No matching"):
            await markdown.delete_frontmatter("note.md", ["workspace"], OPTIONS)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("keys", [[], ["*", "workspace"], ["unknown"]])
    async def test_invalid_key_lists(self, markdown, write_file, keys):
        write_file("note.md", DOCUMENT)
        with pytest.raises(ValidationError):
            await markdown.delete_frontmatter("note.md", keys, OPTIONS)

    @pytest.mark.asyncio
    async def test_file_without_frontmatter(self, markdown, write_file):
        write_file("plain.md", BODY)
        with pytest.raises(ValidationError, match="has no frontmatter"):
            await markdown.delete_frontmatter("plain.md", ["workspace"], OPTIONS)

    @pytest.mark.asyncio
    async def test_delete_many(self, markdown, write_file):
        write_file("note.md", DOCUMENT)

        batch = await markdown.delete_frontmatter_many(
            [
                {"file_path": "note.md", "frontmatter_keys": ["pinned"], "commit_message": "Unpin"},
                {"file_path": "missing.md", "frontmatter_keys": ["pinned"], "commit_message": "Unpin"},
            ]
        )

        assert batch.success is True
        assert batch.results[0].deleted_keys == ["pinned"]
        assert batch.errors[0].error_code == "NOT_FOUND"
