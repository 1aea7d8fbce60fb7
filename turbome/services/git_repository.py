import logging
from datetime import datetime
from pathlib import Path

from turbome.models.git import BranchList, CommitRecord, CommitsQuery, CommitStats, StatusEntry
from turbome.services.base import GitError, ValidationError
from turbome.services.run import run
from turbome.utils.path_utils import is_safe_path

logger = logging.getLogger(__name__)

# Fields are separated by US (0x1f), records by RS (0x1e) so that subjects and
# bodies may contain any printable character.
_FIELD_SEP = "\x1f"
_RECORD_SEP = "\x1e"
LOG_FORMAT = "%x1f".join(
    ["%H", "%h", "%s", "%an", "%ae", "%aI", "%cn", "%ce", "%cI", "%P", "%b"]
) + "%x1e"
_LOG_FIELD_COUNT = 11

DEFAULT_AUTHOR_NAME = "Unknown"
DEFAULT_AUTHOR_EMAIL = "unknown@example.com"


def parse_log_output(output: str) -> list[CommitRecord]:
    """Parse `git log` output produced with LOG_FORMAT into commit records."""
    commits: list[CommitRecord] = []
    for record in output.split(_RECORD_SEP):
        record = record.strip("\n")
        if not record.strip():
            continue
        parts = record.split(_FIELD_SEP, _LOG_FIELD_COUNT - 1)
        if len(parts) < _LOG_FIELD_COUNT:
            logger.debug(f"Skipping malformed log record: {record[:80]!r}")
            continue

        (
            commit_id,
            short_id,
            title,
            author_name,
            author_email,
            authored_date,
            committer_name,
            committer_email,
            committed_date,
            parent_ids,
            body,
        ) = parts
        body = body.strip()
        commits.append(
            CommitRecord(
                id=commit_id,
                short_id=short_id,
                title=title,
                message=f"{title}\n\n{body}" if body else title,
                author_name=author_name,
                author_email=author_email,
                authored_date=authored_date,
                committer_name=committer_name,
                committer_email=committer_email,
                committed_date=committed_date,
                parent_ids=parent_ids.split(),
            )
        )
    return commits


def parse_config_output(output: str) -> dict[str, str]:
    """Parse `git config --list` into a flat map; later keys override earlier ones."""
    config: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if not sep or not key:
            continue
        config[key] = value
    return config


def parse_numstat_output(output: str) -> CommitStats:
    additions = 0
    deletions = 0
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 2:
            continue
        # Binary files report "-" instead of line counts
        additions += int(parts[0]) if parts[0].isdigit() else 0
        deletions += int(parts[1]) if parts[1].isdigit() else 0
    return CommitStats(additions=additions, deletions=deletions, total=additions + deletions)


def parse_status_output(output: str) -> list[StatusEntry]:
    """
    Parse `git status --porcelain -z`.

    Paths are NUL-terminated and never quoted. Renames and copies carry the
    original path as an extra field right after the new one.
    """
    entries = []
    fields = iter(output.split("\0"))
    for field in fields:
        if len(field) < 4:
            continue
        status = field[:2]
        original_path = None
        if "R" in status or "C" in status:
            original_path = next(fields, None)
        entries.append(
            StatusEntry(status=status.strip(), path=field[3:], original_path=original_path)
        )
    return entries


def _validate_iso_date(value: str, field_name: str) -> None:
    try:
        datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name} date format. Use ISO 8601 format.") from None


def _validate_revision(value: str, field_name: str) -> None:
    # Anything starting with "-" would be read by git as an option
    if not value or value.startswith("-"):
        raise ValidationError(f"Invalid {field_name}: '{value}'")


class GitRepository:
    """
    Git operations scoped to the storage root.

    Every command is run as ``git -C <root> ...`` with an argument vector, so
    the process working directory is never changed and no argument is
    interpreted by a shell.
    """

    def __init__(
        self,
        root: Path,
        timeout: float = 10.0,
        commit_timeout: float = 15.0,
        probe_timeout: float = 5.0,
        default_branch: str = "main",
    ) -> None:
        self.root = root
        self.timeout = timeout
        self.commit_timeout = commit_timeout
        self.probe_timeout = probe_timeout
        self.default_branch = default_branch

    async def _git(self, *args: str, timeout: float | None = None) -> str:
        """
        Run a git subcommand and return its stdout.

        Raises:
            GitError: If git exits non-zero, times out or is not installed.
        """
        cmd = ["git", "-C", self.root.as_posix(), "-c", "core.quotepath=off", *args]
        try:
            return_code, stdout, stderr = await run(
                cmd, cwd=self.root, timeout=timeout or self.timeout
            )
        except TimeoutError as e:
            raise GitError(f"Git command failed: {e}") from e
        except FileNotFoundError as e:
            raise GitError("Git command failed: git executable not found") from e

        if return_code != 0:
            raise GitError(
                f"Git command failed: git {args[0]}: {stderr.strip() or f'exit status {return_code}'}",
                returncode=return_code,
                stderr=stderr,
            )
        if stderr.strip() and not stderr.lstrip().startswith("warning:"):
            logger.debug(f"git {args[0]} stderr: {stderr.strip()}")
        return stdout

    async def is_repository(self) -> bool:
        """True if the storage root is inside a git working tree."""
        try:
            output = await self._git("rev-parse", "--is-inside-work-tree", timeout=self.probe_timeout)
        except GitError:
            return False
        return output.strip() == "true"

    async def init_if_absent(self) -> bool:
        """
        Run `git init` unless the root already is a repository.

        Returns:
            True if a new repository was created.
        """
        if await self.is_repository():
            return False

        logger.info(f"Initializing git repository in {self.root}")
        await self._git("init")
        try:
            await self._git("symbolic-ref", "HEAD", f"refs/heads/{self.default_branch}")
        except GitError as e:
            logger.debug(f"Could not set default branch to '{self.default_branch}': {e}")
        return True

    async def add_paths(self, paths: list[str]) -> list[str]:
        """
        Stage each path. A path that fails is logged and skipped.

        Returns:
            The paths that were staged.
        """
        staged = []
        for path in paths:
            try:
                await self._git("add", "--", path)
                staged.append(path)
            except GitError as e:
                logger.warning(f"Failed to add file {path} to git: {e}")
        return staged

    async def remove_paths(self, paths: list[str]) -> list[str]:
        """
        Remove each path from the index and the working tree. Failures are logged and skipped.

        Returns:
            The paths that were removed.
        """
        removed = []
        for path in paths:
            try:
                await self._git("rm", "--quiet", "--", path)
                removed.append(path)
            except GitError as e:
                logger.warning(f"Failed to remove file {path} from git: {e}")
        return removed

    async def has_staged_changes(self) -> bool:
        output = await self._git("diff", "--cached", "--name-only")
        return bool(output.strip())

    async def commit(
        self,
        message: str,
        author_name: str | None = None,
        author_email: str | None = None,
    ) -> bool:
        """
        Commit whatever is staged.

        Args:
            message: The commit message. Passed verbatim, no quoting needed.
            author_name: Optional author override.
            author_email: Optional author override.

        Returns:
            True if a commit was created, False if there was nothing to commit.

        Raises:
            ValidationError: If the message is empty.
            GitError: If git refuses the commit.
        """
        if not message or not message.strip():
            raise ValidationError("Commit message is required")

        if not await self.has_staged_changes():
            logger.info("No changes to commit")
            return False

        args = ["commit", "--quiet", "-m", message]
        if author_name or author_email:
            args.append(
                f"--author={author_name or DEFAULT_AUTHOR_NAME} <{author_email or DEFAULT_AUTHOR_EMAIL}>"
            )
        await self._git(*args, timeout=self.commit_timeout)
        logger.info(f"Git commit successful: {message}")
        return True

    async def has_commits(self) -> bool:
        try:
            await self._git("rev-parse", "--verify", "--quiet", "HEAD", timeout=self.probe_timeout)
        except GitError:
            return False
        return True

    async def log(self, query: CommitsQuery) -> tuple[list[CommitRecord], int]:
        """
        Read one page of history.

        Args:
            query: Page window and filters.

        Returns:
            ``(commits, total_count)`` where ``total_count`` ignores the page window.

        Raises:
            ValidationError: If a filter is malformed.
            GitError: If git fails.
        """
        _validate_revision(query.ref_name, "ref_name")
        if query.since:
            _validate_iso_date(query.since, "since")
        if query.until:
            _validate_iso_date(query.until, "until")
        if query.path and not is_safe_path(query.path):
            raise ValidationError(f"Invalid path filter: '{query.path}'")

        # A fresh repository has no HEAD yet; that is an empty history, not an error.
        if query.ref_name == "HEAD" and not await self.has_commits():
            return [], 0

        filters = []
        if query.since:
            filters.append(f"--since={query.since}")
        if query.until:
            filters.append(f"--until={query.until}")
        if query.author:
            filters.append(f"--author={query.author}")
        if query.search:
            filters.append(f"--grep={query.search}")
        filters.append(query.ref_name)
        if query.path:
            filters.extend(["--", query.path])

        count_output = await self._git("log", "--format=%H", *filters)
        total_count = len([line for line in count_output.splitlines() if line.strip()])

        skip = (query.page - 1) * query.per_page
        output = await self._git(
            "log",
            f"--format={LOG_FORMAT}",
            f"--skip={skip}",
            f"--max-count={query.per_page}",
            *filters,
        )
        return parse_log_output(output), total_count

    async def get_config(self) -> dict[str, str]:
        output = await self._git("config", "--list")
        return parse_config_output(output)

    async def status(self) -> list[StatusEntry]:
        output = await self._git("status", "--porcelain", "-z")
        return parse_status_output(output)

    async def current_branch(self) -> str | None:
        output = await self._git("branch", "--show-current")
        return output.strip() or None

    async def branches(self) -> BranchList:
        output = await self._git("branch", "--list", "--format=%(refname:short)")
        names = [line.strip() for line in output.splitlines() if line.strip()]
        return BranchList(branches=names, current=await self.current_branch())

    async def commit_stats(self, commit_id: str) -> CommitStats:
        _validate_revision(commit_id, "commit id")
        output = await self._git("show", "--numstat", "--format=", commit_id)
        return parse_numstat_output(output)
