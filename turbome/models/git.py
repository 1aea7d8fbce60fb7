from pydantic import BaseModel, Field

from turbome.services.utils.constants import DEFAULT_PER_PAGE, MAX_PER_PAGE


class CommitRecord(BaseModel):
    """Read-only projection of one commit from `git log`."""

    id: str
    short_id: str
    title: str
    message: str
    author_name: str
    author_email: str
    authored_date: str
    committer_name: str
    committer_email: str
    committed_date: str
    parent_ids: list[str] = Field(default_factory=list)


class CommitsQuery(BaseModel):
    page: int = Field(default=1, ge=1)
    per_page: int = Field(default=DEFAULT_PER_PAGE, ge=1, le=MAX_PER_PAGE)
    ref_name: str = "HEAD"
    since: str | None = None
    until: str | None = None
    path: str | None = None
    author: str | None = None
    search: str | None = None


class CommitsPage(BaseModel):
    commits: list[CommitRecord] = Field(default_factory=list)
    total_count: int = 0
    page: int = 1
    per_page: int = DEFAULT_PER_PAGE
    total_pages: int = 0
    has_next_page: bool = False
    has_prev_page: bool = False


class CommitStats(BaseModel):
    additions: int
    deletions: int
    total: int


class StatusEntry(BaseModel):
    """One line of `git status --porcelain`."""

    status: str
    path: str
    # Source path of a rename or copy
    original_path: str | None = None


class BranchList(BaseModel):
    branches: list[str]
    current: str | None = None
