from typing import Literal

from pydantic import BaseModel, Field

SearchType = Literal["filename", "content", "both"]


class SearchResult(BaseModel):
    type: Literal["file", "content"]
    path: str
    filename: str
    score: int
    line: int | None = None
    content: str | None = None
    matched_text: str | None = None


class SearchResults(BaseModel):
    results: list[SearchResult] = Field(default_factory=list)
    total_count: int = 0
    query: str
    search_type: SearchType
