from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ItemError(BaseModel):
    """Failure of a single item inside a batch request."""

    file_path: str
    error_code: str
    message: str


class BatchResult(BaseModel, Generic[T]):
    """Outcome of a batch operation where every item is attempted independently."""

    results: list[T] = Field(default_factory=list)
    total_count: int = 0
    success_count: int = 0
    error_count: int = 0
    errors: list[ItemError] | None = None

    @property
    def success(self) -> bool:
        return self.success_count > 0

    def record_result(self, result: T) -> None:
        self.results.append(result)
        self.success_count = len(self.results)

    def record_error(self, file_path: str, error_code: str, message: str) -> None:
        if self.errors is None:
            self.errors = []
        self.errors.append(ItemError(file_path=file_path, error_code=error_code, message=message))
        self.error_count = len(self.errors)

    def summary(self, noun: str, verb: str) -> str:
        """Human readable outcome, e.g. "2 markdown files saved successfully, 1 failed"."""
        if self.error_count == 0:
            return f"All {self.success_count} {noun} {verb} successfully"
        return f"{self.success_count} {noun} {verb} successfully, {self.error_count} failed"
