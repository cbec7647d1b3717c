"""
Review filter models.

Filters decide which comments are visible in the review list, the diff
context view and the time-travel verification passes.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.types import short_sha


class FilterKind(str, Enum):
    """Kind of review filter."""

    ALL = "all"
    UNRESOLVED = "unresolved"
    BY_FILE = "by_file"
    BY_REVIEWER = "by_reviewer"
    BY_COMMIT_RANGE = "by_commit_range"


class ReviewFilter(BaseModel):
    """Filter criteria for the visible comment set."""

    kind: FilterKind = Field(default=FilterKind.ALL, description="Kind of filter")
    value: Optional[str] = Field(
        default=None,
        description="File path or reviewer login for BY_FILE and BY_REVIEWER",
    )
    range_from: Optional[str] = Field(default=None, description="Range start commit")
    range_to: Optional[str] = Field(default=None, description="Range end commit")

    class Config:
        frozen = True

    @classmethod
    def all(cls) -> "ReviewFilter":
        return cls()

    @classmethod
    def unresolved(cls) -> "ReviewFilter":
        return cls(kind=FilterKind.UNRESOLVED)

    @classmethod
    def by_file(cls, path: str) -> "ReviewFilter":
        return cls(kind=FilterKind.BY_FILE, value=path)

    @classmethod
    def by_reviewer(cls, login: str) -> "ReviewFilter":
        return cls(kind=FilterKind.BY_REVIEWER, value=login)

    @classmethod
    def by_commit_range(cls, range_from: str, range_to: str) -> "ReviewFilter":
        return cls(kind=FilterKind.BY_COMMIT_RANGE, range_from=range_from, range_to=range_to)

    @property
    def label(self) -> str:
        """Human-readable label for display."""
        if self.kind == FilterKind.UNRESOLVED:
            return "Unresolved"
        if self.kind == FilterKind.BY_FILE:
            return f"File: {self.value}"
        if self.kind == FilterKind.BY_REVIEWER:
            return f"Reviewer: {self.value}"
        if self.kind == FilterKind.BY_COMMIT_RANGE:
            return f"Commits: {short_sha(self.range_from or '')}..{short_sha(self.range_to or '')}"
        return "All"

    def matches(self, comment: ReviewComment) -> bool:
        """Check whether a comment is visible under this filter."""
        if self.kind == FilterKind.UNRESOLVED:
            # Top-level comments stand in for unresolved threads.
            return comment.in_reply_to_id is None
        if self.kind == FilterKind.BY_FILE:
            return comment.file_path == self.value
        if self.kind == FilterKind.BY_REVIEWER:
            return comment.author == self.value
        if self.kind == FilterKind.BY_COMMIT_RANGE:
            # Only the range endpoints are matched; no commit ordering is consulted.
            return comment.commit_sha is not None and comment.commit_sha in (
                self.range_from,
                self.range_to,
            )
        return True

    def apply(self, comments: list[ReviewComment]) -> list[ReviewComment]:
        """Return the visible comments, preserving their order."""
        return [c for c in comments if self.matches(c)]
