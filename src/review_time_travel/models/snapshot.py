"""
Commit snapshot and line-mapping verification models.

A snapshot records the text of one anchored line at one commit. A
verification compares that snapshot against another commit and records
the outcome.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from review_time_travel.models.types import CommitSha, RepoFilePath, short_sha


class LineMappingStatus(str, Enum):
    """Outcome of verifying one anchored line against a target commit."""

    UNCHANGED = "unchanged"
    MOVED = "moved"
    MODIFIED = "modified"
    DELETED = "deleted"
    FILE_REMOVED = "file_removed"
    UNKNOWN = "unknown"

    @property
    def symbol(self) -> str:
        """Short marker for list displays."""
        return _SYMBOLS[self]

    @property
    def description(self) -> str:
        """Human-readable description of the status."""
        return self.value.replace("_", " ")


_SYMBOLS = {
    LineMappingStatus.UNCHANGED: "✓",
    LineMappingStatus.MOVED: "→",
    LineMappingStatus.MODIFIED: "~",
    LineMappingStatus.DELETED: "✗",
    LineMappingStatus.FILE_REMOVED: "⊘",
    LineMappingStatus.UNKNOWN: "?",
}


class CommitSnapshot(BaseModel):
    """The state of one line at one commit."""

    commit: CommitSha = Field(description="Commit the line was read from")
    file: RepoFilePath = Field(description="Repository-relative file path")
    line_number: int = Field(ge=1, description="1-based line number")
    text: str = Field(description="Exact line content, without the line terminator")

    class Config:
        frozen = True

    @property
    def location(self) -> str:
        return f"{self.file}:{self.line_number}@{short_sha(self.commit)}"


class LineMappingVerification(BaseModel):
    """Result of verifying one comment's anchor against one target commit."""

    comment_id: int = Field(description="Comment the verification belongs to")
    original_snapshot: Optional[CommitSnapshot] = Field(
        default=None,
        description="Snapshot of the anchored line (absent when it could not be captured)",
    )
    target_commit: CommitSha = Field(description="Commit the anchor was checked against")
    status: LineMappingStatus = Field(description="Verification outcome")
    new_line_number: Optional[int] = Field(
        default=None,
        description="Line number the text was found at, for MOVED",
    )
    reason: Optional[str] = Field(
        default=None,
        description="Why the line could not be verified, for UNKNOWN",
    )

    class Config:
        frozen = True

    @classmethod
    def unchanged(cls, comment_id: int, snapshot: CommitSnapshot, target: CommitSha) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.UNCHANGED,
            new_line_number=snapshot.line_number,
        )

    @classmethod
    def moved(
        cls,
        comment_id: int,
        snapshot: CommitSnapshot,
        target: CommitSha,
        new_line_number: int,
    ) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.MOVED,
            new_line_number=new_line_number,
        )

    @classmethod
    def modified(cls, comment_id: int, snapshot: CommitSnapshot, target: CommitSha) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.MODIFIED,
        )

    @classmethod
    def deleted(cls, comment_id: int, snapshot: CommitSnapshot, target: CommitSha) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.DELETED,
        )

    @classmethod
    def file_removed(cls, comment_id: int, snapshot: CommitSnapshot, target: CommitSha) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.FILE_REMOVED,
        )

    @classmethod
    def unknown(
        cls,
        comment_id: int,
        target: CommitSha,
        reason: str,
        snapshot: Optional[CommitSnapshot] = None,
    ) -> "LineMappingVerification":
        return cls(
            comment_id=comment_id,
            original_snapshot=snapshot,
            target_commit=target,
            status=LineMappingStatus.UNKNOWN,
            reason=reason,
        )

    @property
    def original_line(self) -> Optional[int]:
        if self.original_snapshot is None:
            return None
        return self.original_snapshot.line_number

    @property
    def offset(self) -> Optional[int]:
        """Line offset (positive = moved down, negative = moved up)."""
        if self.new_line_number is None or self.original_line is None:
            return None
        return self.new_line_number - self.original_line

    def display(self) -> str:
        """Format the verification as a one-line summary."""
        symbol = self.status.symbol
        line = self.original_line
        if self.status == LineMappingStatus.UNCHANGED:
            return f"{symbol} Line {line} → {line} ({self.status.description})"
        if self.status == LineMappingStatus.MOVED:
            offset = self.offset or 0
            return (
                f"{symbol} Line {line} → {self.new_line_number} "
                f"({self.status.description} {offset:+d} lines)"
            )
        if self.status == LineMappingStatus.UNKNOWN:
            return f"{symbol} Line {line if line is not None else '-'} (unknown: {self.reason})"
        return f"{symbol} Line {line} ({self.status.description})"
