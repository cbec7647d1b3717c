"""
Review comment models.

Models representing pull request review comments as delivered by the
comment-intake collaborator.
"""

from typing import Any, NamedTuple, Optional

from pydantic import BaseModel, Field

from review_time_travel.models.types import CommitSha, RepoFilePath


class Anchor(NamedTuple):
    """The (commit, file, line) triple a comment was attached to."""

    commit: CommitSha
    file: RepoFilePath
    line_number: int


class ReviewComment(BaseModel):
    """A review comment attached to a line of a pull request diff."""

    id: int = Field(description="Comment identifier")
    body: Optional[str] = Field(default=None, description="Comment text")
    author: Optional[str] = Field(default=None, description="Login of the reviewer")
    file_path: Optional[str] = Field(default=None, description="Repository-relative path")
    line_number: Optional[int] = Field(
        default=None,
        description="Line in the file at the comment's commit",
    )
    original_line_number: Optional[int] = Field(
        default=None,
        description="Line in the file when the comment was first made",
    )
    diff_hunk: Optional[str] = Field(default=None, description="Diff context captured with the comment")
    commit_sha: Optional[str] = Field(default=None, description="Commit the comment is anchored to")
    in_reply_to_id: Optional[int] = Field(default=None, description="Parent comment for replies")
    created_at: Optional[str] = Field(default=None, description="Creation timestamp (ISO 8601)")

    class Config:
        frozen = True

    @property
    def anchor_line(self) -> Optional[int]:
        """Line the comment refers to, preferring the current over the original line."""
        if self.line_number is not None:
            return self.line_number
        return self.original_line_number

    @property
    def anchor(self) -> Optional[Anchor]:
        """The comment's anchor, or None when any part of it is missing."""
        line = self.anchor_line
        if not self.commit_sha or not self.file_path or line is None:
            return None
        return Anchor(CommitSha(self.commit_sha), RepoFilePath(self.file_path), line)

    @property
    def has_diff_context(self) -> bool:
        """Check whether the comment carries non-blank diff hunk text."""
        return bool(self.diff_hunk and self.diff_hunk.strip())

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "ReviewComment":
        """
        Build a comment from a GitHub review comment payload.

        Accepts both the GitHub REST field names (``path``, ``line``,
        ``original_line``, ``commit_id``, ``user.login``) and this model's
        own field names.

        Args:
            data: The decoded JSON object for one comment.

        Returns:
            The corresponding ReviewComment.
        """
        user = data.get("user") or {}
        return cls(
            id=data["id"],
            body=data.get("body"),
            author=data.get("author") or user.get("login"),
            file_path=data.get("file_path") or data.get("path"),
            line_number=_first_present(data, "line_number", "line"),
            original_line_number=_first_present(data, "original_line_number", "original_line"),
            diff_hunk=data.get("diff_hunk"),
            commit_sha=data.get("commit_sha") or data.get("commit_id"),
            in_reply_to_id=data.get("in_reply_to_id"),
            created_at=data.get("created_at"),
        )


def _first_present(data: dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return None
