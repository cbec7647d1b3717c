"""
Diff hunk models.

A hunk is the diff context captured with one review comment; a rendered
hunk is its projection onto a fixed display width.
"""

from typing import Optional

from pydantic import BaseModel, Field

from review_time_travel.models.types import RepoFilePath


class DiffHunk(BaseModel):
    """The diff context surrounding one comment's anchor."""

    file: RepoFilePath = Field(description="File the hunk belongs to")
    anchor_line: Optional[int] = Field(default=None, description="Line the comment is anchored to")
    anchor_line_range: Optional[tuple[int, int]] = Field(
        default=None,
        description="Inclusive (start, end) new-side line range covered by the hunk",
    )
    raw_lines: tuple[str, ...] = Field(description="Hunk text, one entry per line")
    owning_comment_id: int = Field(description="Comment the hunk was captured with")

    class Config:
        frozen = True

    @property
    def text(self) -> str:
        return "\n".join(self.raw_lines)


class RenderedDiffHunk(BaseModel):
    """A hunk wrapped or truncated to a specific display width."""

    hunk: DiffHunk = Field(description="The source hunk")
    width: int = Field(description="Width the lines were rendered for")
    lines: tuple[str, ...] = Field(description="Display lines, blank lines preserved")

    class Config:
        frozen = True

    @property
    def rendered(self) -> str:
        """The rendered body with a trailing newline."""
        if not self.lines:
            return ""
        return "\n".join(self.lines) + "\n"
