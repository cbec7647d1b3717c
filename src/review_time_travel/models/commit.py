"""
Commit metadata and file excerpt models.

Used by the time-travel view to describe the commit under the cursor and
to show the commented file around the mapped line.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from review_time_travel.models.types import CommitSha, RepoFilePath, short_sha


class CommitInfo(BaseModel):
    """Display metadata of one commit."""

    sha: CommitSha = Field(description="Full commit SHA")
    summary: str = Field(default="", description="First line of the commit message")
    author: str = Field(default="", description="Author name")
    timestamp: Optional[datetime] = Field(default=None, description="Author date")

    class Config:
        frozen = True

    @property
    def short_sha(self) -> str:
        return short_sha(self.sha)

    def header(self) -> str:
        """Format the commit as a one-line header."""
        header = f'Commit: {self.short_sha}  "{self.summary}"'
        details = [part for part in (self.author, self._date()) if part]
        if details:
            header += "  " + ", ".join(details)
        return header

    def _date(self) -> str:
        if self.timestamp is None:
            return ""
        return self.timestamp.strftime("%Y-%m-%d %H:%M")


class ExcerptLine(BaseModel):
    """One numbered line of a file excerpt."""

    number: int = Field(ge=1, description="1-based line number")
    text: str = Field(description="Line content")

    class Config:
        frozen = True


class FileExcerpt(BaseModel):
    """A window of a file at one commit, optionally marking one line."""

    commit: CommitSha = Field(description="Commit the lines were read from")
    file: RepoFilePath = Field(description="Repository-relative file path")
    lines: tuple[ExcerptLine, ...] = Field(default=(), description="Consecutive lines of the window")
    highlighted_line: Optional[int] = Field(
        default=None,
        description="Line the comment maps to at this commit, if it was found",
    )

    class Config:
        frozen = True

    def render(self) -> list[str]:
        """Format the excerpt as ``>  12 | text`` lines."""
        if not self.lines:
            return ["(No content near this line)"]
        width = max(3, len(str(self.lines[-1].number)))
        rendered = []
        for line in self.lines:
            marker = ">" if line.number == self.highlighted_line else " "
            rendered.append(f"{marker}{line.number:>{width}} | {line.text}")
        return rendered
