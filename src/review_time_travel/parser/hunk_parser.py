"""
Review comment hunk parser using the unidiff library.

GitHub stores each review comment with the diff hunk it was written
against, truncated at the commented line. The truncated hunk's header
counts no longer match its body, so the header is rewritten from the
body before the text is handed to unidiff.
"""

import re
from typing import Optional

from pydantic import BaseModel, Field
from unidiff import PatchSet
from unidiff.errors import UnidiffParseError

_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@(.*)$")


class HunkParserError(Exception):
    """Error during hunk parsing."""
    pass


class HunkLine(BaseModel):
    """One line of a parsed hunk."""

    line_type: str = Field(description="'+', '-' or ' '")
    text: str = Field(description="Line content without the diff marker")
    source_line_no: Optional[int] = Field(default=None, description="Line in the old file")
    target_line_no: Optional[int] = Field(default=None, description="Line in the new file")

    class Config:
        frozen = True

    @property
    def is_added(self) -> bool:
        return self.line_type == "+"

    @property
    def is_removed(self) -> bool:
        return self.line_type == "-"


class ParsedHunk(BaseModel):
    """A comment hunk with line numbers resolved."""

    source_start: int = Field(description="Starting line in source file")
    source_length: int = Field(description="Number of lines in source")
    target_start: int = Field(description="Starting line in target file")
    target_length: int = Field(description="Number of lines in target")
    section_header: str = Field(default="", description="Text after the closing @@")
    lines: tuple[HunkLine, ...] = Field(default=(), description="Body lines")

    class Config:
        frozen = True

    @property
    def target_range(self) -> Optional[tuple[int, int]]:
        """Inclusive new-side line range, or None for a pure deletion."""
        if self.target_length == 0:
            return None
        return (self.target_start, self.target_start + self.target_length - 1)

    @property
    def last_target_line(self) -> Optional[HunkLine]:
        """The last line present on the new side, where GitHub anchors the comment."""
        for line in reversed(self.lines):
            if line.target_line_no is not None:
                return line
        return None

    def target_line(self, line_number: int) -> Optional[HunkLine]:
        """Find the body line at a given new-side line number."""
        for line in self.lines:
            if line.target_line_no == line_number:
                return line
        return None


class HunkParser:
    """
    Parse comment diff hunks using the unidiff library.
    """

    @staticmethod
    def _normalise(hunk_text: str) -> tuple[str, str]:
        """
        Rewrite the hunk header so its counts match the body.

        Args:
            hunk_text: Raw ``diff_hunk`` text from a review comment.

        Returns:
            Tuple of (normalised hunk text, section header).
        """
        raw_lines = hunk_text.splitlines()
        if not raw_lines:
            raise HunkParserError("empty hunk")

        match = _HUNK_HEADER.match(raw_lines[0])
        if match is None:
            raise HunkParserError(f"invalid hunk header: {raw_lines[0]!r}")
        source_start, target_start, section = match.groups()

        body: list[str] = []
        source_length = 0
        target_length = 0
        for line in raw_lines[1:]:
            if line.startswith("\\"):
                body.append(line)
                continue
            if line == "":
                # Editors and APIs sometimes strip the marker of blank context lines.
                line = " "
            marker = line[0]
            if marker == "+":
                target_length += 1
            elif marker == "-":
                source_length += 1
            elif marker == " ":
                source_length += 1
                target_length += 1
            else:
                raise HunkParserError(f"unexpected line in hunk: {line!r}")
            body.append(line)

        header = f"@@ -{source_start},{source_length} +{target_start},{target_length} @@{section}"
        return "\n".join([header, *body]) + "\n", section.strip()

    @classmethod
    def parse(cls, hunk_text: str, file_path: str = "file") -> ParsedHunk:
        """
        Parse a single comment hunk.

        Args:
            hunk_text: The ``diff_hunk`` text of a review comment.
            file_path: Path used for the synthetic file header.

        Returns:
            ParsedHunk with per-line source and target numbers.

        Raises:
            HunkParserError: If parsing fails.
        """
        normalised, section = cls._normalise(hunk_text)
        patch_text = f"--- a/{file_path}\n+++ b/{file_path}\n{normalised}"
        try:
            patch_set = PatchSet(patch_text)
        except UnidiffParseError as e:
            raise HunkParserError(f"Failed to parse hunk: {e}") from e

        if len(patch_set) != 1 or len(patch_set[0]) != 1:
            raise HunkParserError("expected exactly one hunk")
        hunk = patch_set[0][0]

        lines = tuple(
            HunkLine(
                line_type=line.line_type,
                text=line.value.rstrip("\n").rstrip("\r"),
                source_line_no=line.source_line_no,
                target_line_no=line.target_line_no,
            )
            for line in hunk
            if line.line_type in ("+", "-", " ")
        )
        return ParsedHunk(
            source_start=hunk.source_start,
            source_length=hunk.source_length,
            target_start=hunk.target_start,
            target_length=hunk.target_length,
            section_header=section,
            lines=lines,
        )

    @classmethod
    def try_parse(cls, hunk_text: Optional[str], file_path: str = "file") -> Optional[ParsedHunk]:
        """Parse a hunk, returning None for missing or malformed text."""
        if not hunk_text or not hunk_text.strip():
            return None
        try:
            return cls.parse(hunk_text, file_path)
        except HunkParserError:
            return None
