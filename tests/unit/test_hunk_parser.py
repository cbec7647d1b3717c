"""
Unit tests for the comment hunk parser.
"""

import pytest

from review_time_travel.parser.hunk_parser import HunkParser, HunkParserError


class TestHunkParser:
    """Tests for the HunkParser class."""

    def test_parse_full_hunk(self, simple_hunk: str) -> None:
        """Test parsing a hunk whose header matches its body."""
        parsed = HunkParser.parse(simple_hunk, "src/main.rs")

        assert parsed.target_start == 8
        assert parsed.target_length == 5
        assert parsed.target_range == (8, 12)
        assert parsed.section_header == "fn main() {"
        assert parsed.last_target_line is not None
        assert parsed.last_target_line.target_line_no == 12
        assert parsed.last_target_line.text == "line 12"

    def test_truncated_hunk_is_normalised(self) -> None:
        """Test that GitHub's truncated hunks parse despite stale header counts."""
        hunk = "@@ -1,20 +1,25 @@\n context\n+added"

        parsed = HunkParser.parse(hunk)

        assert parsed.target_length == 2
        assert parsed.source_length == 1
        assert parsed.target_line(2) is not None
        assert parsed.target_line(2).is_added

    def test_blank_context_line_without_marker(self) -> None:
        """Test that an empty body line counts as blank context."""
        hunk = "@@ -1,3 +1,3 @@\n a\n\n b"

        parsed = HunkParser.parse(hunk)

        assert parsed.target_range == (1, 3)
        assert parsed.target_line(2).text == ""

    def test_no_newline_marker_is_ignored(self) -> None:
        """Test that ``\\ No newline at end of file`` lines are skipped."""
        hunk = "@@ -1 +1 @@\n-old\n\\ No newline at end of file\n+new"

        parsed = HunkParser.parse(hunk)

        assert [line.line_type for line in parsed.lines] == ["-", "+"]

    def test_removed_lines_have_no_target(self) -> None:
        """Test source and target numbering of removed lines."""
        parsed = HunkParser.parse("@@ -5,2 +5,1 @@\n-gone\n kept")

        removed = parsed.lines[0]
        assert removed.is_removed
        assert removed.source_line_no == 5
        assert removed.target_line_no is None
        assert parsed.target_line(5).text == "kept"

    def test_pure_deletion_has_no_target_range(self) -> None:
        """Test that a hunk with only removals has no new-side range."""
        parsed = HunkParser.parse("@@ -3,2 +2,0 @@\n-a\n-b")
        assert parsed.target_range is None
        assert parsed.last_target_line is None

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "not a hunk",
            "@@ -1 +1 @@\n?bad line",
        ],
    )
    def test_invalid_hunks(self, text: str) -> None:
        """Test that malformed hunks raise HunkParserError."""
        with pytest.raises(HunkParserError):
            HunkParser.parse(text)

    @pytest.mark.parametrize("text", [None, "", "   \n", "garbage"])
    def test_try_parse_returns_none(self, text) -> None:
        """Test that try_parse never raises."""
        assert HunkParser.try_parse(text) is None
