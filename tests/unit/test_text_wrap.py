"""
Unit tests for terminal text wrapping.
"""

import pytest
from rich.cells import cell_len

from review_time_travel.diff_context.text_wrap import (
    truncate_line,
    truncate_to_height,
    wrap_block,
    wrap_line,
)


class TestWrapLine:
    """Tests for wrap_line."""

    def test_short_line_unchanged(self) -> None:
        """Test that lines within the width are kept."""
        assert wrap_line("+ let x = 1;", 80) == ["+ let x = 1;"]

    def test_blank_line_kept(self) -> None:
        """Test that a blank line yields one empty line."""
        assert wrap_line("", 10) == [""]

    def test_hard_wrap(self) -> None:
        """Test splitting an ASCII line into chunks."""
        assert wrap_line("abcdefghij", 4) == ["abcd", "efgh", "ij"]

    def test_zero_width_disables_wrapping(self) -> None:
        """Test that a non-positive width leaves the line as is."""
        assert wrap_line("abcdefghij", 0) == ["abcdefghij"]

    def test_wide_characters_not_split(self) -> None:
        """Test that double-width characters are never cut in half."""
        chunks = wrap_line("日本語テキスト", 5)

        assert "".join(chunks) == "日本語テキスト"
        assert all(cell_len(chunk) <= 5 for chunk in chunks)
        assert chunks[0] == "日本"

    def test_character_wider_than_width(self) -> None:
        """Test that an over-wide character gets a line of its own."""
        assert wrap_line("日本", 1) == ["日", "本"]


class TestTruncate:
    """Tests for truncation helpers."""

    def test_truncate_line(self) -> None:
        """Test cutting a line to a cell width."""
        assert truncate_line("abcdef", 3) == "abc"
        assert truncate_line("日本語", 5) == "日本"
        assert truncate_line("abc", 10) == "abc"

    def test_truncate_to_height(self) -> None:
        """Test limiting the number of lines."""
        assert truncate_to_height(["a", "b", "c"], 2) == ["a", "…"]
        assert truncate_to_height(["a", "b"], 2) == ["a", "b"]
        assert truncate_to_height(["a", "b"], 1) == ["…"]
        assert truncate_to_height(["a", "b"], 0) == ["a", "b"]


class TestWrapBlock:
    """Tests for wrap_block."""

    def test_wrap_keeps_blank_lines(self) -> None:
        """Test that blank lines survive wrapping."""
        assert wrap_block(["abcdef", "", "x"], 3) == ["abc", "def", "", "x"]

    def test_truncate_mode(self) -> None:
        """Test truncate mode keeps one line per input line."""
        assert wrap_block(["abcdef", "", "x"], 3, mode="truncate") == ["abc", "", "x"]

    def test_unknown_mode(self) -> None:
        """Test that unknown modes are rejected."""
        with pytest.raises(ValueError):
            wrap_block(["a"], 3, mode="squeeze")
