"""
Parser package for Review Time Travel.

This package parses the diff hunks stored with review comments
(using unidiff).
"""

from review_time_travel.parser.hunk_parser import HunkParser, HunkParserError, ParsedHunk

__all__ = [
    "HunkParser",
    "HunkParserError",
    "ParsedHunk",
]
