"""
Diff context engine for Review Time Travel.

This package collects, renders and navigates the diff hunks captured
with review comments.
"""

from review_time_travel.diff_context.engine import (
    NO_CONTEXT_PLACEHOLDER,
    DiffContextState,
    clamp_index,
    collect_hunks,
    find_hunk_index,
    render_hunks,
    view,
)

__all__ = [
    "NO_CONTEXT_PLACEHOLDER",
    "DiffContextState",
    "clamp_index",
    "collect_hunks",
    "find_hunk_index",
    "render_hunks",
    "view",
]
