"""
Diff context engine.

Collects the diff hunks captured with the visible review comments,
renders them for a display width and tracks which hunk is selected in the
full-screen diff view. State is always rebuilt wholesale from its inputs.
"""

import logging
from typing import Optional, Sequence

from review_time_travel.diff_context.text_wrap import truncate_to_height, wrap_block
from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.filter import ReviewFilter
from review_time_travel.models.hunk import DiffHunk, RenderedDiffHunk
from review_time_travel.models.types import RepoFilePath
from review_time_travel.parser.hunk_parser import HunkParser

logger = logging.getLogger(__name__)

NO_CONTEXT_PLACEHOLDER = "(No diff context available for this comment)"


def _hunk_lines(text: str) -> tuple[str, ...]:
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return tuple(line.rstrip("\r") for line in lines)


def _sort_key(hunk: DiffHunk) -> tuple[str, bool, int, int]:
    # Hunks without an anchor line sort after anchored hunks of the same file.
    return (
        hunk.file,
        hunk.anchor_line is None,
        hunk.anchor_line or 0,
        hunk.owning_comment_id,
    )


def collect_hunks(
    comments: Sequence[ReviewComment],
    review_filter: Optional[ReviewFilter] = None,
) -> list[DiffHunk]:
    """
    Collect one hunk per visible comment that carries diff context.

    Hunks are ordered by file path, anchor line and comment id so that
    rebuilding from the same input always yields the same order.

    Args:
        comments: All review comments.
        review_filter: Filter selecting the visible comments (default: all).

    Returns:
        The ordered hunks.
    """
    review_filter = review_filter or ReviewFilter.all()
    hunks: list[DiffHunk] = []

    for comment in comments:
        if not review_filter.matches(comment):
            continue
        if not comment.file_path or not comment.has_diff_context:
            continue

        parsed = HunkParser.try_parse(comment.diff_hunk, comment.file_path)
        if parsed is None:
            logger.debug("Comment %s has an unparseable diff hunk", comment.id)
        hunks.append(
            DiffHunk(
                file=RepoFilePath(comment.file_path),
                anchor_line=comment.anchor_line,
                anchor_line_range=parsed.target_range if parsed else None,
                raw_lines=_hunk_lines(comment.diff_hunk or ""),
                owning_comment_id=comment.id,
            )
        )

    hunks.sort(key=_sort_key)
    return hunks


def render_hunks(
    hunks: Sequence[DiffHunk],
    max_width: int,
    mode: str = "wrap",
) -> list[RenderedDiffHunk]:
    """
    Render hunks for a display width.

    This is a pure function of its arguments.

    Args:
        hunks: Hunks to render.
        max_width: Display width in cells (0 or less leaves lines untouched).
        mode: ``"wrap"`` or ``"truncate"``.

    Returns:
        One rendered hunk per input hunk, in the same order.
    """
    return [
        RenderedDiffHunk(
            hunk=hunk,
            width=max_width,
            lines=tuple(wrap_block(list(hunk.raw_lines), max_width, mode)),
        )
        for hunk in hunks
    ]


def find_hunk_index(
    hunks: Sequence[DiffHunk],
    selected_comment: Optional[ReviewComment],
) -> Optional[int]:
    """
    Find the hunk owned by the selected comment.

    Returns:
        The index, or None when the selection has no hunk.
    """
    if selected_comment is None:
        return None
    for index, hunk in enumerate(hunks):
        if hunk.owning_comment_id == selected_comment.id:
            return index
    return None


def clamp_index(index: Optional[int], hunk_count: int) -> Optional[int]:
    """
    Clamp an index into ``[0, hunk_count - 1]``.

    Returns:
        The clamped index, or None ("no selection") when there are no hunks.
    """
    if hunk_count <= 0:
        return None
    if index is None or index < 0:
        return 0
    return min(index, hunk_count - 1)


class DiffContextState:
    """
    State container for the full-screen diff context view.

    Holds the rendered hunks, the width they were rendered for and the
    selected hunk.
    """

    def __init__(self) -> None:
        self._hunks: tuple[RenderedDiffHunk, ...] = ()
        self._cached_width = 0
        self._selected_index: Optional[int] = None

    @property
    def hunks(self) -> tuple[RenderedDiffHunk, ...]:
        return self._hunks

    @property
    def cached_width(self) -> int:
        return self._cached_width

    @property
    def selected_index(self) -> Optional[int]:
        return self._selected_index

    @property
    def selected_hunk(self) -> Optional[RenderedDiffHunk]:
        if self._selected_index is None:
            return None
        return self._hunks[self._selected_index]

    def __len__(self) -> int:
        return len(self._hunks)

    def rebuild(
        self,
        hunks: Sequence[RenderedDiffHunk],
        cached_width: int,
        preferred_index: Optional[int] = None,
    ) -> None:
        """
        Replace the hunk list and selection.

        Args:
            hunks: Freshly rendered hunks.
            cached_width: Width the hunks were rendered for.
            preferred_index: Index to select; defaults to the first hunk.
        """
        self._hunks = tuple(hunks)
        self._cached_width = cached_width
        self._selected_index = clamp_index(preferred_index, len(self._hunks))

    def rebuild_from_comments(
        self,
        comments: Sequence[ReviewComment],
        review_filter: Optional[ReviewFilter],
        max_width: int,
        selected_comment: Optional[ReviewComment] = None,
        mode: str = "wrap",
    ) -> None:
        """Collect, render and select in one step."""
        collected = collect_hunks(comments, review_filter)
        preferred = find_hunk_index(collected, selected_comment)
        self.rebuild(render_hunks(collected, max_width, mode), max_width, preferred)

    def move_next(self) -> None:
        """Select the next hunk; a no-op at the last hunk."""
        if self._selected_index is None:
            return
        if self._selected_index < len(self._hunks) - 1:
            self._selected_index += 1

    def move_previous(self) -> None:
        """Select the previous hunk; a no-op at the first hunk."""
        if self._selected_index is None:
            return
        if self._selected_index > 0:
            self._selected_index -= 1


def render_header(hunk: DiffHunk, index: int, total: int) -> str:
    """Build the ``path:line [i/n]`` header of the diff view."""
    location = hunk.file if hunk.anchor_line is None else f"{hunk.file}:{hunk.anchor_line}"
    return f"File: {location} [{index + 1}/{total}]"


def view(state: DiffContextState, max_height: int = 0) -> str:
    """
    Render the selected hunk of the diff context view as text.

    Args:
        state: The diff context state.
        max_height: Maximum lines including the header (0 = unlimited).

    Returns:
        Header plus hunk body, or a placeholder when there are no hunks.
    """
    current = state.selected_hunk
    if current is None or state.selected_index is None:
        return f"{NO_CONTEXT_PLACEHOLDER}\n"

    header = render_header(current.hunk, state.selected_index, len(state))
    body = list(current.lines)
    if max_height > 0:
        body_height = max_height - 1
        if body_height == 0:
            return f"{header}\n"
        body = truncate_to_height(body, body_height)

    return "\n".join([header, *body]) + "\n"
