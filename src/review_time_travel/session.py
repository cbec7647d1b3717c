"""
Review session update loop.

A ReviewSession owns everything a review screen shows: the comments, the
active filter, the diff context view and the time-travel navigator. All
state changes go through ``update``; verification passes come back into it
as messages, so the session itself is only ever touched from one thread.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Union

from review_time_travel.config import Config
from review_time_travel.diff_context.engine import DiffContextState, view as diff_context_view
from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.filter import ReviewFilter
from review_time_travel.models.snapshot import LineMappingVerification
from review_time_travel.repository.errors import DiscoveryError
from review_time_travel.time_travel.availability import TimeTravelContext, unavailable_message
from review_time_travel.time_travel.messages import (
    VerificationCompleted,
    VerificationFailed,
    VerificationRequest,
)
from review_time_travel.time_travel.navigator import RangeEmpty, TimeTravelNavigator
from review_time_travel.time_travel.runner import VerificationRunner

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    """Which view the session is showing."""

    REVIEW_LIST = "review_list"
    DIFF_CONTEXT = "diff_context"
    TIME_TRAVEL = "time_travel"


@dataclass(frozen=True)
class ShowDiffContext:
    pass


@dataclass(frozen=True)
class HideDiffContext:
    pass


@dataclass(frozen=True)
class NextHunk:
    pass


@dataclass(frozen=True)
class PreviousHunk:
    pass


@dataclass(frozen=True)
class SetFilter:
    review_filter: ReviewFilter


@dataclass(frozen=True)
class WindowResized:
    width: int
    height: int = 0


@dataclass(frozen=True)
class SelectComment:
    comment_id: Optional[int]


@dataclass(frozen=True)
class EnterTimeTravel:
    """Start time travel; the range defaults to the session's commit range."""

    base: Optional[str] = None
    head: Optional[str] = None


@dataclass(frozen=True)
class ExitTimeTravel:
    pass


@dataclass(frozen=True)
class StepForward:
    pass


@dataclass(frozen=True)
class StepBackward:
    pass


SessionMessage = Union[
    ShowDiffContext,
    HideDiffContext,
    NextHunk,
    PreviousHunk,
    SetFilter,
    WindowResized,
    SelectComment,
    EnterTimeTravel,
    ExitTimeTravel,
    StepForward,
    StepBackward,
    VerificationCompleted,
    VerificationFailed,
]


class ReviewSession:
    """
    State of one review screen.

    The navigator is None when no local repository could be discovered;
    time travel then reports why instead of failing.
    """

    def __init__(
        self,
        comments: Sequence[ReviewComment],
        navigator: Optional[TimeTravelNavigator] = None,
        runner: Optional[VerificationRunner] = None,
        config: Optional[Config] = None,
        commit_range: Optional[tuple[str, str]] = None,
        context: Optional[TimeTravelContext] = None,
        discovery_error: Optional[DiscoveryError] = None,
    ) -> None:
        self.config = config or Config()
        self.comments: list[ReviewComment] = list(comments)
        self.review_filter = ReviewFilter.all()
        self.width = self.config.display.width
        self.height = 0
        self.mode = ViewMode.REVIEW_LIST
        # View to return to when the diff context view is closed.
        self._return_mode = ViewMode.REVIEW_LIST
        self.selected_comment_id: Optional[int] = None
        self.diff_context = DiffContextState()
        self.navigator = navigator
        self.runner = runner
        self.commit_range = commit_range
        self.context = context
        self.discovery_error = discovery_error
        self.notice: Optional[str] = None

    @property
    def visible_comments(self) -> list[ReviewComment]:
        return self.review_filter.apply(self.comments)

    @property
    def selected_comment(self) -> Optional[ReviewComment]:
        if self.selected_comment_id is None:
            return None
        for comment in self.comments:
            if comment.id == self.selected_comment_id:
                return comment
        return None

    @property
    def focused_comment(self) -> Optional[ReviewComment]:
        """The comment whose file the time-travel view shows.

        The selection when it is visible and anchored, otherwise the first
        visible anchored comment.
        """
        visible = [c for c in self.visible_comments if c.anchor is not None]
        for comment in visible:
            if comment.id == self.selected_comment_id:
                return comment
        return visible[0] if visible else None

    @property
    def time_travel_active(self) -> bool:
        return self.navigator is not None and self.navigator.is_active

    @property
    def is_loading(self) -> bool:
        """Whether a verification pass for the current commit is outstanding."""
        if self.navigator is None or self.navigator.state is None:
            return False
        return self.navigator.state.is_loading

    def update(self, message: SessionMessage) -> None:
        """Apply one message to the session."""
        if isinstance(message, ShowDiffContext):
            self._show_diff_context()
        elif isinstance(message, HideDiffContext):
            self._hide_diff_context()
        elif isinstance(message, NextHunk):
            self.diff_context.move_next()
            self._follow_selected_hunk()
        elif isinstance(message, PreviousHunk):
            self.diff_context.move_previous()
            self._follow_selected_hunk()
        elif isinstance(message, SetFilter):
            self._set_filter(message.review_filter)
        elif isinstance(message, WindowResized):
            self._resize(message.width, message.height)
        elif isinstance(message, SelectComment):
            self.selected_comment_id = message.comment_id
        elif isinstance(message, EnterTimeTravel):
            self._enter_time_travel(message)
        elif isinstance(message, ExitTimeTravel):
            self._exit_time_travel()
        elif isinstance(message, StepForward):
            self._step(forward=True)
        elif isinstance(message, StepBackward):
            self._step(forward=False)
        elif isinstance(message, (VerificationCompleted, VerificationFailed)):
            if self.navigator is not None:
                self.navigator.apply(message)
        else:
            raise TypeError(f"Unsupported session message: {type(message).__name__}")

    def drain(self, timeout: Optional[float] = None) -> int:
        """
        Feed finished background passes back into ``update``.

        Returns:
            Number of messages processed.
        """
        if self.runner is None:
            return 0
        outcomes = self.runner.poll(timeout)
        for outcome in outcomes:
            self.update(outcome)
        return len(outcomes)

    def statuses(self) -> dict[int, Optional[LineMappingVerification]]:
        """Verification status of each visible comment at the current commit."""
        if self.navigator is None:
            return {}
        return self.navigator.statuses(self.visible_comments)

    def _show_diff_context(self) -> None:
        if self.mode != ViewMode.DIFF_CONTEXT:
            self._return_mode = self.mode
        self._rebuild_diff_context()
        self.mode = ViewMode.DIFF_CONTEXT

    def _hide_diff_context(self) -> None:
        if self.mode != ViewMode.DIFF_CONTEXT:
            return
        self.mode = self._return_mode
        self._return_mode = ViewMode.REVIEW_LIST

    def _rebuild_diff_context(self) -> None:
        self.diff_context.rebuild_from_comments(
            self.comments,
            self.review_filter,
            self.width,
            self.selected_comment,
            self.config.display.wrap_mode,
        )
        self._follow_selected_hunk()

    def _follow_selected_hunk(self) -> None:
        selected = self.diff_context.selected_hunk
        if selected is not None:
            self.selected_comment_id = selected.hunk.owning_comment_id

    def _set_filter(self, review_filter: ReviewFilter) -> None:
        self.review_filter = review_filter
        if self.mode == ViewMode.DIFF_CONTEXT:
            self._rebuild_diff_context()
        if self.time_travel_active:
            self._dispatch(self.navigator.request_pass(self.visible_comments))

    def _resize(self, width: int, height: int) -> None:
        self.height = height
        if width == self.width:
            return
        self.width = width
        if self.mode == ViewMode.DIFF_CONTEXT:
            self._rebuild_diff_context()

    def _enter_time_travel(self, message: EnterTimeTravel) -> None:
        if self.navigator is None:
            self.notice = unavailable_message(self.context, self.discovery_error)
            return

        base, head = message.base, message.head
        if (base is None or head is None) and self.commit_range is not None:
            base = base or self.commit_range[0]
            head = head or self.commit_range[1]
        if base is None or head is None:
            self.notice = "No commit range to travel through"
            return

        selected = self.selected_comment
        current = selected.commit_sha if selected is not None else None
        try:
            self.navigator.enter(base, head, current)
        except RangeEmpty as e:
            self.notice = str(e)
            return

        self.notice = None
        self.mode = ViewMode.TIME_TRAVEL
        self._dispatch(self.navigator.request_pass(self.visible_comments))

    def _exit_time_travel(self) -> None:
        if self.navigator is not None:
            self.navigator.exit()
        if self.mode == ViewMode.TIME_TRAVEL:
            self.mode = ViewMode.REVIEW_LIST
        if self._return_mode == ViewMode.TIME_TRAVEL:
            self._return_mode = ViewMode.REVIEW_LIST

    def _step(self, forward: bool) -> None:
        if self.mode != ViewMode.TIME_TRAVEL or self.navigator is None:
            return
        visible = self.visible_comments
        if forward:
            request = self.navigator.step_next(visible)
        else:
            request = self.navigator.step_previous(visible)
        self._dispatch(request)

    def _dispatch(self, request: Optional[VerificationRequest]) -> None:
        if request is None or self.navigator is None:
            return
        inline = len(request.comments) <= self.config.time_travel.inline_pass_threshold
        if self.runner is None or inline:
            runner = self.runner or VerificationRunner(self.navigator.execute)
            self.update(runner.run_inline(request))
        else:
            self.runner.submit(request)

    def view(self) -> str:
        """Render the current view as plain text."""
        if self.mode == ViewMode.DIFF_CONTEXT:
            return diff_context_view(self.diff_context, self.height)

        lines = []
        if self.notice:
            lines.append(self.notice)
            lines.append("")

        traveling = self.mode == ViewMode.TIME_TRAVEL and self.time_travel_active
        statuses = self.statuses() if traveling else {}
        if traveling:
            lines.extend(self._commit_lines())

        for comment in self.visible_comments:
            marker = ">" if comment.id == self.selected_comment_id else " "
            location = comment.file_path or "-"
            if comment.anchor_line is not None:
                location = f"{location}:{comment.anchor_line}"
            line = f"{marker} #{comment.id} {location}"
            if traveling:
                verification = statuses.get(comment.id)
                line += f"  {verification.display() if verification else '…'}"
            lines.append(line)

        if traveling:
            lines.extend(self._file_lines(statuses))
        return "\n".join(lines) + "\n"

    def _commit_lines(self) -> list[str]:
        state = self.navigator.state
        indicator = f"Commit {state.position_label()}"
        if state.is_loading:
            indicator += " (verifying...)"
        lines = [indicator]
        info = self.navigator.commit_info()
        if info is not None:
            lines.append(info.header())
        return lines

    def _file_lines(self, statuses: dict[int, Optional[LineMappingVerification]]) -> list[str]:
        focused = self.focused_comment
        if focused is None:
            return []
        verification = statuses.get(focused.id)
        status = verification.display() if verification else f"Line {focused.anchor_line}"
        lines = ["", f"File: {focused.file_path}  {status}"]
        excerpt = self.navigator.file_excerpt(focused, self.config.time_travel.excerpt_context_lines)
        if excerpt is None:
            lines.append("(File content not available)")
        else:
            lines.extend(excerpt.render())
        return lines
