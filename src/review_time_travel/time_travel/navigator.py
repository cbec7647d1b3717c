"""
Time-travel navigation state machine.

The navigator holds an ordered list of commits and a cursor. Each step
issues a verification request for the visible comments; results come back
as messages and are applied only if the cursor still points at the commit
they were computed for.
"""

import logging
import threading
from enum import Enum
from typing import Optional, Sequence

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.commit import CommitInfo, ExcerptLine, FileExcerpt
from review_time_travel.models.snapshot import CommitSnapshot, LineMappingVerification
from review_time_travel.models.types import CommitSha, RepoFilePath, short_sha
from review_time_travel.repository.base import GitRepository
from review_time_travel.repository.errors import RepositoryCapabilityError
from review_time_travel.time_travel.messages import (
    PassOutcome,
    VerificationCompleted,
    VerificationFailed,
    VerificationRequest,
)
from review_time_travel.verification.line_mapping import LineMappingVerifier, VerificationCache

logger = logging.getLogger(__name__)

DEFAULT_COMMIT_HISTORY_LIMIT = 200


class NavigationError(Exception):
    """Error during time-travel navigation."""
    pass


class RangeEmpty(NavigationError):
    """No commits could be resolved for the requested range."""
    pass


class NavigationPhase(str, Enum):
    """Phase of the navigator."""

    INACTIVE = "inactive"
    ACTIVE = "active"


class TimeTravelState:
    """
    Commits, cursor and verification cache of an active time-travel session.

    ``cursor`` is always a valid index into the non-empty ``commits``.
    """

    def __init__(
        self,
        commits: Sequence[CommitSha],
        cursor: int,
        verification_cache: VerificationCache,
    ) -> None:
        if not commits:
            raise RangeEmpty("time travel needs at least one commit")
        self._commits = tuple(commits)
        self._cursor = min(max(cursor, 0), len(self._commits) - 1)
        self.verification_cache = verification_cache
        self.pending_target: Optional[CommitSha] = None
        self.last_error: Optional[str] = None

    @property
    def commits(self) -> tuple[CommitSha, ...]:
        return self._commits

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_commit(self) -> CommitSha:
        return self._commits[self._cursor]

    @property
    def commit_count(self) -> int:
        return len(self._commits)

    @property
    def can_step_next(self) -> bool:
        return self._cursor < len(self._commits) - 1

    @property
    def can_step_previous(self) -> bool:
        return self._cursor > 0

    @property
    def is_loading(self) -> bool:
        return self.pending_target is not None

    def move_to(self, cursor: int) -> bool:
        """Move the cursor, clamped; returns whether it changed."""
        clamped = min(max(cursor, 0), len(self._commits) - 1)
        if clamped == self._cursor:
            return False
        self._cursor = clamped
        return True

    def status_for(self, comment_id: int) -> Optional[LineMappingVerification]:
        """The cached verification for a comment at the current commit."""
        return self.verification_cache.get((comment_id, self.current_commit))

    def statuses(
        self,
        comments: Sequence[ReviewComment],
    ) -> dict[int, Optional[LineMappingVerification]]:
        """Per-comment verification at the current commit; None while pending."""
        return {comment.id: self.status_for(comment.id) for comment in comments}

    def position_label(self) -> str:
        """``[i/n] sha`` label for the commit indicator."""
        return f"[{self._cursor + 1}/{len(self._commits)}] {short_sha(self.current_commit)}"


class TimeTravelNavigator:
    """
    State machine driving time-travel navigation.

    The repository handle is passed in explicitly and shared read-only
    with the verification passes.
    """

    def __init__(
        self,
        repository: GitRepository,
        verifier: Optional[LineMappingVerifier] = None,
        commit_history_limit: int = DEFAULT_COMMIT_HISTORY_LIMIT,
    ) -> None:
        """
        Initialize the navigator.

        Args:
            repository: Read-only repository handle.
            verifier: Verifier to use; a default one is built if omitted.
            commit_history_limit: Maximum number of commits kept in a range;
                at least 2 so the base and the latest commit both fit.

        Raises:
            ValueError: If ``commit_history_limit`` is below 2.
        """
        if commit_history_limit < 2:
            raise ValueError(f"commit_history_limit must be at least 2, got {commit_history_limit}")
        self.repository = repository
        self.verifier = verifier or LineMappingVerifier(repository)
        self.commit_history_limit = commit_history_limit
        self._cache: VerificationCache = {}
        # Shared by every pass; one snapshot per comment, captured once.
        self._snapshots: dict[int, CommitSnapshot] = {}
        self._snapshot_lock = threading.Lock()
        self._commit_infos: dict[CommitSha, Optional[CommitInfo]] = {}
        self._state: Optional[TimeTravelState] = None
        self._sequence = 0

    @property
    def phase(self) -> NavigationPhase:
        return NavigationPhase.ACTIVE if self._state is not None else NavigationPhase.INACTIVE

    @property
    def is_active(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> Optional[TimeTravelState]:
        return self._state

    @property
    def cache_size(self) -> int:
        return len(self._cache)

    def enter(self, base: str, head: str, current: Optional[str] = None) -> TimeTravelState:
        """
        Enter time travel over the commits from ``base`` to ``head``.

        Args:
            base: Oldest commit of the range (inclusive).
            head: Newest commit of the range (inclusive).
            current: Commit to start on; defaults to ``head``.

        Returns:
            The new active state.

        Raises:
            RangeEmpty: If no commits could be resolved. The navigator stays
                inactive.
        """
        try:
            commits = self.repository.list_commits(base, head)
        except RepositoryCapabilityError as e:
            logger.warning("Cannot list commits %s..%s: %s", base, head, e)
            raise RangeEmpty(f"no commits between {base} and {head}: {e}") from e
        if not commits:
            raise RangeEmpty(f"no commits between {base} and {head}")

        commits = self._limit_history(commits)
        cursor = len(commits) - 1
        if current is not None:
            cursor = self._index_of(commits, current, default=cursor)

        self._state = TimeTravelState(commits, cursor, self._cache)
        logger.info("Time travel over %d commits, starting at %s", len(commits), self._state.position_label())
        return self._state

    def _limit_history(self, commits: list[CommitSha]) -> list[CommitSha]:
        limit = self.commit_history_limit
        if len(commits) <= limit:
            return commits
        # Keep the base so the range still starts where the pull request does.
        return [commits[0]] + commits[-(limit - 1):]

    def _index_of(self, commits: Sequence[CommitSha], ref: str, default: int) -> int:
        try:
            sha = self.repository.resolve(ref)
        except RepositoryCapabilityError as e:
            logger.warning("Cannot resolve current commit %s: %s", ref, e)
            return default
        return commits.index(sha) if sha in commits else default

    def exit(self) -> None:
        """Leave time travel. The verification cache is kept."""
        self._state = None

    def step_next(self, comments: Sequence[ReviewComment]) -> Optional[VerificationRequest]:
        """Step one commit forward; returns the pass to run, or None at the end."""
        return self._step(1, comments)

    def step_previous(self, comments: Sequence[ReviewComment]) -> Optional[VerificationRequest]:
        """Step one commit backward; returns the pass to run, or None at the start."""
        return self._step(-1, comments)

    def _step(self, delta: int, comments: Sequence[ReviewComment]) -> Optional[VerificationRequest]:
        if self._state is None:
            return None
        if not self._state.move_to(self._state.cursor + delta):
            return None
        return self.request_pass(comments)

    def request_pass(self, comments: Sequence[ReviewComment]) -> Optional[VerificationRequest]:
        """
        Describe a verification pass for the current commit.

        Returns:
            The request, or None when inactive.
        """
        if self._state is None:
            return None

        target = self._state.current_commit
        self._sequence += 1
        visible = tuple(comments)
        cached = {
            (c.id, target): self._cache[(c.id, target)]
            for c in visible
            if (c.id, target) in self._cache
        }
        self._state.pending_target = target
        return VerificationRequest(
            target_commit=target,
            comments=visible,
            sequence=self._sequence,
            cached=cached,
        )

    @property
    def snapshot_count(self) -> int:
        with self._snapshot_lock:
            return len(self._snapshots)

    def execute(self, request: VerificationRequest) -> VerificationCompleted:
        """
        Run a pass. Safe to call off the update loop's thread.

        Results are computed from the request's copy of the cache. Snapshots
        go to the navigator's shared store as soon as they are captured, so a
        pass issued before an earlier one was applied still reuses them.
        """
        with self._snapshot_lock:
            results = self.verifier.verify_comments(
                request.comments,
                request.target_commit,
                cache=dict(request.cached),
                snapshots=self._snapshots,
            )
        return VerificationCompleted(
            target_commit=request.target_commit,
            sequence=request.sequence,
            results=results,
        )

    def apply(self, outcome: PassOutcome) -> bool:
        """
        Apply a finished pass if it is still current.

        Results whose target no longer matches the cursor's commit are
        discarded. The loading flag is only cleared by the most recently
        issued pass.

        Returns:
            True if the results were applied.
        """
        state = self._state
        if state is None or outcome.target_commit != state.current_commit:
            logger.debug(
                "Discarding stale pass #%d for %s", outcome.sequence, short_sha(outcome.target_commit)
            )
            return False

        if outcome.sequence == self._sequence:
            state.pending_target = None

        if isinstance(outcome, VerificationFailed):
            logger.warning("Verification pass for %s failed: %s", short_sha(outcome.target_commit), outcome.error)
            state.last_error = outcome.error
            return False

        for comment_id, verification in outcome.results.items():
            self._cache.setdefault((comment_id, outcome.target_commit), verification)
        state.last_error = None
        return True

    def statuses(
        self,
        comments: Sequence[ReviewComment],
    ) -> dict[int, Optional[LineMappingVerification]]:
        """Per-comment status at the current commit (empty when inactive)."""
        if self._state is None:
            return {}
        return self._state.statuses(comments)

    def commit_info(self) -> Optional[CommitInfo]:
        """Metadata of the commit under the cursor, or None when unavailable."""
        if self._state is None:
            return None
        commit = self._state.current_commit
        if commit not in self._commit_infos:
            try:
                self._commit_infos[commit] = self.repository.commit_info(commit)
            except RepositoryCapabilityError as e:
                logger.warning("Cannot read commit %s: %s", short_sha(commit), e)
                return None
        return self._commit_infos[commit]

    def file_excerpt(self, comment: ReviewComment, context_lines: int = 3) -> Optional[FileExcerpt]:
        """
        Read the commented file around the comment's line at the current commit.

        The window is centred on the line the comment maps to when the
        verification found it, otherwise on the comment's original line.
        Only a found line is highlighted.

        Args:
            comment: Comment whose file is shown.
            context_lines: Lines shown above and below the centre.

        Returns:
            The excerpt, or None when inactive, when the comment has no
            anchor, or when the file is absent or unreadable at the commit.
        """
        state = self._state
        anchor = comment.anchor
        if state is None or anchor is None:
            return None

        target = state.current_commit
        verification = state.status_for(comment.id)
        found = verification.new_line_number if verification is not None else None
        centre = found or anchor.line_number
        file = RepoFilePath(anchor.file)

        lines: list[ExcerptLine] = []
        try:
            if not self.repository.file_exists(target, file):
                return None
            for number in range(max(1, centre - context_lines), centre + context_lines + 1):
                text = self.repository.read_line(target, file, number)
                if text is not None:
                    lines.append(ExcerptLine(number=number, text=text))
        except RepositoryCapabilityError as e:
            logger.warning("Cannot read %s at %s: %s", file, short_sha(target), e)
            return None

        return FileExcerpt(commit=target, file=file, lines=tuple(lines), highlighted_line=found)
