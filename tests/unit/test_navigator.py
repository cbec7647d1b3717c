"""
Unit tests for the time-travel navigator.
"""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.snapshot import LineMappingStatus
from review_time_travel.verification import line_mapping
from review_time_travel.repository.errors import RepositoryUnavailable
from review_time_travel.repository.memory import InMemoryRepository
from review_time_travel.time_travel.messages import VerificationFailed
from review_time_travel.time_travel.navigator import (
    NavigationPhase,
    RangeEmpty,
    TimeTravelNavigator,
    TimeTravelState,
)


def _content(*lines: str) -> str:
    return "".join(f"{line}\n" for line in lines)


@pytest.fixture
def repo() -> InMemoryRepository:
    """Four commits; ``fn main`` drifts down one line per commit, then the file goes."""
    repo = InMemoryRepository()
    repo.add_commit("c0", {"a.rs": _content("fn main", "x", "y"), "b.rs": _content("b1", "b2")})
    repo.add_commit("c1", {"a.rs": _content("//", "fn main", "x", "y"), "b.rs": _content("b1", "b2")})
    repo.add_commit("c2", {"a.rs": _content("//", "//", "fn main", "x", "y"), "b.rs": _content("b1", "B2")})
    repo.add_commit("c3", {"b.rs": _content("b1", "B2")})
    return repo


@pytest.fixture
def comments() -> list[ReviewComment]:
    return [
        ReviewComment(id=1, file_path="a.rs", line_number=1, commit_sha="c0"),
        ReviewComment(id=2, file_path="b.rs", line_number=2, commit_sha="c0"),
        ReviewComment(id=3, file_path="b.rs", line_number=1, commit_sha="c0"),
    ]


class TestEnterExit:
    """Tests for entering and leaving time travel."""

    def test_enter_starts_at_latest(self, repo: InMemoryRepository) -> None:
        """Test that the cursor starts on the newest commit."""
        navigator = TimeTravelNavigator(repo)

        state = navigator.enter("c0", "c3")

        assert navigator.phase == NavigationPhase.ACTIVE
        assert state.commits == ("c0", "c1", "c2", "c3")
        assert state.current_commit == "c3"
        assert state.can_step_previous
        assert not state.can_step_next

    def test_enter_at_current(self, repo: InMemoryRepository) -> None:
        """Test starting on a given commit."""
        state = TimeTravelNavigator(repo).enter("c0", "c3", current="c1")

        assert state.cursor == 1

    def test_current_outside_range_defaults_to_latest(self, repo: InMemoryRepository) -> None:
        """Test that an unknown starting commit falls back to the latest."""
        state = TimeTravelNavigator(repo).enter("c1", "c3", current="c0")

        assert state.current_commit == "c3"

    def test_enter_invalid_range_stays_inactive(self, repo: InMemoryRepository) -> None:
        """Test that a range that cannot be listed raises RangeEmpty."""
        navigator = TimeTravelNavigator(repo)

        with pytest.raises(RangeEmpty):
            navigator.enter("c3", "c0")

        assert navigator.phase == NavigationPhase.INACTIVE
        assert navigator.state is None

    def test_enter_empty_listing(self) -> None:
        """Test that an empty commit list raises RangeEmpty."""
        repository = MagicMock()
        repository.list_commits.return_value = []

        with pytest.raises(RangeEmpty):
            TimeTravelNavigator(repository).enter("a", "b")

    def test_enter_repository_failure(self) -> None:
        """Test that repository failures surface as RangeEmpty."""
        repository = MagicMock()
        repository.list_commits.side_effect = RepositoryUnavailable("broken")

        with pytest.raises(RangeEmpty):
            TimeTravelNavigator(repository).enter("a", "b")

    def test_history_limit_keeps_base_and_latest(self) -> None:
        """Test trimming long ranges."""
        repo = InMemoryRepository()
        for n in range(10):
            repo.add_commit(f"c{n}", {})

        state = TimeTravelNavigator(repo, commit_history_limit=4).enter("c0", "c9")

        assert state.commits == ("c0", "c7", "c8", "c9")

    @pytest.mark.parametrize("limit", [0, 1])
    def test_history_limit_below_two_is_rejected(self, limit: int) -> None:
        """Test that a limit too small to hold base and latest is refused."""
        with pytest.raises(ValueError, match="at least 2"):
            TimeTravelNavigator(InMemoryRepository(), commit_history_limit=limit)

    def test_exit_keeps_cache(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that leaving time travel does not drop verification results."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")
        navigator.apply(navigator.execute(navigator.request_pass(comments)))
        cached = navigator.cache_size

        navigator.exit()

        assert navigator.phase == NavigationPhase.INACTIVE
        assert navigator.cache_size == cached > 0
        assert navigator.statuses(comments) == {}


class TestStepping:
    """Tests for cursor movement and verification requests."""

    def test_step_previous_issues_request(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that a step returns a request for the new commit."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        request = navigator.step_previous(comments)

        assert request is not None
        assert request.target_commit == "c2"
        assert request.comments == tuple(comments)
        assert navigator.state.is_loading

    def test_step_at_ends_returns_none(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that stepping past either end does nothing."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        assert navigator.step_next(comments) is None
        assert navigator.state.cursor == 3

        for _ in range(3):
            navigator.step_previous(comments)
        assert navigator.step_previous(comments) is None
        assert navigator.state.cursor == 0

    def test_step_while_inactive(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that steps are ignored while inactive."""
        navigator = TimeTravelNavigator(repo)

        assert navigator.step_next(comments) is None
        assert navigator.request_pass(comments) is None

    def test_sequences_increase(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that every request gets a fresh sequence number."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        first = navigator.request_pass(comments)
        second = navigator.step_previous(comments)

        assert second.sequence > first.sequence


class TestApply:
    """Tests for applying verification results."""

    def test_apply_publishes_statuses(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test a full pass at the cursor commit."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3", current="c2")

        assert navigator.apply(navigator.execute(navigator.request_pass(comments)))
        statuses = navigator.statuses(comments)

        assert statuses[1].status == LineMappingStatus.MOVED
        assert statuses[1].new_line_number == 3
        assert statuses[2].status == LineMappingStatus.MODIFIED
        assert statuses[3].status == LineMappingStatus.UNCHANGED
        assert not navigator.state.is_loading

    def test_file_removed_at_latest(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that a file missing at the cursor commit is FileRemoved."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        navigator.apply(navigator.execute(navigator.request_pass(comments)))

        assert navigator.statuses(comments)[1].status == LineMappingStatus.FILE_REMOVED

    def test_statuses_pending_before_apply(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that statuses are None until a pass has been applied."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")
        navigator.request_pass(comments)

        assert navigator.statuses(comments) == {1: None, 2: None, 3: None}

    def test_stale_pass_is_discarded(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that an outstanding pass completing after another step is dropped."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        stale_request = navigator.step_previous(comments)
        fresh_request = navigator.step_previous(comments)
        fresh = navigator.execute(fresh_request)
        stale = navigator.execute(stale_request)

        assert navigator.apply(stale) is False
        assert navigator.statuses(comments) == {1: None, 2: None, 3: None}
        assert navigator.cache_size == 0

        assert navigator.apply(fresh) is True
        statuses = navigator.statuses(comments)
        assert all(statuses[c.id] is not None for c in comments)
        assert {v.target_commit for v in statuses.values()} == {"c1"}
        assert navigator.cache_size == 3

    def test_results_after_exit_are_discarded(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that passes finishing after exit are ignored."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")
        request = navigator.request_pass(comments)
        navigator.exit()

        assert navigator.apply(navigator.execute(request)) is False
        assert navigator.cache_size == 0

    def test_cached_results_skip_repository(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that revisiting a commit reuses cached results."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")
        navigator.apply(navigator.execute(navigator.request_pass(comments)))
        navigator.apply(navigator.execute(navigator.step_previous(comments)))

        request = navigator.step_next(comments)

        assert len(request.cached) == 3
        navigator.verifier.repository = MagicMock()
        completed = navigator.execute(request)
        navigator.verifier.repository.read_line.assert_not_called()
        assert navigator.apply(completed)

    def test_failed_pass_records_error(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that a failure for the current commit is reported on the state."""
        navigator = TimeTravelNavigator(repo)
        state = navigator.enter("c0", "c3")
        request = navigator.request_pass(comments)

        applied = navigator.apply(
            VerificationFailed(target_commit=request.target_commit, sequence=request.sequence, error="boom")
        )

        assert applied is False
        assert state.last_error == "boom"
        assert not state.is_loading

    def test_overlapping_passes_capture_each_snapshot_once(
        self, repo: InMemoryRepository, comments: list[ReviewComment]
    ) -> None:
        """Test that a pass issued before the previous one was applied reuses its snapshots."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        first = navigator.request_pass(comments)
        second = navigator.step_previous(comments)
        with patch.object(line_mapping, "capture_snapshot", wraps=line_mapping.capture_snapshot) as capture:
            navigator.execute(first)
            completed = navigator.execute(second)

        assert capture.call_count == len(comments)
        assert navigator.snapshot_count == len(comments)
        assert navigator.apply(completed)

    def test_only_latest_pass_clears_loading(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that an older pass for a revisited commit leaves the loading flag set."""
        navigator = TimeTravelNavigator(repo)
        state = navigator.enter("c0", "c3")

        first_visit = navigator.step_previous(comments)
        passed_through = navigator.step_previous(comments)
        second_visit = navigator.step_next(comments)

        assert navigator.apply(navigator.execute(first_visit))
        assert state.current_commit == "c2"
        assert state.is_loading

        assert not navigator.apply(navigator.execute(passed_through))
        assert state.is_loading

        assert navigator.apply(navigator.execute(second_visit))
        assert not state.is_loading


class TestCommitDisplay:
    """Tests for the commit header and file excerpt of the current commit."""

    def test_commit_info(self) -> None:
        """Test reading metadata of the commit under the cursor."""
        repo = InMemoryRepository()
        repo.add_commit("c0", {}, message="Initial import")
        repo.add_commit(
            "c1",
            {},
            message="Fix parser\n\nLonger body.",
            author="Octo Cat",
            timestamp=datetime(2024, 5, 1, 12, 30),
        )
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c1")

        info = navigator.commit_info()

        assert info.summary == "Fix parser"
        assert info.header() == 'Commit: c1  "Fix parser"  Octo Cat, 2024-05-01 12:30'

    def test_commit_info_inactive(self, repo: InMemoryRepository) -> None:
        """Test that there is no header outside time travel."""
        assert TimeTravelNavigator(repo).commit_info() is None

    def test_commit_info_failure(self) -> None:
        """Test that unreadable metadata is left out instead of raised."""
        repository = MagicMock()
        repository.list_commits.return_value = ["a", "b"]
        repository.resolve.side_effect = lambda ref: ref
        repository.commit_info.side_effect = RepositoryUnavailable("broken")
        navigator = TimeTravelNavigator(repository)
        navigator.enter("a", "b")

        assert navigator.commit_info() is None

    def test_excerpt_highlights_mapped_line(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that the excerpt is centred on the line the comment moved to."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3", current="c2")
        navigator.apply(navigator.execute(navigator.request_pass(comments)))

        excerpt = navigator.file_excerpt(comments[0], context_lines=1)

        assert [line.number for line in excerpt.lines] == [2, 3, 4]
        assert excerpt.highlighted_line == 3
        assert excerpt.render() == ["   2 | //", ">  3 | fn main", "   4 | x"]

    def test_excerpt_while_pending(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that a pending comment shows its original line without a highlight."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3", current="c2")
        navigator.request_pass(comments)

        excerpt = navigator.file_excerpt(comments[0], context_lines=1)

        assert [line.number for line in excerpt.lines] == [1, 2]
        assert excerpt.highlighted_line is None

    def test_excerpt_file_absent(self, repo: InMemoryRepository, comments: list[ReviewComment]) -> None:
        """Test that a file missing at the current commit has no excerpt."""
        navigator = TimeTravelNavigator(repo)
        navigator.enter("c0", "c3")

        assert navigator.file_excerpt(comments[0]) is None
        assert navigator.file_excerpt(ReviewComment(id=9, body="general")) is None


class TestTimeTravelState:
    """Tests for the TimeTravelState container."""

    def test_requires_commits(self) -> None:
        """Test that an empty state cannot be built."""
        with pytest.raises(RangeEmpty):
            TimeTravelState([], 0, {})

    def test_cursor_is_clamped(self) -> None:
        """Test that the cursor always points at a commit."""
        state = TimeTravelState(["a", "b"], 5, {})

        assert state.cursor == 1
        assert not state.move_to(9)
        assert state.move_to(-3)
        assert state.cursor == 0

    def test_position_label(self) -> None:
        """Test the commit indicator label."""
        state = TimeTravelState(["0123456789", "abcdef0123"], 1, {})

        assert state.position_label() == "[2/2] abcdef0"
