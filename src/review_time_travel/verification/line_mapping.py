"""
Line-mapping verification.

Decides whether the line a review comment was anchored to is still
present at a target commit, has moved, was modified in place, or is gone.
Repository failures never escape this module: they become UNKNOWN results
so one bad lookup cannot abort a batch.
"""

import logging
from typing import Iterable, MutableMapping, Optional

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.snapshot import (
    CommitSnapshot,
    LineMappingVerification,
)
from review_time_travel.models.types import CommitSha
from review_time_travel.parser.hunk_parser import HunkParser
from review_time_travel.repository.base import GitRepository
from review_time_travel.repository.errors import RepositoryCapabilityError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_WINDOW = 50

# Verification results keyed by (comment id, target commit).
VerificationCache = MutableMapping[tuple[int, CommitSha], LineMappingVerification]


class SnapshotUnavailable(Exception):
    """The anchored line of a comment could not be captured."""
    pass


def capture_snapshot(repository: GitRepository, comment: ReviewComment) -> CommitSnapshot:
    """
    Capture the text of a comment's anchored line at its own commit.

    The repository is consulted first. When it has no such line (for
    example a shallow clone missing the commit's blob), the last new-side
    line of the comment's diff hunk is used, provided it sits on the
    anchored line.

    Args:
        repository: Repository to read from.
        comment: The review comment.

    Returns:
        The captured snapshot.

    Raises:
        SnapshotUnavailable: If neither source yields the line.
    """
    anchor = comment.anchor
    if anchor is None:
        raise SnapshotUnavailable("comment has no anchor")
    if anchor.line_number < 1:
        raise SnapshotUnavailable(f"invalid anchor line {anchor.line_number}")

    try:
        commit = repository.resolve(anchor.commit)
        text = repository.read_line(commit, anchor.file, anchor.line_number)
    except RepositoryCapabilityError as e:
        logger.warning("Cannot read anchor of comment %s: %s", comment.id, e)
        commit, text = anchor.commit, None

    if text is None:
        text = _text_from_hunk(comment, anchor.line_number)
    if text is None:
        raise SnapshotUnavailable(
            f"{anchor.file}:{anchor.line_number} not found at {anchor.commit[:7]}"
        )

    return CommitSnapshot(
        commit=commit,
        file=anchor.file,
        line_number=anchor.line_number,
        text=text,
    )


def _text_from_hunk(comment: ReviewComment, line_number: int) -> Optional[str]:
    parsed = HunkParser.try_parse(comment.diff_hunk, comment.file_path or "file")
    if parsed is None:
        return None
    line = parsed.target_line(line_number)
    return line.text if line is not None else None


class LineMappingVerifier:
    """
    Verify comment anchors against target commits.

    The verifier is stateless apart from its configuration; callers own the
    cache and the snapshots.
    """

    def __init__(
        self,
        repository: GitRepository,
        search_window: int = DEFAULT_SEARCH_WINDOW,
    ) -> None:
        """
        Initialize the verifier.

        Args:
            repository: Read-only repository handle.
            search_window: Lines above and below the anchor searched for moved text.
        """
        self.repository = repository
        self.search_window = search_window

    def verify(
        self,
        snapshot: CommitSnapshot,
        target_commit: CommitSha,
        comment_id: int,
    ) -> LineMappingVerification:
        """
        Verify one snapshot against a target commit.

        Args:
            snapshot: The anchored line as captured at its original commit.
            target_commit: Commit to check against.
            comment_id: Comment the snapshot belongs to.

        Returns:
            The verification result. Never raises for repository errors.
        """
        repo = self.repository
        file = snapshot.file
        line_number = snapshot.line_number
        try:
            if not repo.file_exists(target_commit, file):
                return LineMappingVerification.file_removed(comment_id, snapshot, target_commit)

            current = repo.read_line(target_commit, file, line_number)
            if current == snapshot.text:
                return LineMappingVerification.unchanged(comment_id, snapshot, target_commit)

            new_line = repo.search_line(
                target_commit,
                file,
                snapshot.text,
                self.search_window,
                origin_line=line_number,
            )
            if new_line is not None:
                return LineMappingVerification.moved(comment_id, snapshot, target_commit, new_line)

            # read_line returns None only past the end of an existing file.
            if current is not None:
                return LineMappingVerification.modified(comment_id, snapshot, target_commit)
            return LineMappingVerification.deleted(comment_id, snapshot, target_commit)
        except RepositoryCapabilityError as e:
            logger.warning(
                "Verification of comment %s against %s failed: %s",
                comment_id,
                target_commit[:7],
                e,
            )
            return LineMappingVerification.unknown(comment_id, target_commit, str(e), snapshot)

    def verify_comments(
        self,
        comments: Iterable[ReviewComment],
        target_commit: CommitSha,
        cache: Optional[VerificationCache] = None,
        snapshots: Optional[MutableMapping[int, CommitSnapshot]] = None,
    ) -> dict[int, LineMappingVerification]:
        """
        Run one verification pass over a batch of comments.

        Cached results are reused and the repository is only consulted for
        misses. The caller's cache is not modified; new results are returned
        together so they can be published at once.

        Args:
            comments: The visible comments.
            target_commit: Commit every comment is checked against.
            cache: Previous results keyed by (comment id, commit).
            snapshots: Snapshots already captured, keyed by comment id. New
                snapshots are added to it so each is captured only once.

        Returns:
            Mapping from comment id to verification for this target.
        """
        cache = cache if cache is not None else {}
        snapshots = snapshots if snapshots is not None else {}
        results: dict[int, LineMappingVerification] = {}

        for comment in comments:
            cached = cache.get((comment.id, target_commit))
            if cached is not None:
                results[comment.id] = cached
                continue

            snapshot = snapshots.get(comment.id)
            if snapshot is None:
                try:
                    snapshot = capture_snapshot(self.repository, comment)
                except SnapshotUnavailable as e:
                    results[comment.id] = LineMappingVerification.unknown(
                        comment.id, target_commit, str(e)
                    )
                    continue
                snapshots[comment.id] = snapshot

            results[comment.id] = self.verify(snapshot, target_commit, comment.id)

        return results
