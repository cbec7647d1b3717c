"""
Messages exchanged between the navigator and background verification passes.

A request describes a pass; the pass answers with exactly one completion or
failure message that is delivered back into the update loop.
"""

from dataclasses import dataclass, field
from typing import Mapping, Union

from review_time_travel.models.comment import ReviewComment
from review_time_travel.models.snapshot import LineMappingVerification
from review_time_travel.models.types import CommitSha


@dataclass(frozen=True)
class VerificationRequest:
    """Description of one verification pass against one target commit."""

    target_commit: CommitSha
    comments: tuple[ReviewComment, ...]
    sequence: int
    # Copy taken when the request was issued; the pass never sees the live cache.
    cached: Mapping[tuple[int, CommitSha], LineMappingVerification] = field(default_factory=dict)


@dataclass(frozen=True)
class VerificationCompleted:
    """All results of one pass, published together."""

    target_commit: CommitSha
    sequence: int
    results: Mapping[int, LineMappingVerification]


@dataclass(frozen=True)
class VerificationFailed:
    """A pass that raised instead of completing."""

    target_commit: CommitSha
    sequence: int
    error: str


PassOutcome = Union[VerificationCompleted, VerificationFailed]
