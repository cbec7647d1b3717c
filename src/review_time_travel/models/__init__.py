"""
Data models for Review Time Travel.

This package contains Pydantic models for review comments, filters,
commit snapshots, line-mapping verifications, diff hunks and commit display.
"""

from review_time_travel.models.comment import (
    Anchor,
    ReviewComment,
)
from review_time_travel.models.commit import (
    CommitInfo,
    ExcerptLine,
    FileExcerpt,
)
from review_time_travel.models.filter import (
    FilterKind,
    ReviewFilter,
)
from review_time_travel.models.hunk import (
    DiffHunk,
    RenderedDiffHunk,
)
from review_time_travel.models.report import (
    TravelReport,
    VerificationReport,
)
from review_time_travel.models.snapshot import (
    CommitSnapshot,
    LineMappingStatus,
    LineMappingVerification,
)
from review_time_travel.models.types import (
    CommitSha,
    RepoFilePath,
)

__all__ = [
    # Identifiers
    "CommitSha",
    "RepoFilePath",
    # Comment models
    "Anchor",
    "ReviewComment",
    "FilterKind",
    "ReviewFilter",
    # Verification models
    "CommitSnapshot",
    "LineMappingStatus",
    "LineMappingVerification",
    # Hunk models
    "DiffHunk",
    "RenderedDiffHunk",
    # Commit display
    "CommitInfo",
    "ExcerptLine",
    "FileExcerpt",
    # Reports
    "TravelReport",
    "VerificationReport",
]
