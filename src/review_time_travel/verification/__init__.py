"""
Line-mapping verification for Review Time Travel.
"""

from review_time_travel.verification.line_mapping import (
    DEFAULT_SEARCH_WINDOW,
    LineMappingVerifier,
    SnapshotUnavailable,
    VerificationCache,
    capture_snapshot,
)

__all__ = [
    "DEFAULT_SEARCH_WINDOW",
    "LineMappingVerifier",
    "SnapshotUnavailable",
    "VerificationCache",
    "capture_snapshot",
]
