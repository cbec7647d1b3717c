"""Commit navigation with background line-mapping verification."""

from review_time_travel.time_travel.availability import TimeTravelContext, unavailable_message
from review_time_travel.time_travel.messages import (
    PassOutcome,
    VerificationCompleted,
    VerificationFailed,
    VerificationRequest,
)
from review_time_travel.time_travel.navigator import (
    DEFAULT_COMMIT_HISTORY_LIMIT,
    NavigationError,
    NavigationPhase,
    RangeEmpty,
    TimeTravelNavigator,
    TimeTravelState,
)
from review_time_travel.time_travel.runner import VerificationRunner, run_pass

__all__ = [
    "DEFAULT_COMMIT_HISTORY_LIMIT",
    "NavigationError",
    "NavigationPhase",
    "PassOutcome",
    "RangeEmpty",
    "TimeTravelContext",
    "TimeTravelNavigator",
    "TimeTravelState",
    "VerificationCompleted",
    "VerificationFailed",
    "VerificationRequest",
    "VerificationRunner",
    "run_pass",
    "unavailable_message",
]
