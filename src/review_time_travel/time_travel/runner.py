"""
Background execution of verification passes.

Passes run on a single worker thread so at most one touches the repository
at a time. Each finished pass is posted to a queue that the update loop
drains with ``poll``; nothing here mutates navigator state.
"""

import logging
import queue
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from review_time_travel.time_travel.messages import (
    PassOutcome,
    VerificationCompleted,
    VerificationFailed,
    VerificationRequest,
)

logger = logging.getLogger(__name__)

PassFunction = Callable[[VerificationRequest], VerificationCompleted]


def run_pass(execute: PassFunction, request: VerificationRequest) -> PassOutcome:
    """Run one pass and turn an unexpected error into a failure message."""
    try:
        return execute(request)
    except Exception as e:
        logger.exception("Verification pass #%d raised", request.sequence)
        return VerificationFailed(
            target_commit=request.target_commit,
            sequence=request.sequence,
            error=f"{type(e).__name__}: {e}",
        )


class VerificationRunner:
    """Runs verification passes off the update loop and queues their outcomes."""

    def __init__(self, execute: PassFunction) -> None:
        """
        Initialize the runner.

        Args:
            execute: Function that performs a pass, usually
                ``TimeTravelNavigator.execute``.
        """
        self._execute = execute
        self._executor: Optional[ThreadPoolExecutor] = None
        self._outcomes: "queue.Queue[PassOutcome]" = queue.Queue()
        self._in_flight: list[Future] = []

    def _ensure_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="verification-pass"
            )
        return self._executor

    def submit(self, request: VerificationRequest) -> Future:
        """
        Schedule a pass in the background.

        Passes queue behind each other; a superseded pass still runs to
        completion and its outcome is delivered like any other.
        """
        future = self._ensure_executor().submit(self._run_and_deliver, request)
        self._in_flight.append(future)
        logger.debug("Submitted verification pass #%d", request.sequence)
        return future

    def _run_and_deliver(self, request: VerificationRequest) -> PassOutcome:
        outcome = run_pass(self._execute, request)
        self._outcomes.put(outcome)
        return outcome

    def run_inline(self, request: VerificationRequest) -> PassOutcome:
        """Run a pass synchronously on the calling thread."""
        return run_pass(self._execute, request)

    @property
    def busy(self) -> bool:
        self._in_flight = [f for f in self._in_flight if not f.done()]
        return bool(self._in_flight)

    def poll(self, timeout: Optional[float] = None) -> list[PassOutcome]:
        """
        Drain the finished passes.

        Args:
            timeout: Seconds to wait for the first outcome. None returns
                immediately with whatever is ready.

        Returns:
            Outcomes in the order they finished.
        """
        outcomes: list[PassOutcome] = []
        if timeout is not None:
            try:
                outcomes.append(self._outcomes.get(timeout=timeout))
            except queue.Empty:
                return outcomes
        while True:
            try:
                outcomes.append(self._outcomes.get_nowait())
            except queue.Empty:
                return outcomes

    def join(self) -> None:
        """Block until every submitted pass has finished."""
        for future in list(self._in_flight):
            future.result()
        self._in_flight = [f for f in self._in_flight if not f.done()]

    def wait(self) -> list[PassOutcome]:
        """Block until every submitted pass has finished, then drain."""
        self.join()
        return self.poll()

    def shutdown(self) -> None:
        """Stop the worker after the queued passes finish."""
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    def __enter__(self) -> "VerificationRunner":
        return self

    def __exit__(self, *exc_info) -> None:
        self.shutdown()
