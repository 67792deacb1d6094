"""
Handles over in-flight ping runs.

A run's terminal state is a single RunOutcome. How a failed outcome reaches
the caller depends on how the caller observes it:

* blocking observation (``result()``, ``wait()``) raises an ExceptionGroup
  whose inner exception is the RunCancelled / LaunchError notice;
* ``await handle`` raises the notice itself, unwrapped.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from concurrent.futures import Executor, Future
from typing import Callable, Generator, List, Optional, Sequence, Union

from loguru import logger

from pingproc.core.cancellation import CancellationToken, CancellationTokenSource
from pingproc.core.errors import RunCancelled, UsageError
from pingproc.core.result import OutcomeKind, PingResult, RunOutcome

Target = Union[str, Sequence[str]]

AGGREGATE_MESSAGE = "One or more errors occurred while running ping"


def flatten(group: BaseExceptionGroup) -> List[BaseException]:
    """Leaf exceptions of a possibly nested exception group, in order."""
    leaves: List[BaseException] = []
    for exc in group.exceptions:
        if isinstance(exc, BaseExceptionGroup):
            leaves.extend(flatten(exc))
        else:
            leaves.append(exc)
    return leaves


def outcome_error(outcome: RunOutcome, target: Target) -> Optional[BaseException]:
    """The notice a failed outcome stands for, or None when it completed."""
    if outcome.kind is OutcomeKind.CANCELLED:
        return RunCancelled(target, outcome.result)
    if outcome.kind is OutcomeKind.LAUNCH_FAILED:
        return outcome.error
    return None


def unwrap_outcome(outcome: RunOutcome, target: Target) -> PingResult:
    """Return the result or raise the bare notice."""
    error = outcome_error(outcome, target)
    if error is not None:
        raise error
    return outcome.result


class PingHandle:
    """Observable, cancellable handle to one scheduled run (or batch)."""

    def __init__(
        self,
        target: Target,
        future: "Future[RunOutcome]",
        source: CancellationTokenSource,
    ):
        self.target = target if isinstance(target, str) else list(target)
        self._source = source
        self._future: "Future[RunOutcome]" = Future()
        future.add_done_callback(self._settle)

    def _settle(self, scheduled: "Future[RunOutcome]") -> None:
        """Copy the scheduled future's state; a run dropped from the pool queue ends cancelled."""
        if scheduled.cancelled():
            logger.warning(f"Ping for {self.target!r} dropped before it started")
            self._future.set_result(RunOutcome.cancelled())
        elif scheduled.exception() is not None:
            self._future.set_exception(scheduled.exception())
        else:
            self._future.set_result(scheduled.result())
        self._source.close()

    @classmethod
    def from_outcome(
        cls,
        target: Target,
        outcome: RunOutcome,
        source: Optional[CancellationTokenSource] = None,
    ) -> "PingHandle":
        """A handle that is already complete."""
        future: "Future[RunOutcome]" = Future()
        future.set_result(outcome)
        return cls(target, future, source or CancellationTokenSource())

    @property
    def token(self) -> CancellationToken:
        return self._source.token

    def cancel(self) -> None:
        """Request cancellation; a running ping process is killed."""
        logger.debug(f"Cancellation requested for {self.target!r}")
        self._source.cancel()

    def done(self) -> bool:
        return self._future.done()

    def cancelled(self) -> bool:
        """True once the run has finished in the cancelled state."""
        if not self._future.done() or self._future.exception() is not None:
            return False
        return self._future.result().kind is OutcomeKind.CANCELLED

    def outcome(self, timeout: Optional[float] = None) -> RunOutcome:
        """Block for the terminal outcome without interpreting it."""
        return self._future.result(timeout)

    def result(self, timeout: Optional[float] = None) -> PingResult:
        """
        Block until the run completes and return its result.

        Raises:
            ExceptionGroup: wrapping RunCancelled or LaunchError
            TimeoutError: if the run is still going after ``timeout``
        """
        done, _ = concurrent.futures.wait([self._future], timeout=timeout)
        if not done:
            raise TimeoutError(f"Ping run for {self.target!r} did not finish in {timeout}s")

        exc = self._future.exception()
        if exc is not None:
            raise ExceptionGroup(AGGREGATE_MESSAGE, [exc])

        outcome = self._future.result()
        error = outcome_error(outcome, self.target)
        if error is not None:
            raise ExceptionGroup(AGGREGATE_MESSAGE, [error])
        return outcome.result

    def wait(self, timeout: Optional[float] = None) -> None:
        """Block until completion; raises like ``result()``."""
        self.result(timeout)

    def __await__(self) -> Generator[object, None, PingResult]:
        loop = asyncio.get_running_loop()
        outcome = yield from asyncio.wrap_future(self._future, loop=loop).__await__()
        return unwrap_outcome(outcome, self.target)


class PingTask:
    """
    A run that has been created but not scheduled.

    ``start()`` must be called exactly once before the result is observed.
    """

    def __init__(
        self,
        target: str,
        work: Callable[[str, CancellationToken], RunOutcome],
        executor: Executor,
    ):
        self.target = target
        self._work = work
        self._executor = executor
        self._lock = threading.Lock()
        self._handle: Optional[PingHandle] = None

    @property
    def started(self) -> bool:
        return self._handle is not None

    def start(self) -> "PingTask":
        with self._lock:
            if self._handle is not None:
                raise UsageError(f"Ping task for {self.target!r} has already been started")
            source = CancellationTokenSource()
            future = self._executor.submit(self._work, self.target, source.token)
            self._handle = PingHandle(self.target, future, source)
        return self

    def _started_handle(self) -> PingHandle:
        handle = self._handle
        if handle is None:
            raise UsageError(f"Ping task for {self.target!r} has not been started")
        return handle

    def done(self) -> bool:
        return self._handle is not None and self._handle.done()

    def cancel(self) -> None:
        self._started_handle().cancel()

    def result(self, timeout: Optional[float] = None) -> PingResult:
        """Blocking observation; the result is cached after the first completion."""
        return self._started_handle().result(timeout)

    def wait(self, timeout: Optional[float] = None) -> None:
        self._started_handle().wait(timeout)

    def __await__(self) -> Generator[object, None, PingResult]:
        return self._started_handle().__await__()
