"""
PingProcess: blocking, deferred, background and batched ping execution.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Iterable, Optional

from loguru import logger

from pingproc.core.cancellation import CancellationToken, CancellationTokenSource
from pingproc.core.config import AppConfig
from pingproc.core.errors import LaunchError
from pingproc.core.executor import LineCallback, ProcessRunner
from pingproc.core.result import PingResult, ResultAggregator, RunOutcome
from pingproc.parallel.batcher import MultiHostBatcher
from pingproc.tasks.handles import PingHandle, PingTask, unwrap_outcome


class PingProcess:
    """
    Entry point for running ping.

    All background variants share one thread pool, owned by this object and
    released by ``close()`` (or by leaving a ``with`` block).
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        *,
        runner: Optional[ProcessRunner] = None,
        max_workers: Optional[int] = None,
    ):
        self.config = config or AppConfig()
        self.runner = runner or ProcessRunner.from_config(self.config)
        self.max_workers = max_workers or self.config.max_workers
        self.batcher = MultiHostBatcher(self.runner, max_workers=self.max_workers)
        self._pool = ThreadPoolExecutor(
            max_workers=self.max_workers,
            thread_name_prefix="pingproc",
        )

    def __enter__(self) -> "PingProcess":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Release the pool; with wait=False queued runs are dropped and their handles end cancelled."""
        self._pool.shutdown(wait=wait, cancel_futures=not wait)

    def _execute(
        self,
        target: str,
        token: Optional[CancellationToken] = None,
        on_stdout: Optional[LineCallback] = None,
        on_stderr: Optional[LineCallback] = None,
    ) -> RunOutcome:
        try:
            raw = self.runner.run(
                target,
                cancel_token=token,
                on_stdout=on_stdout,
                on_stderr=on_stderr,
            )
        except LaunchError as e:
            return RunOutcome.launch_failed(e)
        return ResultAggregator.to_outcome(raw)

    def run(self, target: str, cancel_token: Optional[CancellationToken] = None) -> PingResult:
        """
        Ping a target on the calling thread.

        A target that does not answer or cannot be resolved is not an error:
        check ``exit_code`` on the result.

        Raises:
            LaunchError: if ping could not be started
            RunCancelled: if ``cancel_token`` was cancelled
        """
        return unwrap_outcome(self._execute(target, cancel_token), target)

    def run_task(self, target: str) -> PingTask:
        """Create a run that does nothing until ``start()`` is called on it."""
        return PingTask(target, self._execute, self._pool)

    def run_async(
        self,
        target: str,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PingHandle:
        """
        Schedule a ping in the background and return its handle.

        A token that is already cancelled yields a finished, cancelled handle
        without spawning anything.
        """
        source = CancellationTokenSource(linked_to=cancel_token)
        if source.cancelled:
            logger.warning(f"Ping for {target!r} cancelled before start")
            return PingHandle.from_outcome(target, RunOutcome.cancelled(), source)

        future = self._pool.submit(self._execute, target, source.token)
        return PingHandle(target, future, source)

    def run_long_running(
        self,
        target: str,
        progress_output: Optional[LineCallback] = None,
        progress_error: Optional[LineCallback] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> PingHandle:
        """
        Run a ping on a dedicated thread, reporting each line as it arrives.

        Args:
            target: Host name or address
            progress_output: Called with each stdout line
            progress_error: Called with each stderr line
            cancel_token: Kills the process when cancelled
        """
        source = CancellationTokenSource(linked_to=cancel_token)
        if source.cancelled:
            logger.warning(f"Long-running ping for {target!r} cancelled before start")
            return PingHandle.from_outcome(target, RunOutcome.cancelled(), source)

        future: "Future[RunOutcome]" = Future()

        def _work() -> None:
            if not future.set_running_or_notify_cancel():
                return
            try:
                outcome = self._execute(target, source.token, progress_output, progress_error)
            except Exception as e:
                future.set_exception(e)
            else:
                future.set_result(outcome)

        handle = PingHandle(target, future, source)
        threading.Thread(target=_work, name=f"pingproc-long-{target}", daemon=True).start()
        return handle

    def run_many(
        self,
        targets: Iterable[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> PingHandle:
        """
        Ping several targets concurrently and merge their output in input order.

        See MultiHostBatcher for exit code and cancellation rules.
        """
        targets = list(targets)
        source = CancellationTokenSource(linked_to=cancel_token)
        if source.cancelled:
            logger.warning(f"Batch of {len(targets)} target(s) cancelled before start")
            return PingHandle.from_outcome(targets, RunOutcome.cancelled(), source)

        future = self._pool.submit(self.batcher.run, targets, source.token)
        return PingHandle(targets, future, source)
