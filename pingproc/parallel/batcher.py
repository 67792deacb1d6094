"""
Parallel multi-target ping execution.
Sub-runs may finish in any order; their output is always merged in input order.
"""

from __future__ import annotations

import concurrent.futures
from typing import List, Optional, Sequence

from loguru import logger

from pingproc.core.cancellation import CancellationToken, CancellationTokenSource
from pingproc.core.errors import LaunchError
from pingproc.core.executor import ProcessRunner
from pingproc.core.result import (
    OutcomeKind,
    PingResult,
    ResultAggregator,
    RunOutcome,
)


class MultiHostBatcher:
    """
    Ping an ordered list of targets and merge the results.

    A cancelled batch is all-or-nothing: it ends CANCELLED, and the output of
    sub-runs that had already completed is only available as the outcome's
    partial result.
    """

    def __init__(self, runner: ProcessRunner, max_workers: int = 10):
        """
        Initialize batcher.

        Args:
            runner: Runner used for every sub-run
            max_workers: Maximum concurrent ping processes
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self.runner = runner
        self.max_workers = max_workers

    def run(
        self,
        targets: Sequence[str],
        cancel_token: Optional[CancellationToken] = None,
    ) -> RunOutcome:
        """
        Ping every target concurrently.

        Args:
            targets: Targets in output order; duplicates allowed
            cancel_token: Cancels pending sub-runs and kills running ones

        Returns:
            RunOutcome whose result merges all sub-runs in input order
        """
        targets = list(targets)
        total = len(targets)

        if cancel_token is not None and cancel_token.cancelled:
            logger.warning(f"Batch of {total} target(s) cancelled before start")
            return RunOutcome.cancelled()

        if not targets:
            return RunOutcome.completed(ResultAggregator.combine([]))

        # Batch-private source: a failing sub-run cancels it, never the caller's token.
        source = CancellationTokenSource(linked_to=cancel_token)
        outcomes: List[Optional[RunOutcome]] = [None] * total
        first_error: Optional[Exception] = None

        logger.info(f"Starting batch of {total} target(s) with {self.max_workers} worker(s)")

        try:
            with concurrent.futures.ThreadPoolExecutor(
                max_workers=min(self.max_workers, total),
                thread_name_prefix="pingproc-batch",
            ) as executor:
                future_to_index = {
                    executor.submit(self._run_one, target, source.token): index
                    for index, target in enumerate(targets)
                }

                for future in concurrent.futures.as_completed(future_to_index):
                    index = future_to_index[future]
                    try:
                        outcomes[index] = future.result()
                    except Exception as e:
                        if first_error is None:
                            first_error = e
                        source.cancel()
        finally:
            source.close()

        if first_error is not None:
            logger.error(f"Batch aborted: {first_error}")
            if isinstance(first_error, LaunchError):
                return RunOutcome.launch_failed(first_error)
            raise first_error

        completed: List[PingResult] = [
            o.result for o in outcomes
            if o is not None and o.kind is OutcomeKind.COMPLETED
        ]

        if source.cancelled or len(completed) != total:
            logger.warning(
                f"Batch cancelled after {len(completed)}/{total} target(s) completed"
            )
            return RunOutcome.cancelled(ResultAggregator.combine(completed))

        merged = ResultAggregator.combine(completed)
        logger.info(f"Batch finished (return code: {merged.exit_code})")
        return RunOutcome.completed(merged)

    def _run_one(self, target: str, token: CancellationToken) -> RunOutcome:
        """Run one sub-target; returns a cancelled outcome without spawning once cancelled."""
        raw = self.runner.run(target, cancel_token=token)
        return ResultAggregator.to_outcome(raw)
