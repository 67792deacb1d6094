"""
Error taxonomy.

Target-side failures (unreachable host, unknown name) are never raised; they
come back as a PingResult with a non-zero exit code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional, Sequence, Union

if TYPE_CHECKING:
    from pingproc.core.result import PingResult


class PingError(Exception):
    """Base class for all pingproc errors."""


class LaunchError(PingError):
    """The probe executable could not be found or started."""

    def __init__(self, command: Sequence[str], reason: str):
        self.command = list(command)
        self.reason = reason
        super().__init__(f"Could not launch {' '.join(self.command)!r}: {reason}")


class UsageError(PingError):
    """A task handle was used out of order (observed before start, started twice)."""


class RunCancelled(PingError):
    """
    Cancellation notice.

    ``partial_result`` holds whatever output was captured before the run was
    cancelled, or None when nothing was spawned.
    """

    def __init__(
        self,
        target: Union[str, Sequence[str]],
        partial_result: Optional["PingResult"] = None,
    ):
        self.target = target if isinstance(target, str) else list(target)
        self.partial_result = partial_result
        super().__init__(f"Ping run for {self.target!r} was cancelled")
