"""
Core functionality components.
"""

from pingproc.core.cancellation import CancellationToken, CancellationTokenSource
from pingproc.core.config import AppConfig
from pingproc.core.detector import SystemDetector, SystemInfo
from pingproc.core.errors import LaunchError, PingError, RunCancelled, UsageError
from pingproc.core.executor import ProcessRunner
from pingproc.core.result import OutcomeKind, PingResult, RawRun, ResultAggregator, RunOutcome

__all__ = [
    "AppConfig",
    "CancellationToken",
    "CancellationTokenSource",
    "LaunchError",
    "OutcomeKind",
    "PingError",
    "PingResult",
    "ProcessRunner",
    "RawRun",
    "ResultAggregator",
    "RunCancelled",
    "RunOutcome",
    "SystemDetector",
    "SystemInfo",
    "UsageError",
]
