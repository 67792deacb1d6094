"""
pingproc - run the system ping utility as a child process and capture its output
"""

from pingproc.__version__ import __version__
from pingproc.core.cancellation import CancellationToken, CancellationTokenSource
from pingproc.core.config import AppConfig
from pingproc.core.errors import LaunchError, PingError, RunCancelled, UsageError
from pingproc.core.result import PingResult
from pingproc.parallel.batcher import MultiHostBatcher
from pingproc.tasks.handles import PingHandle, PingTask, flatten
from pingproc.tasks.ping_process import PingProcess

__all__ = [
    "AppConfig",
    "CancellationToken",
    "CancellationTokenSource",
    "LaunchError",
    "MultiHostBatcher",
    "PingError",
    "PingHandle",
    "PingProcess",
    "PingResult",
    "PingTask",
    "RunCancelled",
    "UsageError",
    "flatten",
    "__version__",
]
