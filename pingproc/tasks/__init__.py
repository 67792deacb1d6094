"""
Background and deferred ping execution.
"""

from pingproc.tasks.handles import PingHandle, PingTask, flatten
from pingproc.tasks.ping_process import PingProcess

__all__ = [
    "PingHandle",
    "PingProcess",
    "PingTask",
    "flatten",
]
