"""
Logging components.
"""

from pingproc.storage.logger import setup_logging

__all__ = [
    "setup_logging",
]
