"""
Multi-target execution.
"""

from pingproc.parallel.batcher import MultiHostBatcher

__all__ = ["MultiHostBatcher"]
