"""
Cooperative cancellation signal shared between a caller and running pings.
"""

from __future__ import annotations

import threading
from typing import Callable, Dict, Optional

from loguru import logger


class CancellationToken:
    """
    Read side of a cancellation signal.

    Callbacks registered on a token run exactly once, on the thread that calls
    ``cancel()``, or immediately on registration if the token is already
    cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: Dict[int, Callable[[], None]] = {}
        self._next_id = 0

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or timeout; returns True when cancelled."""
        return self._event.wait(timeout)

    def register(self, callback: Callable[[], None]) -> int:
        """
        Register a callback to run on cancellation.

        Returns a registration id for ``unregister``.
        """
        with self._lock:
            if not self._event.is_set():
                reg_id = self._next_id
                self._next_id += 1
                self._callbacks[reg_id] = callback
                return reg_id
        callback()
        return -1

    def unregister(self, reg_id: int) -> None:
        with self._lock:
            self._callbacks.pop(reg_id, None)

    def _cancel(self) -> None:
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks.values())
            self._callbacks.clear()
        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(f"Cancellation callback failed: {e}")


class CancellationTokenSource:
    """
    Owner of a cancellation token.

    A source created with ``linked_to`` is cancelled automatically when the
    parent token is cancelled.
    """

    def __init__(self, linked_to: Optional[CancellationToken] = None):
        self.token = CancellationToken()
        self._parent = linked_to
        self._parent_reg: Optional[int] = None
        if linked_to is not None:
            self._parent_reg = linked_to.register(self.cancel)

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled

    def cancel(self) -> None:
        self.token._cancel()

    def close(self) -> None:
        """Detach from the parent token, if any."""
        if self._parent is not None and self._parent_reg is not None:
            self._parent.unregister(self._parent_reg)
            self._parent_reg = None
