"""Exclusivity token for one split-and-apply cycle.

Contains:
- SplitSession: Owns the index for one cycle, records the pre-split HEAD
  and carries cooperative cancellation
"""

import logging
import signal
import threading
from contextlib import contextmanager
from typing import Iterator, Optional

logger = logging.getLogger(__name__)


class SplitSession:
    """State owned by the caller for the duration of one split.

    apply_plan checks ``cancelled`` only between planned commits, so a
    commit whose staging has started always runs to completion.

    Attributes:
        pre_head: HEAD before any commit was created (None on an unborn branch).
    """

    def __init__(self, pre_head: Optional[str] = None):
        self.pre_head = pre_head
        self._cancelled = threading.Event()
        self._closed = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def closed(self) -> bool:
        return self._closed

    def cancel(self) -> None:
        """Request that no further commits be started."""
        if not self._cancelled.is_set():
            logger.info("Cancellation requested; stopping after the current commit")
        self._cancelled.set()

    def close(self) -> None:
        self._closed = True

    def __enter__(self) -> "SplitSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @contextmanager
    def interrupt_guard(self) -> Iterator["SplitSession"]:
        """Turn Ctrl-C into cancel() while the block runs.

        Only installs a handler on the main thread; elsewhere the block
        runs unguarded.
        """
        if threading.current_thread() is not threading.main_thread():
            yield self
            return

        def _handler(signum, frame):
            self.cancel()

        previous = signal.signal(signal.SIGINT, _handler)
        try:
            yield self
        finally:
            signal.signal(signal.SIGINT, previous)
