from __future__ import annotations

import threading
import time
from typing import Optional

from ..core.exceptions import OperationCancelled


class CancellationToken:
    """Cooperative cancellation flag shared by resolver/aggregator workers.

    Cancelled either explicitly via ``cancel()`` or once ``timeout_seconds``
    has elapsed since creation.
    """

    def __init__(self, *, timeout_seconds: Optional[float] = None):
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout_seconds if timeout_seconds else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._deadline is not None and time.monotonic() >= self._deadline:
            self._event.set()
            return True
        return False

    def raise_if_cancelled(self) -> None:
        if self.cancelled:
            raise OperationCancelled("Operation cancelled")


def check_cancelled(token: Optional[CancellationToken]) -> None:
    if token is not None:
        token.raise_if_cancelled()
