from __future__ import annotations

import threading


class CancellationToken:
    """Thread-safe flag checked by the window controller between windows."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
