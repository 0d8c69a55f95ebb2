# scheduler.py
from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class DelayedTask:
    """Runs `fn` once after `delay_ms` unless cancelled first."""

    def __init__(self, delay_ms: int, fn: Callable[[], None], parent: Optional[QObject] = None) -> None:
        self._fn: Optional[Callable[[], None]] = fn
        self._timer: Optional[QTimer] = QTimer(parent)
        self._timer.setSingleShot(True)
        self._timer.setInterval(max(0, int(delay_ms)))
        self._timer.timeout.connect(self._fire)
        self._timer.start()

    @property
    def pending(self) -> bool:
        return self._fn is not None

    def cancel(self) -> None:
        self._finish()

    def _fire(self) -> None:
        fn = self._fn
        self._finish()
        if fn is not None:
            fn()

    def _finish(self) -> None:
        # The timer is parented to a long-lived object; drop it once spent.
        self._fn = None
        timer, self._timer = self._timer, None
        if timer is not None:
            timer.stop()
            timer.deleteLater()


class QtScheduler:
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def call_later(self, delay_ms: int, fn: Callable[[], None]) -> DelayedTask:
        return DelayedTask(delay_ms, fn, self._parent)
