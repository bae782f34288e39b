"""Qt event-loop implementation of the session's tick scheduler."""

from __future__ import annotations

from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer


class QtTickHandle:
    """Cancellation handle for one repeating QTimer."""

    def __init__(self, timer: QTimer) -> None:
        self._timer: Optional[QTimer] = timer

    def cancel(self) -> None:
        if self._timer is None:
            return
        self._timer.stop()
        self._timer.deleteLater()
        self._timer = None


class QtTickScheduler:
    def __init__(self, parent: Optional[QObject] = None) -> None:
        self._parent = parent

    def every(self, interval: float, callback: Callable[[], None]) -> QtTickHandle:
        timer = QTimer(self._parent)
        timer.setInterval(int(interval * 1000))
        timer.timeout.connect(callback)
        timer.start()
        return QtTickHandle(timer)
