"""
Background execution of blocking control-plane calls.

Jobs run on a ``QThreadPool``; their outcome is re-emitted through a queued
signal so callbacks always execute on the thread that owns the runner (the
UI thread).
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from PySide6.QtCore import QObject, QRunnable, QThreadPool, Signal, Slot

from studio_tray.studio_tray import logger as app_logger

SuccessCallback = Callable[[Any], None]
ErrorCallback = Callable[[Exception], None]


class _Job(QRunnable):
    def __init__(self, fn: Callable[[], Any], on_success: SuccessCallback, on_error: ErrorCallback, completed) -> None:
        super().__init__()
        self._fn = fn
        self._on_success = on_success
        self._on_error = on_error
        self._completed = completed

    def run(self) -> None:
        try:
            result = self._fn()
        except Exception as exc:  # delivered to the error callback on the UI thread
            self._completed.emit((self._on_error, exc))
            return
        self._completed.emit((self._on_success, result))


class RequestRunner(QObject):
    """Runs callables off the UI thread and reports back on it."""

    _completed = Signal(object)

    def __init__(self, pool: Optional[QThreadPool] = None, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._pool = pool or QThreadPool.globalInstance()
        self._completed.connect(self._deliver)

    def submit(self, fn: Callable[[], Any], on_success: SuccessCallback, on_error: ErrorCallback) -> None:
        self._pool.start(_Job(fn, on_success, on_error, self._completed))

    def wait_for_done(self, timeout_ms: int = -1) -> bool:
        return self._pool.waitForDone(timeout_ms)

    @Slot(object)
    def _deliver(self, outcome: tuple) -> None:
        callback, value = outcome
        try:
            callback(value)
        except Exception:
            self._logger.exception("Request callback raised.")
