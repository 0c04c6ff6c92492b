"""
Entry point for the Lightning Studio tray application.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import Callable, Iterable, Iterator, Tuple

from PySide6.QtCore import QDir, QLockFile
from PySide6.QtWidgets import QApplication, QSystemTrayIcon

from studio_core.app import APP_NAME, APP_VERSION, AppCoordinator
from studio_tray.studio_tray import logger as app_logger

_LOGGER = app_logger.get_logger()
_LOCK_PATH = Path(QDir.tempPath()) / "lightning-studio-tray.lock"
_INITIAL_BACKOFF_SECONDS = 2
_MAX_BACKOFF_SECONDS = 30


class _InstanceGuard:
    """Lock file guard to prevent concurrent instances."""

    def __init__(self, path: Path) -> None:
        self._lock = QLockFile(str(path))
        self._lock.setStaleLockTime(0)

    def acquire(self) -> bool:
        return self._lock.tryLock(100)

    def release(self) -> None:
        if not self._lock.isLocked():
            return
        self._lock.unlock()


def _run_application_once(argv: Iterable[str]) -> Tuple[int, bool]:
    """Start the Qt application once and report whether shutdown was intentional."""
    app = QApplication.instance() or QApplication(list(argv))
    app.setApplicationName(APP_NAME)
    app.setQuitOnLastWindowClosed(False)
    if not QSystemTrayIcon.isSystemTrayAvailable():
        _LOGGER.error("No system tray available on this desktop.")
        return 1, True
    coordinator = AppCoordinator()
    coordinator.start()
    exit_code = app.exec()
    manual_shutdown = getattr(coordinator, "manual_shutdown_requested", False)
    return exit_code, bool(manual_shutdown)


def _backoff_delays(initial: int = _INITIAL_BACKOFF_SECONDS, ceiling: int = _MAX_BACKOFF_SECONDS) -> Iterator[int]:
    delay = initial
    while True:
        yield delay
        delay = min(delay * 2, ceiling)


def _supervise(run_once: Callable[[], Tuple[int, bool]], sleep: Callable[[float], None] = time.sleep) -> int:
    """
    Run the tray until the user quits.

    A crash or an exit the user did not ask for restarts the app after a
    growing delay.
    """
    delays = _backoff_delays()
    while True:
        try:
            exit_code, manual = run_once()
        except Exception:
            _LOGGER.exception("Tray app crashed.")
            exit_code, manual = 1, False
        if manual:
            return exit_code
        delay = next(delays)
        _LOGGER.warning("Tray app stopped with code {}; restarting in {} seconds.", exit_code, delay)
        sleep(delay)


def main() -> int:
    log_path = app_logger.configure()
    guard = _InstanceGuard(_LOCK_PATH)
    if not guard.acquire():
        _LOGGER.debug("Another tray instance holds {}; exiting.", _LOCK_PATH)
        return 0
    _LOGGER.info("Starting {} {}; log file {}.", APP_NAME, APP_VERSION, log_path or "disabled")
    try:
        return _supervise(lambda: _run_application_once(sys.argv))
    finally:
        guard.release()


if __name__ == "__main__":
    raise SystemExit(main())
