"""
Desktop notifications for studio transitions.
"""

from __future__ import annotations

from typing import Optional

from PySide6.QtWidgets import QSystemTrayIcon

from studio_tray.studio_tray import logger as app_logger

NOTIFICATION_TIMEOUT_MS = 8000


class TrayNotifier:
    """Shows transition messages as tray balloons. Never raises."""

    def __init__(self, tray: Optional[QSystemTrayIcon] = None, *, enabled: bool = True) -> None:
        self._tray = tray
        self._enabled = enabled
        self._logger = app_logger.get_logger()

    def attach(self, tray: QSystemTrayIcon) -> None:
        self._tray = tray

    def notify(self, title: str, body: str) -> None:
        self._logger.info("Notification: {}: {}", title, body)
        if not self._enabled:
            self._logger.debug("Notifications disabled; skipping tray message.")
            return
        if self._tray is None or not QSystemTrayIcon.supportsMessages():
            self._logger.warning("Tray messages are not supported on this system.")
            return
        try:
            self._tray.showMessage(title, body, QSystemTrayIcon.MessageIcon.Information, NOTIFICATION_TIMEOUT_MS)
        except RuntimeError as exc:  # pragma: no cover - tray torn down mid-call
            self._logger.error("Error sending notification: {}", exc)
