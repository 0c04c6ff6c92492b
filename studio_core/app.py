"""
Application coordinator wiring the tray menu to the studio controller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from PySide6.QtCore import QObject
from PySide6.QtGui import QAction
from PySide6.QtWidgets import QApplication, QMenu, QSystemTrayIcon

from studio_core.control_client import StudioControlClient
from studio_core.controller import StudioController
from studio_core.notifier import TrayNotifier
from studio_core.settings import StudioSettings, StudioSettingsManager
from studio_core.settings_dialog import SettingsDialog
from studio_core.tray_icons import icon_for
from studio_shared.machine_types import KNOWN_MACHINE_TYPES, is_current_machine
from studio_shared.studio_status import StudioStatus
from studio_tray.studio_tray import logger as app_logger

APP_NAME = "Lightning Studio Tray"
APP_VERSION = "1.0.0"


@dataclass
class AppCoordinator(QObject):
    settings_manager: StudioSettingsManager = field(default_factory=StudioSettingsManager)

    def __post_init__(self) -> None:
        super().__init__()
        self._logger = app_logger.get_logger()
        self._manual_shutdown_requested = False
        self._settings: StudioSettings = self.settings_manager.read_settings()
        self._settings_dialog: Optional[SettingsDialog] = None

        self._tray = QSystemTrayIcon(self)
        self._tray.setToolTip(f"{APP_NAME} v{APP_VERSION}")
        self._notifier = TrayNotifier(self._tray)

        self._controller = StudioController(
            StudioControlClient(self._settings.credentials),
            notifier=self._notifier,
            settings_manager=self.settings_manager,
            refresh_period_seconds=self._settings.refresh_period_seconds,
            fast_refresh_period_seconds=self._settings.fast_refresh_period_seconds,
            parent=self,
        )
        self._controller.statusChanged.connect(self._on_state_changed)
        self._controller.machineChanged.connect(self._on_state_changed)
        self._controller.errorChanged.connect(self._on_error_changed)
        self._controller.targetsChanged.connect(self._on_targets_changed)

        self._menu = QMenu()
        self._tray.setContextMenu(self._menu)
        self._rebuild_menu()
        self._update_icon()

    @property
    def controller(self) -> StudioController:
        return self._controller

    def start(self) -> None:
        self._logger.info("Starting tray coordinator for studio '{}'.", self._settings.studio_name)
        self._tray.show()
        if self._settings.studio_name:
            self._controller.select_target(self._settings.studio_name)
        if self._settings.credentials.is_complete:
            self._controller.fetch_targets()
        if not self._settings.is_complete():
            self._logger.info("Settings incomplete; opening settings window.")
            self._open_settings()

    def shutdown(self) -> None:
        self._logger.info("Shutting down application on user request.")
        self._manual_shutdown_requested = True
        self._controller.shutdown()
        if self._settings_dialog is not None:
            self._settings_dialog.close()
        self._tray.hide()
        QApplication.instance().quit()

    @property
    def manual_shutdown_requested(self) -> bool:
        return self._manual_shutdown_requested

    # ------------------------------------------------------------------#
    # Menu
    # ------------------------------------------------------------------#

    def _rebuild_menu(self) -> None:
        self._menu.clear()
        status = self._controller.status
        machine = self._controller.machine

        title = self._controller.target_name or "No studio selected"
        title_action = self._menu.addAction(title)
        title_action.setEnabled(False)

        if status.is_transient:
            status_action = self._menu.addAction(status.value)
            status_action.setEnabled(False)

        if status is not StudioStatus.STOPPED:
            switch_menu = self._menu.addMenu("Switch Machine")
            for machine_type in KNOWN_MACHINE_TYPES:
                action = switch_menu.addAction(machine_type.label)
                action.setEnabled(not is_current_machine(machine_type, machine))
                action.triggered.connect(
                    lambda _checked=False, name=machine_type.name: self._controller.switch_machine(name)
                )
        else:
            start_menu = self._menu.addMenu("Start")
            for machine_type in KNOWN_MACHINE_TYPES:
                action = start_menu.addAction(machine_type.label)
                action.triggered.connect(
                    lambda _checked=False, name=machine_type.name: self._controller.start(name)
                )

        stop_action = self._menu.addAction("Stop")
        stop_action.setEnabled(status is StudioStatus.RUNNING)
        stop_action.triggered.connect(self._controller.stop)

        self._menu.addSeparator()
        refresh_action = QAction("Refresh Now", self._menu)
        refresh_action.triggered.connect(self._manual_refresh)
        self._menu.addAction(refresh_action)
        settings_action = QAction("Settings…", self._menu)
        settings_action.triggered.connect(self._open_settings)
        self._menu.addAction(settings_action)

        self._menu.addSeparator()
        exit_action = QAction("Quit", self._menu)
        exit_action.triggered.connect(self.shutdown)
        self._menu.addAction(exit_action)

    def _update_icon(self) -> None:
        status = self._controller.status
        self._tray.setIcon(icon_for(status, self._controller.machine))
        name = self._controller.target_name or APP_NAME
        self._tray.setToolTip(f"{name}: {status.value} ({self._controller.machine})")

    def _manual_refresh(self) -> None:
        self._logger.info("Manual refresh triggered from tray menu.")
        self._controller.refresh()

    # ------------------------------------------------------------------#
    # Controller signals
    # ------------------------------------------------------------------#

    def _on_state_changed(self, _value: str) -> None:
        self._rebuild_menu()
        self._update_icon()

    def _on_error_changed(self, message: str) -> None:
        if self._settings_dialog is not None:
            self._settings_dialog.set_error(message)
        if message:
            self._logger.warning("Studio error: {}", message)
            self._open_settings()

    def _on_targets_changed(self, targets: list) -> None:
        if self._settings_dialog is not None:
            self._settings_dialog.set_targets(targets)

    # ------------------------------------------------------------------#
    # Settings
    # ------------------------------------------------------------------#

    def _open_settings(self) -> None:
        if self._settings_dialog is None:
            self._settings_dialog = SettingsDialog(self._settings)
            self._settings_dialog.settingsSubmitted.connect(self._on_settings_submitted)
            self._settings_dialog.finished.connect(self._on_settings_closed)
            self._settings_dialog.set_targets(self._controller.targets)
        self._settings_dialog.set_error(self._controller.last_error or "")
        self._settings_dialog.show()
        self._settings_dialog.raise_()
        self._settings_dialog.activateWindow()

    def _on_settings_submitted(self, settings: StudioSettings) -> None:
        credentials_changed = settings.credentials != self._settings.credentials
        self._settings = self.settings_manager.save_settings(settings)
        self._controller.apply_settings(self._settings)
        if credentials_changed:
            self._controller.fetch_targets()

    def _on_settings_closed(self, _result: int) -> None:
        dialog = self._settings_dialog
        self._settings_dialog = None
        if dialog is not None:
            dialog.deleteLater()
