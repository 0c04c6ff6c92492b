"""
Tray icon selection for the current studio status.
"""

from __future__ import annotations

from enum import Enum

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QStyle

from studio_shared.machine_types import is_cpu_machine, is_known_machine
from studio_shared.studio_status import StudioStatus


class TrayIconKind(Enum):
    STOPPED = "stopped"
    WAITING = "waiting"
    INITIALIZING = "initializing"
    RUNNING_CPU = "running_cpu"
    RUNNING_GPU = "running_gpu"
    UNKNOWN = "unknown"


_STANDARD_PIXMAPS = {
    TrayIconKind.STOPPED: QStyle.StandardPixmap.SP_MediaStop,
    TrayIconKind.WAITING: QStyle.StandardPixmap.SP_BrowserReload,
    TrayIconKind.INITIALIZING: QStyle.StandardPixmap.SP_MediaSeekForward,
    TrayIconKind.RUNNING_CPU: QStyle.StandardPixmap.SP_MediaPlay,
    TrayIconKind.RUNNING_GPU: QStyle.StandardPixmap.SP_ComputerIcon,
    TrayIconKind.UNKNOWN: QStyle.StandardPixmap.SP_MessageBoxQuestion,
}


def icon_kind_for(status: StudioStatus, machine: str) -> TrayIconKind:
    if status is StudioStatus.STOPPED:
        return TrayIconKind.STOPPED
    if status in (StudioStatus.PENDING, StudioStatus.STOPPING):
        return TrayIconKind.WAITING
    if status is StudioStatus.INITIALIZING:
        return TrayIconKind.INITIALIZING
    if status is StudioStatus.RUNNING:
        if not is_known_machine(machine):
            return TrayIconKind.UNKNOWN
        return TrayIconKind.RUNNING_CPU if is_cpu_machine(machine) else TrayIconKind.RUNNING_GPU
    return TrayIconKind.UNKNOWN


def icon_for(status: StudioStatus, machine: str) -> QIcon:
    kind = icon_kind_for(status, machine)
    return QApplication.style().standardIcon(_STANDARD_PIXMAPS[kind])
