"""
Settings window for API credentials, studio selection and refresh periods.
"""

from __future__ import annotations

from typing import Iterable, Optional

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QDialogButtonBox,
    QFormLayout,
    QGroupBox,
    QLabel,
    QLineEdit,
    QMessageBox,
    QSpinBox,
    QStyle,
    QVBoxLayout,
    QWidget,
)

from studio_core.settings import StudioSettings
from studio_shared.studio_status import Target


class SettingsDialog(QDialog):
    """Collects settings and emits them when the user saves."""

    settingsSubmitted = Signal(object)

    def __init__(self, settings: StudioSettings, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.setWindowTitle("Lightning Studio Settings")
        self.setWindowIcon(self.style().standardIcon(QStyle.StandardPixmap.SP_ComputerIcon))
        self.setMinimumWidth(400)
        self._build_ui()
        self.load(settings)

    def _build_ui(self) -> None:
        layout = QVBoxLayout(self)
        layout.setSpacing(10)

        self._error_label = QLabel()
        self._error_label.setObjectName("SettingsErrorLabel")
        self._error_label.setWordWrap(True)
        self._error_label.setStyleSheet(
            "color: #b00020; background-color: rgba(255, 0, 0, 0.08); border-radius: 8px; padding: 8px;"
        )
        self._error_label.hide()
        layout.addWidget(self._error_label)

        credentials_box = QGroupBox("Lightning API Credentials")
        credentials_form = QFormLayout(credentials_box)
        self._user_id_edit = QLineEdit()
        self._api_key_edit = QLineEdit()
        self._api_key_edit.setEchoMode(QLineEdit.EchoMode.Password)
        self._teamspace_edit = QLineEdit()
        self._studio_combo = QComboBox()
        self._studio_combo.setEditable(True)
        credentials_form.addRow("User ID", self._user_id_edit)
        credentials_form.addRow("API Key", self._api_key_edit)
        credentials_form.addRow("Teamspace ID", self._teamspace_edit)
        credentials_form.addRow("Studio", self._studio_combo)
        layout.addWidget(credentials_box)

        system_box = QGroupBox("System Settings")
        system_form = QFormLayout(system_box)
        self._refresh_spin = QSpinBox()
        self._refresh_spin.setRange(5, 300)
        self._refresh_spin.setSingleStep(5)
        self._refresh_spin.setSuffix(" s")
        self._fast_refresh_spin = QSpinBox()
        self._fast_refresh_spin.setRange(1, 60)
        self._fast_refresh_spin.setSuffix(" s")
        system_form.addRow("Idle refresh period", self._refresh_spin)
        system_form.addRow("Transition refresh period", self._fast_refresh_spin)
        layout.addWidget(system_box)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Save | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self._on_save)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    def load(self, settings: StudioSettings) -> None:
        self._user_id_edit.setText(settings.user_id)
        self._api_key_edit.setText(settings.api_key)
        self._teamspace_edit.setText(settings.teamspace_id)
        self._studio_combo.setEditText(settings.studio_name)
        self._refresh_spin.setValue(settings.refresh_period_seconds)
        self._fast_refresh_spin.setValue(settings.fast_refresh_period_seconds)

    def set_targets(self, targets: Iterable[Target]) -> None:
        current = self._studio_combo.currentText()
        self._studio_combo.clear()
        self._studio_combo.addItems([target.name for target in targets])
        self._studio_combo.setEditText(current)

    def set_error(self, message: str) -> None:
        self._error_label.setText(message)
        self._error_label.setVisible(bool(message))

    def collect(self) -> StudioSettings:
        return StudioSettings(
            user_id=self._user_id_edit.text().strip(),
            api_key=self._api_key_edit.text().strip(),
            teamspace_id=self._teamspace_edit.text().strip(),
            studio_name=self._studio_combo.currentText().strip(),
            refresh_period_seconds=self._refresh_spin.value(),
            fast_refresh_period_seconds=self._fast_refresh_spin.value(),
        )

    def _on_save(self) -> None:
        settings = self.collect()
        if not settings.is_complete():
            QMessageBox.warning(
                self,
                "Configuration Incomplete",
                "Please fill in all required fields before closing the settings window.",
            )
            return
        self.settingsSubmitted.emit(settings)
        self.accept()
