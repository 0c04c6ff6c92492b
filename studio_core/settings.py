"""
Persisted configuration for the studio tray runtime.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Optional

from PySide6.QtCore import QSettings

from studio_core.control_client import Credentials
from studio_tray.studio_tray import logger as app_logger

_LOGGER = app_logger.get_logger()

ORGANIZATION_NAME = "Lightning Studio Tray"
APPLICATION_NAME = "Lightning Studio Tray"

DEFAULT_REFRESH_PERIOD_SECONDS = 30
DEFAULT_FAST_REFRESH_PERIOD_SECONDS = 5
_MIN_REFRESH_PERIOD = 5
_MAX_REFRESH_PERIOD = 300
_MIN_FAST_REFRESH_PERIOD = 1
_MAX_FAST_REFRESH_PERIOD = 60

KEY_USER_ID = "LIGHTNING_USER_ID"
KEY_API_KEY = "LIGHTNING_API_KEY"
KEY_TEAMSPACE_ID = "LIGHTNING_TEAMSPACE_ID"
KEY_STUDIO_NAME = "LIGHTNING_STUDIO_NAME"
KEY_REFRESH_PERIOD = "LIGHTNING_REFRESH_PERIOD"
KEY_FAST_REFRESH_PERIOD = "LIGHTNING_FAST_REFRESH_PERIOD"


@dataclass(eq=True)
class StudioSettings:
    user_id: str = ""
    api_key: str = ""
    teamspace_id: str = ""
    studio_name: str = ""
    refresh_period_seconds: int = DEFAULT_REFRESH_PERIOD_SECONDS
    fast_refresh_period_seconds: int = DEFAULT_FAST_REFRESH_PERIOD_SECONDS

    @property
    def credentials(self) -> Credentials:
        return Credentials(user_id=self.user_id, api_key=self.api_key, teamspace_id=self.teamspace_id)

    def is_complete(self) -> bool:
        return self.credentials.is_complete and bool(self.studio_name)


def clamp_refresh_period(seconds: Any) -> int:
    return _clamp("Refresh period", seconds, DEFAULT_REFRESH_PERIOD_SECONDS, _MIN_REFRESH_PERIOD, _MAX_REFRESH_PERIOD)


def clamp_fast_refresh_period(seconds: Any) -> int:
    return _clamp(
        "Fast refresh period",
        seconds,
        DEFAULT_FAST_REFRESH_PERIOD_SECONDS,
        _MIN_FAST_REFRESH_PERIOD,
        _MAX_FAST_REFRESH_PERIOD,
    )


def _clamp(label: str, raw: Any, default: int, minimum: int, maximum: int) -> int:
    try:
        value = int(float(raw))
    except (TypeError, ValueError):
        if raw not in (None, ""):
            _LOGGER.warning("{} {!r} is not a number. Using default {}.", label, raw, default)
        return default
    if value < minimum or value > maximum:
        _LOGGER.warning("{} {} outside {}..{}. Clamping to safe bounds.", label, value, minimum, maximum)
    return max(minimum, min(maximum, value))


class StudioSettingsManager:
    """Loads and saves settings through a ``QSettings``-like key-value store."""

    def __init__(self, *, store: Optional[Any] = None) -> None:
        self._store = store if store is not None else QSettings(ORGANIZATION_NAME, APPLICATION_NAME)

    def read_settings(self) -> StudioSettings:
        return StudioSettings(
            user_id=self._read_str(KEY_USER_ID),
            api_key=self._read_str(KEY_API_KEY),
            teamspace_id=self._read_str(KEY_TEAMSPACE_ID),
            studio_name=self._read_str(KEY_STUDIO_NAME),
            refresh_period_seconds=clamp_refresh_period(self._store.value(KEY_REFRESH_PERIOD, None)),
            fast_refresh_period_seconds=clamp_fast_refresh_period(self._store.value(KEY_FAST_REFRESH_PERIOD, None)),
        )

    def save_settings(self, settings: StudioSettings) -> StudioSettings:
        normalized = replace(
            settings,
            user_id=settings.user_id.strip(),
            api_key=settings.api_key.strip(),
            teamspace_id=settings.teamspace_id.strip(),
            studio_name=settings.studio_name.strip(),
            refresh_period_seconds=clamp_refresh_period(settings.refresh_period_seconds),
            fast_refresh_period_seconds=clamp_fast_refresh_period(settings.fast_refresh_period_seconds),
        )
        self._store.setValue(KEY_USER_ID, normalized.user_id)
        self._store.setValue(KEY_API_KEY, normalized.api_key)
        self._store.setValue(KEY_TEAMSPACE_ID, normalized.teamspace_id)
        self._store.setValue(KEY_STUDIO_NAME, normalized.studio_name)
        self._store.setValue(KEY_REFRESH_PERIOD, normalized.refresh_period_seconds)
        self._store.setValue(KEY_FAST_REFRESH_PERIOD, normalized.fast_refresh_period_seconds)
        self._store.sync()
        _LOGGER.info("Saved settings for studio '{}'.", normalized.studio_name)
        return normalized

    def save_value(self, key: str, value: Any) -> None:
        self._store.setValue(key, value)
        self._store.sync()

    def _read_str(self, key: str) -> str:
        value = self._store.value(key, "")
        if value is None:
            return ""
        return str(value).strip()
