"""
Polling and state reconciliation for the selected studio.

``StudioController`` owns the observable studio state. It lives on the UI
thread; every control-plane call runs through the request runner and its
result is applied back on the UI thread, so observers never need locking.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol

from PySide6.QtCore import QObject, QTimer, Signal

from studio_core.control_client import ControlClientError, Credentials, StudioControlClient
from studio_core.request_runner import RequestRunner
from studio_core.settings import (
    DEFAULT_FAST_REFRESH_PERIOD_SECONDS,
    DEFAULT_REFRESH_PERIOD_SECONDS,
    KEY_FAST_REFRESH_PERIOD,
    KEY_REFRESH_PERIOD,
    StudioSettings,
    StudioSettingsManager,
    clamp_fast_refresh_period,
    clamp_refresh_period,
)
from studio_shared.machine_types import UNKNOWN_MACHINE
from studio_shared.studio_status import StudioStatus, Target
from studio_tray.studio_tray import logger as app_logger


class Notifier(Protocol):
    def notify(self, title: str, body: str) -> None:
        ...


class Runner(Protocol):
    def submit(self, fn: Callable[[], Any], on_success: Callable[[Any], None], on_error: Callable[[Exception], None]) -> None:
        ...


@dataclass
class PollingState:
    last_status: StudioStatus = StudioStatus.UNKNOWN
    fast_timer_active: bool = True


@dataclass(frozen=True)
class _RefreshResult:
    target: Target
    status: StudioStatus
    machine: str


class StudioController(QObject):
    """
    Tracks one studio: polls it on a dual-rate schedule, mediates
    start/stop/switch requests, and raises notifications when the studio
    settles into RUNNING or STOPPED.
    """

    statusChanged = Signal(str)
    machineChanged = Signal(str)
    errorChanged = Signal(str)
    targetsChanged = Signal(list)

    def __init__(
        self,
        client: StudioControlClient,
        *,
        notifier: Optional[Notifier] = None,
        runner: Optional[Runner] = None,
        settings_manager: Optional[StudioSettingsManager] = None,
        client_factory: Callable[[Credentials], StudioControlClient] = StudioControlClient,
        refresh_period_seconds: int = DEFAULT_REFRESH_PERIOD_SECONDS,
        fast_refresh_period_seconds: int = DEFAULT_FAST_REFRESH_PERIOD_SECONDS,
        parent: Optional[QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._logger = app_logger.get_logger()
        self._client = client
        self._client_factory = client_factory
        self._notifier = notifier
        self._runner = runner if runner is not None else RequestRunner(parent=self)
        self._settings_manager = settings_manager

        self._refresh_period = clamp_refresh_period(refresh_period_seconds)
        self._fast_refresh_period = clamp_fast_refresh_period(fast_refresh_period_seconds)

        self._target_name = ""
        self._target: Optional[Target] = None
        self._targets: List[Target] = []
        self._status = StudioStatus.UNKNOWN
        self._machine = UNKNOWN_MACHINE
        self._last_error: Optional[str] = None
        self._polling = PollingState()

        # Refreshes are numbered; completions older than the newest applied one are dropped.
        self._refresh_seq = 0
        self._applied_seq = 0
        self._shut_down = False

        self._poll_timer = QTimer(self)
        self._poll_timer.timeout.connect(self.refresh)

    # ------------------------------------------------------------------#
    # Observable state
    # ------------------------------------------------------------------#

    @property
    def status(self) -> StudioStatus:
        return self._status

    @property
    def machine(self) -> str:
        return self._machine

    @property
    def last_error(self) -> Optional[str]:
        return self._last_error

    @property
    def target_name(self) -> str:
        return self._target_name

    @property
    def target(self) -> Optional[Target]:
        return self._target

    @property
    def targets(self) -> List[Target]:
        return list(self._targets)

    @property
    def polling_state(self) -> PollingState:
        return self._polling

    @property
    def fast_polling_active(self) -> bool:
        return self._polling.fast_timer_active

    @property
    def polling_active(self) -> bool:
        return self._poll_timer.isActive()

    @property
    def poll_interval_seconds(self) -> int:
        if self._polling.fast_timer_active:
            return self._fast_refresh_period
        return self._refresh_period

    @property
    def refresh_period_seconds(self) -> int:
        return self._refresh_period

    @property
    def fast_refresh_period_seconds(self) -> int:
        return self._fast_refresh_period

    # ------------------------------------------------------------------#
    # Lifecycle
    # ------------------------------------------------------------------#

    def start_polling(self) -> None:
        self._shut_down = False
        self._restart_scheduler()
        self.refresh()

    def shutdown(self) -> None:
        self._logger.info("Stopping studio polling.")
        self._shut_down = True
        self._poll_timer.stop()
        self._invalidate_in_flight()

    def apply_settings(self, settings: StudioSettings) -> None:
        """Swap in new credentials and periods; reselect the studio if it changed."""
        self._client = self._client_factory(settings.credentials)
        self._refresh_period = clamp_refresh_period(settings.refresh_period_seconds)
        self._fast_refresh_period = clamp_fast_refresh_period(settings.fast_refresh_period_seconds)
        self._invalidate_in_flight()
        if settings.studio_name.strip() != self._target_name:
            self.select_target(settings.studio_name)
            return
        self._restart_scheduler()
        self.refresh()

    # ------------------------------------------------------------------#
    # Operations
    # ------------------------------------------------------------------#

    def select_target(self, name: str) -> None:
        name = (name or "").strip()
        self._logger.info("Selecting studio '{}'.", name)
        self._target_name = name
        self._target = None
        self._invalidate_in_flight()
        self._polling = PollingState()
        self._set_status(StudioStatus.UNKNOWN)
        self._set_machine(UNKNOWN_MACHINE)
        if not name:
            self._poll_timer.stop()
            return
        self._restart_scheduler()
        self.refresh()

    def refresh(self) -> None:
        if self._shut_down or not self._target_name:
            return

        self._refresh_seq += 1
        seq = self._refresh_seq
        name = self._target_name
        client = self._client

        def fetch() -> _RefreshResult:
            target = client.resolve_target(name)
            status = client.get_status(target)
            machine = client.get_machine(target)
            return _RefreshResult(target=target, status=status, machine=machine)

        self._runner.submit(
            fetch,
            lambda result: self._on_refresh_succeeded(seq, result),
            lambda exc: self._on_refresh_failed(seq, exc),
        )

    def fetch_targets(self) -> None:
        if self._shut_down:
            return
        client = self._client
        self._runner.submit(client.list_targets, self._on_targets_fetched, self._on_targets_failed)

    def switch_machine(self, machine_type: str) -> None:
        self._run_mutation("switch machine", lambda client, target: client.switch_machine(target, machine_type))

    def start(self, machine_type: str) -> None:
        self._run_mutation("start studio", lambda client, target: client.start(target, machine_type))

    def stop(self) -> None:
        self._run_mutation("stop studio", lambda client, target: client.stop(target))

    def update_refresh_period(self, seconds: int) -> None:
        self._refresh_period = clamp_refresh_period(seconds)
        self._logger.info("Refresh period set to {} seconds.", self._refresh_period)
        if self._settings_manager is not None:
            self._settings_manager.save_value(KEY_REFRESH_PERIOD, self._refresh_period)
        if not self._polling.fast_timer_active:
            self._restart_scheduler()

    def update_fast_refresh_period(self, seconds: int) -> None:
        self._fast_refresh_period = clamp_fast_refresh_period(seconds)
        self._logger.info("Fast refresh period set to {} seconds.", self._fast_refresh_period)
        if self._settings_manager is not None:
            self._settings_manager.save_value(KEY_FAST_REFRESH_PERIOD, self._fast_refresh_period)
        if self._polling.fast_timer_active:
            self._restart_scheduler()

    # ------------------------------------------------------------------#
    # Completion handlers (UI thread)
    # ------------------------------------------------------------------#

    def _on_refresh_succeeded(self, seq: int, result: _RefreshResult) -> None:
        if not self._accept(seq):
            return
        previous = self._polling.last_status
        self._target = result.target
        self._set_machine(result.machine)
        self._set_status(result.status)
        self._set_error(None)
        self._polling.last_status = result.status
        self._update_cadence(result.status)

        if result.status.is_settled and result.status != previous:
            self._notify_transition(result.status)

    def _on_refresh_failed(self, seq: int, exc: Exception) -> None:
        if not self._accept(seq):
            return
        self._log_failure(exc, "Failed to get status for '{}': {}", self._target_name, exc)
        self._set_error(str(exc))

    def _on_targets_fetched(self, targets: List[Target]) -> None:
        if self._shut_down:
            return
        self._targets = list(targets)
        self.targetsChanged.emit(self.targets)
        if not self._target_name and self._targets:
            self.select_target(self._targets[0].name)

    def _on_targets_failed(self, exc: Exception) -> None:
        if self._shut_down:
            return
        self._log_failure(exc, "Failed to fetch studios: {}", exc)
        self._set_error(f"Failed to fetch studios: {exc}")

    def _run_mutation(self, action: str, call: Callable[[StudioControlClient, Target], None]) -> None:
        if self._shut_down:
            return
        if not self._target_name:
            self._set_error(f"Failed to {action}: no studio selected.")
            return

        name = self._target_name
        client = self._client

        def mutate() -> None:
            call(client, client.resolve_target(name))

        def on_success(_: Any) -> None:
            if self._shut_down:
                return
            self._logger.info("Request to {} for '{}' accepted.", action, name)
            # The control plane does not report the new status synchronously.
            self.refresh()

        def on_error(exc: Exception) -> None:
            if self._shut_down:
                return
            self._log_failure(exc, "Failed to {} for '{}': {}", action, name, exc)
            self._set_error(f"Failed to {action}: {exc}")

        self._runner.submit(mutate, on_success, on_error)

    # ------------------------------------------------------------------#
    # Helpers
    # ------------------------------------------------------------------#

    def _accept(self, seq: int) -> bool:
        if self._shut_down or seq <= self._applied_seq:
            self._logger.debug("Discarding stale refresh #{} (applied #{}).", seq, self._applied_seq)
            return False
        self._applied_seq = seq
        return True

    def _log_failure(self, exc: Exception, message: str, *args: Any) -> None:
        if isinstance(exc, ControlClientError):
            self._logger.warning(message, *args)
            return
        self._logger.opt(exception=exc).error(message, *args)

    def _invalidate_in_flight(self) -> None:
        self._applied_seq = self._refresh_seq

    def _update_cadence(self, status: StudioStatus) -> None:
        want_fast = status.is_transient
        if want_fast == self._polling.fast_timer_active:
            return
        self._polling.fast_timer_active = want_fast
        if want_fast:
            self._logger.info("Studio is {}; polling every {} seconds.", status.value, self._fast_refresh_period)
        else:
            self._logger.info("Studio settled as {}; polling every {} seconds.", status.value, self._refresh_period)
        self._restart_scheduler()

    def _restart_scheduler(self) -> None:
        self._poll_timer.stop()
        if self._shut_down or not self._target_name:
            return
        self._poll_timer.start(self.poll_interval_seconds * 1000)

    def _notify_transition(self, status: StudioStatus) -> None:
        if self._notifier is None:
            return
        title = self._target.label if self._target else self._target_name
        if status is StudioStatus.STOPPED:
            body = "Studio is stopped."
        else:
            body = f"Studio is running on {self._machine}."
        self._notifier.notify(title, body)

    def _set_status(self, status: StudioStatus) -> None:
        if status == self._status:
            return
        self._status = status
        self.statusChanged.emit(status.value)

    def _set_machine(self, machine: str) -> None:
        if machine == self._machine:
            return
        self._machine = machine
        self.machineChanged.emit(machine)

    def _set_error(self, message: Optional[str]) -> None:
        if message == self._last_error:
            return
        self._last_error = message
        self.errorChanged.emit(message or "")
