"""Shared pytest configuration and fixtures for the tray test suite."""

import json
import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple
from unittest.mock import Mock

import pytest

# Qt must run headless before QApplication is created.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from PySide6.QtWidgets import QApplication  # noqa: E402

from studio_shared.studio_status import StudioStatus, Target  # noqa: E402


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """One Qt application for the whole session (timers and signals need it)."""
    app = QApplication.instance() or QApplication([])
    yield app


# =============================================================================
# Fakes
# =============================================================================


class ImmediateRunner:
    """Runs submitted jobs synchronously on the calling thread."""

    def submit(self, fn: Callable[[], Any], on_success, on_error) -> None:
        try:
            result = fn()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)


class DeferredRunner:
    """Holds jobs until the test runs them, in any order."""

    def __init__(self) -> None:
        self.pending: List[Tuple[Callable[[], Any], Callable, Callable]] = []

    def submit(self, fn, on_success, on_error) -> None:
        self.pending.append((fn, on_success, on_error))

    def run(self, index: int) -> None:
        fn, on_success, on_error = self.pending[index]
        try:
            result = fn()
        except Exception as exc:
            on_error(exc)
            return
        on_success(result)


class FakeClient:
    """In-memory stand-in for ``StudioControlClient``."""

    def __init__(self, status: StudioStatus = StudioStatus.RUNNING, machine: str = "cpu-4") -> None:
        self.status = status
        self.machine = machine
        self.targets = [Target(id="id-alpha", name="alpha"), Target(id="id-beta", name="beta")]
        self.failures: Dict[str, Exception] = {}
        self.calls: List[Tuple[str, ...]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, *args))
        failure = self.failures.get(name)
        if failure is not None:
            raise failure

    def call_names(self) -> List[str]:
        return [call[0] for call in self.calls]

    def resolve_target(self, name: str) -> Target:
        self._record("resolve_target", name)
        return Target(id=f"id-{name}", name=name)

    def list_targets(self) -> List[Target]:
        self._record("list_targets")
        return list(self.targets)

    def get_status(self, target: Target) -> StudioStatus:
        self._record("get_status", target.id)
        return self.status

    def get_machine(self, target: Target) -> str:
        self._record("get_machine", target.id)
        return self.machine

    def switch_machine(self, target: Target, machine_type: str) -> None:
        self._record("switch_machine", target.id, machine_type)

    def start(self, target: Target, machine_type: str) -> None:
        self._record("start", target.id, machine_type)

    def stop(self, target: Target) -> None:
        self._record("stop", target.id)


class RecordingNotifier:
    def __init__(self) -> None:
        self.messages: List[Tuple[str, str]] = []

    def notify(self, title: str, body: str) -> None:
        self.messages.append((title, body))


class MemoryStore:
    """Dict-backed stand-in for ``QSettings``."""

    def __init__(self, values: Optional[Dict[str, Any]] = None) -> None:
        self.values: Dict[str, Any] = dict(values or {})
        self.sync_count = 0

    def value(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def setValue(self, key: str, value: Any) -> None:  # noqa: N802
        self.values[key] = value

    def sync(self) -> None:
        self.sync_count += 1


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def memory_store() -> MemoryStore:
    return MemoryStore()


def make_response(status_code=200, payload=None, raw=None):
    """Build a ``requests.Response`` double with a JSON body."""
    response = Mock()
    response.status_code = status_code
    if raw is not None:
        response.content = raw
        response.json.side_effect = ValueError("not json")
    elif payload is None:
        response.content = b""
        response.json.side_effect = ValueError("empty body")
    else:
        response.content = json.dumps(payload).encode("utf-8")
        response.json.return_value = payload
    return response


@pytest.fixture
def log_records():
    """Collect loguru records emitted during a test."""
    from loguru import logger

    records: List[Dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
    yield records
    logger.remove(handler_id)
