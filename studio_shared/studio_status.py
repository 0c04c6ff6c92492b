"""
Studio status model shared by the control client and the tray runtime.

The remote control plane reports a free-form status document; everything
downstream works with the small closed ``StudioStatus`` enum produced by
``normalize_status``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional

PHASE_PREFIX = "CLOUD_SPACE_INSTANCE_STATE_"


class StudioStatus(Enum):
    PENDING = "PENDING"
    INITIALIZING = "INITIALIZING"
    RUNNING = "RUNNING"
    STOPPING = "STOPPING"
    STOPPED = "STOPPED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @property
    def is_settled(self) -> bool:
        return self in SETTLED_STATUSES

    @property
    def is_transient(self) -> bool:
        return self not in SETTLED_STATUSES


SETTLED_STATUSES = frozenset({StudioStatus.RUNNING, StudioStatus.STOPPED})


@dataclass(frozen=True)
class Target:
    """
    A remote studio.

    ``name`` is the lookup key the control plane filters on; ``display_name``
    is the human title and may be empty.
    """

    id: str
    name: str
    display_name: str = ""

    @property
    def label(self) -> str:
        return self.display_name or self.name


def normalize_status(document: Optional[Mapping[str, Any]]) -> StudioStatus:
    """
    Collapse a raw ``codestatus`` document into a ``StudioStatus``.

    Precedence is fixed: a queued change request wins over an absent
    instance, which wins over the instance phase.
    """
    document = document or {}

    requested = document.get("requested")
    if requested:
        return StudioStatus.PENDING

    in_use = document.get("inUse")
    if not in_use or not isinstance(in_use, Mapping):
        return StudioStatus.STOPPED

    phase = _strip_phase(in_use.get("phase"))
    if phase == "PENDING":
        return StudioStatus.PENDING
    if phase == "RUNNING":
        startup = in_use.get("startupStatus")
        if isinstance(startup, Mapping) and startup.get("topUpRestoreFinished") is True:
            return StudioStatus.RUNNING
        # Instance is up but still restoring its image/state.
        return StudioStatus.INITIALIZING
    if phase == "STOPPING":
        return StudioStatus.STOPPING
    if phase == "FAILED":
        return StudioStatus.FAILED
    return StudioStatus.UNKNOWN


def _strip_phase(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    phase = value.strip().upper()
    if phase.startswith(PHASE_PREFIX):
        phase = phase[len(PHASE_PREFIX):]
    return phase
