"""
Machine classes offered in the tray menu.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

UNKNOWN_MACHINE = "UNKNOWN"


@dataclass(frozen=True)
class MachineType:
    label: str
    name: str
    is_gpu: bool


KNOWN_MACHINE_TYPES: Tuple[MachineType, ...] = (
    MachineType(label="CPU-4", name="cpu-4", is_gpu=False),
    MachineType(label="L4", name="l4", is_gpu=True),
    MachineType(label="L40S", name="l40s", is_gpu=True),
)


def is_known_machine(machine: Optional[str]) -> bool:
    return bool(machine) and machine.strip().lower() != UNKNOWN_MACHINE.lower()


def is_current_machine(machine_type: MachineType, machine: Optional[str]) -> bool:
    """Return whether ``machine`` (the remote descriptor) names ``machine_type``."""
    if not is_known_machine(machine):
        return False
    lowered = machine.lower()
    if machine_type.name not in lowered:
        return False
    # "l4" is a substring of "l40s"; prefer the longest matching class.
    return not any(
        other.name in lowered and len(other.name) > len(machine_type.name) and machine_type.name in other.name
        for other in KNOWN_MACHINE_TYPES
    )


def is_cpu_machine(machine: Optional[str]) -> bool:
    return is_known_machine(machine) and "cpu" in machine.lower()
