"""
Data model shared by the control client and the tray runtime.
"""

from .machine_types import KNOWN_MACHINE_TYPES, MachineType  # noqa: F401
from .studio_status import StudioStatus, Target, normalize_status  # noqa: F401
