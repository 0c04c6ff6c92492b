"""
Studio control client and polling runtime for the Lightning Studio tray.
"""

from .control_client import AuthError, ControlClientError, NotFoundError, RemoteError, StudioControlClient  # noqa: F401
from .controller import PollingState, StudioController  # noqa: F401
