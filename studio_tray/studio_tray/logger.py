"""
Logging setup for the studio tray.

Modules take the shared loguru logger from ``get_logger()`` at import time.
Sinks are installed only when the entry point calls ``configure()``; until
then loguru's default stderr sink is in effect, which is what the tests see.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

from loguru import logger as _logger

ENV_LOG_DIR = "LIGHTNING_STUDIO_TRAY_LOG_DIR"
ENV_LOG_LEVEL = "LIGHTNING_STUDIO_TRAY_LOG_LEVEL"
DEFAULT_LEVEL = "INFO"
LOG_FILE_NAME = "tray.log"

_configured = False
_log_path: Optional[Path] = None


def default_log_dir() -> Path:
    override = os.environ.get(ENV_LOG_DIR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".lightning-studio-tray" / "logs"


def resolve_level(requested: Optional[str] = None) -> str:
    """Console level from the argument, then the environment; unknown names fall back to INFO."""
    name = (requested or os.environ.get(ENV_LOG_LEVEL) or DEFAULT_LEVEL).strip().upper()
    try:
        _logger.level(name)
    except ValueError:
        return DEFAULT_LEVEL
    return name


def configure(
    *,
    level: Optional[str] = None,
    log_dir: Optional[Path] = None,
    console: bool = True,
) -> Optional[Path]:
    """
    Install the console and file sinks and return the log file path.

    The file sink records DEBUG whatever the console level. If the log directory
    cannot be created the app keeps running with console logging only and
    ``None`` is returned. Later calls return the first result unchanged.
    """
    global _configured, _log_path
    if _configured:
        return _log_path

    console_level = resolve_level(level)
    _logger.remove()
    # GUI launchers on Windows and macOS bundles run without a stderr stream.
    if console and sys.stderr is not None:
        _logger.add(sys.stderr, level=console_level)

    log_path = (log_dir or default_log_dir()) / LOG_FILE_NAME
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        _logger.warning("Cannot create log directory {}: {}. File logging disabled.", log_path.parent, exc)
        log_path = None
    else:
        _logger.add(
            log_path,
            level="DEBUG",
            rotation="10 MB",
            retention=5,
            encoding="utf-8",
            enqueue=True,
            backtrace=True,
            diagnose=False,
        )

    _configured = True
    _log_path = log_path
    return log_path


def get_logger():
    return _logger
