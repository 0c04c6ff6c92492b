"""
studio_tray package.

Process-level helpers for the tray runtime.
"""

__all__ = [
    "logger",
]
