"""
Qt integration for progress_reporter.

PyQt6 is optional; install with ``pip install progress-reporter[gui]``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from PyQt6.QtCore import QObject

    from progress_reporter.gui.scheduler import QtScheduler


def check_pyqt_available() -> bool:
    """Check if PyQt6 is available."""
    try:
        from PyQt6.QtCore import QObject  # noqa: F401
        return True
    except ImportError:
        return False


def create_qt_scheduler(parent: QObject | None = None) -> QtScheduler:
    """
    Create a scheduler bound to the calling Qt thread.

    Raises:
        ImportError: If PyQt6 is not installed
    """
    if not check_pyqt_available():
        raise ImportError(
            "PyQt6 is required for the Qt scheduler. "
            "Install with: pip install progress-reporter[gui]"
        )

    from progress_reporter.gui.scheduler import QtScheduler

    return QtScheduler(parent)


__all__ = ["check_pyqt_available", "create_qt_scheduler"]
