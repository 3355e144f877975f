"""
Qt main-thread scheduler.

Marshals progress notifications onto the thread owning the scheduler (the
GUI thread when created there) using a queued Qt signal.
"""

from __future__ import annotations

from typing import Callable

from PyQt6.QtCore import QObject, Qt, QThread, pyqtSignal, pyqtSlot

from progress_reporter.utils.logging import get_logger

logger = get_logger(__name__)


class QtScheduler(QObject):
    """
    Scheduler whose main context is the Qt thread this object lives in.

    Create it on the GUI thread. Tasks posted from worker threads are
    delivered through the Qt event loop, so the GUI thread must be running
    ``exec()`` or processing events.
    """

    # Signal for thread-safe hand-off to the owning thread
    task_posted = pyqtSignal(object)  # Callable[[], None]

    def __init__(self, parent: QObject | None = None):
        super().__init__(parent)
        self.task_posted.connect(self._run_task, Qt.ConnectionType.QueuedConnection)

    def is_on_main_context(self) -> bool:
        return QThread.currentThread() is self.thread()

    def schedule_on_main_context(self, callback: Callable[[], None]) -> None:
        logger.debug("Deferring task to Qt thread")
        self.task_posted.emit(callback)

    @pyqtSlot(object)
    def _run_task(self, callback: Callable[[], None]) -> None:
        callback()
