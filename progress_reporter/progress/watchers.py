"""Ready-made progress watchers."""

from __future__ import annotations

import logging

from progress_reporter.progress.snapshot import ProgressSnapshot
from progress_reporter.utils.logging import get_logger


class LoggingProgressWatcher:
    """Watcher that writes every snapshot to a logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or get_logger("progress")
        self.level = level
        self.last_snapshot: ProgressSnapshot | None = None

    def on_progress_changed(self, snapshot: ProgressSnapshot) -> None:
        self.last_snapshot = snapshot
        self.logger.log(
            self.level,
            f"[progress]{snapshot.completed}/{snapshot.total}[/progress] ({snapshot.percent:.1f}%)",
        )
