"""Progress tracking for progress_reporter."""

from progress_reporter.progress.coordinator import (
    ProgressCensus,
    ProgressCoordinator,
    ProgressListener,
    ProgressUpdate,
    ProgressWatcher,
    get_shared_coordinator,
)
from progress_reporter.progress.dispatch import (
    AsyncioScheduler,
    ImmediateScheduler,
    MainContextScheduler,
    MainThreadScheduler,
    execute_on_main_context,
    get_default_scheduler,
)
from progress_reporter.progress.snapshot import ProgressSnapshot
from progress_reporter.progress.watchers import LoggingProgressWatcher

__all__ = [
    "ProgressSnapshot",
    "ProgressCoordinator",
    "ProgressCensus",
    "ProgressWatcher",
    "ProgressUpdate",
    "ProgressListener",
    "get_shared_coordinator",
    "MainContextScheduler",
    "ImmediateScheduler",
    "MainThreadScheduler",
    "AsyncioScheduler",
    "execute_on_main_context",
    "get_default_scheduler",
    "LoggingProgressWatcher",
]
