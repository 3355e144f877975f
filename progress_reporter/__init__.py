"""
progress_reporter - Progress coordination for long-running tasks

Collects step reports from any number of producers, notifies a single
watcher on the main context, and estimates the time remaining.
"""

__version__ = "0.1.0"

from progress_reporter.progress import (
    ImmediateScheduler,
    MainContextScheduler,
    MainThreadScheduler,
    ProgressCensus,
    ProgressCoordinator,
    ProgressSnapshot,
    ProgressUpdate,
    ProgressWatcher,
    get_shared_coordinator,
)
from progress_reporter.settings import (
    ApplicationSettings,
    get_settings,
    load_settings,
    reset_settings,
    save_settings,
)

__all__ = [
    "__version__",
    "ProgressSnapshot",
    "ProgressCoordinator",
    "ProgressCensus",
    "ProgressWatcher",
    "ProgressUpdate",
    "get_shared_coordinator",
    "MainContextScheduler",
    "ImmediateScheduler",
    "MainThreadScheduler",
    # Settings
    "ApplicationSettings",
    "get_settings",
    "load_settings",
    "save_settings",
    "reset_settings",
]
