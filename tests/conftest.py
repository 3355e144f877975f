"""Shared fixtures for progress_reporter tests."""

import os
import threading

import pytest

from progress_reporter.progress import ImmediateScheduler, ProgressCoordinator
from progress_reporter.settings import ENV_PREFIX, reset_settings


class RecordingWatcher:
    """Watcher that remembers every snapshot and the thread it arrived on."""

    def __init__(self):
        self.snapshots = []
        self.threads = []

    def on_progress_changed(self, snapshot):
        self.snapshots.append(snapshot)
        self.threads.append(threading.current_thread())


@pytest.fixture
def watcher():
    return RecordingWatcher()


@pytest.fixture
def coordinator():
    return ProgressCoordinator(scheduler=ImmediateScheduler())


@pytest.fixture(autouse=True)
def clean_settings(monkeypatch):
    for key in list(os.environ):
        if key.startswith(ENV_PREFIX):
            monkeypatch.delenv(key)
    reset_settings()
    yield
    reset_settings()
