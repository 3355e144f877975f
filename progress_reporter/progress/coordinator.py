"""
Progress coordination for a single long-running task.

Multiple producers may report steps to the same coordinator from any thread.
The coordinator keeps the step counters, hands a fresh snapshot to its one
watcher on the main context after every change, and publishes a naive
linear estimate of the time remaining.
"""

from __future__ import annotations

import math
import threading
import time
import weakref
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, ClassVar, Protocol, runtime_checkable

from progress_reporter.progress.dispatch import (
    MainContextScheduler,
    execute_on_main_context,
    get_default_scheduler,
)
from progress_reporter.progress.snapshot import ProgressSnapshot
from progress_reporter.utils.logging import get_logger, log_exception

if TYPE_CHECKING:
    from progress_reporter.settings import ApplicationSettings

logger = get_logger(__name__)


@runtime_checkable
class ProgressWatcher(Protocol):
    """Receives progress snapshots from a coordinator, always on the main context."""

    def on_progress_changed(self, snapshot: ProgressSnapshot) -> None: ...


@runtime_checkable
class ProgressCensus(Protocol):
    """Anything that can collect progress reports for one task."""

    def report_progress(self, steps: int = 1) -> None: ...

    def add_steps_to_progress(self, additional_steps: int = 1) -> None: ...

    def reset_progress(self) -> None: ...


@dataclass(frozen=True)
class ProgressUpdate:
    """Published values after a change."""

    raw_progress: float
    time_remaining: float
    timestamp: float = field(default_factory=time.time)


ProgressListener = Callable[[ProgressUpdate], None]


class ProgressCoordinator:
    """
    Coordinates input from multiple producers on the progress of one task.

    Only one task is tracked per coordinator. Use :meth:`shared` for a
    process-wide instance, or construct coordinators directly when several
    tasks need independent progress. Sharing one instance between unrelated
    tasks mixes their counts; nothing guards against it.

    The watcher is held weakly. If it is unset or has been garbage collected,
    notifications are skipped.

    Time estimates use two settable attributes:

    - ``anticipated_time_for_increment``: rough seconds for one reported
      increment.
    - ``anticipated_increment_batch_size``: how many increments run
      concurrently, e.g. the worker count of a thread pool.
    """

    DEFAULT_TIME_FOR_INCREMENT: ClassVar[float] = 0.5
    DEFAULT_INCREMENT_BATCH_SIZE: ClassVar[int] = 1

    _shared_instances: ClassVar[dict[type, "ProgressCoordinator"]] = {}
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(
        self,
        scheduler: MainContextScheduler | None = None,
        anticipated_time_for_increment: float = DEFAULT_TIME_FOR_INCREMENT,
        anticipated_increment_batch_size: int = DEFAULT_INCREMENT_BATCH_SIZE,
    ):
        self._scheduler = scheduler if scheduler is not None else get_default_scheduler()
        self.anticipated_time_for_increment = anticipated_time_for_increment
        self.anticipated_increment_batch_size = anticipated_increment_batch_size

        self._watcher_ref: weakref.ref[ProgressWatcher] | None = None
        self._listeners: list[ProgressListener] = []

        # Guards the counters only, never held while calling out
        self._lock = threading.Lock()
        self._completed_steps = 0
        self._total_steps = 1

        # Written on the main context only
        self._time_remaining = 0.0
        self._raw_progress = 0.0

    @classmethod
    def shared(cls, scheduler: MainContextScheduler | None = None) -> "ProgressCoordinator":
        """
        Get the lazily created process-wide coordinator for this class.

        Args:
            scheduler: Main-context scheduler to bind. Used on first
                construction, and rebinds an existing shared instance.
                Without one, the instance keeps its current scheduler.
        """
        with cls._shared_lock:
            instance = cls._shared_instances.get(cls)
            if instance is None:
                instance = cls(scheduler=scheduler)
                cls._shared_instances[cls] = instance
                logger.debug(f"Created shared {cls.__name__}")
            elif scheduler is not None:
                instance.scheduler = scheduler
            return instance

    @classmethod
    def discard_shared(cls) -> None:
        """Forget the shared instance so the next :meth:`shared` call builds a new one."""
        with cls._shared_lock:
            cls._shared_instances.pop(cls, None)

    @classmethod
    def from_settings(
        cls,
        settings: ApplicationSettings | None = None,
        scheduler: MainContextScheduler | None = None,
    ) -> "ProgressCoordinator":
        """Create a coordinator seeded from the ``estimator`` settings section."""
        if settings is None:
            from progress_reporter.settings import get_settings

            settings = get_settings()

        return cls(
            scheduler=scheduler,
            anticipated_time_for_increment=settings.estimator.time_per_increment_s,
            anticipated_increment_batch_size=settings.estimator.increment_batch_size,
        )

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def scheduler(self) -> MainContextScheduler:
        return self._scheduler

    @scheduler.setter
    def scheduler(self, scheduler: MainContextScheduler | None) -> None:
        """Bind a new main context. Tasks already queued on the old one stay there."""
        self._scheduler = scheduler if scheduler is not None else get_default_scheduler()

    @property
    def watcher(self) -> ProgressWatcher | None:
        if self._watcher_ref is None:
            return None
        return self._watcher_ref()

    @watcher.setter
    def watcher(self, watcher: ProgressWatcher | None) -> None:
        self._watcher_ref = weakref.ref(watcher) if watcher is not None else None

    @property
    def completed_steps(self) -> int:
        return self._completed_steps

    @property
    def total_steps(self) -> int:
        return self._total_steps

    @property
    def progress(self) -> ProgressSnapshot:
        """A fresh snapshot of the current counters."""
        with self._lock:
            return ProgressSnapshot(self._completed_steps, self._total_steps)

    @property
    def time_remaining(self) -> float:
        """Last published time estimate in seconds."""
        return self._time_remaining

    @property
    def raw_progress(self) -> float:
        """Last published completion ratio."""
        return self._raw_progress

    def subscribe(self, listener: ProgressListener) -> None:
        """Receive a :class:`ProgressUpdate` whenever published values change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: ProgressListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    # -------------------------------------------------------------------------
    # Census
    # -------------------------------------------------------------------------

    def report_progress(self, steps: int = 1) -> None:
        """
        Record finished steps.

        Steps are not validated: a negative value decrements the count.
        """
        if __debug__ and steps < 0:
            logger.debug(f"Negative progress report: {steps} steps")

        with self._lock:
            self._completed_steps += steps
        self._notify()
        self.estimate_time_remaining()

    def add_steps_to_progress(self, additional_steps: int = 1) -> None:
        """Grow (or shrink) the expected total. The total never drops below 1."""
        with self._lock:
            self._total_steps = max(1, self._total_steps + additional_steps)
        self._notify()
        self.estimate_time_remaining()

    def reset_progress(self) -> None:
        """Return the counters to zero completed out of one."""
        with self._lock:
            self._completed_steps = 0
            self._total_steps = 1
        logger.debug("Progress reset")
        self._notify()
        self.estimate_time_remaining()

    def estimate_time_remaining(self) -> float:
        """
        Estimate the seconds left, assuming every batch costs the same.

        The result is returned immediately and published as
        ``time_remaining`` on the main context. A zero batch size yields
        ``inf`` (or ``nan`` once complete) instead of raising.

        Returns:
            Estimated seconds remaining
        """
        batch_size = self.anticipated_increment_batch_size
        snapshot = self.progress

        if __debug__ and batch_size <= 0:
            logger.debug(f"Non-positive increment batch size: {batch_size}")

        if batch_size == 0:
            batches = math.inf
        else:
            batches = snapshot.total / batch_size
        total_duration = self.anticipated_time_for_increment * batches
        remaining_duration = total_duration * (1.0 - snapshot.ratio)

        def publish() -> None:
            self._time_remaining = remaining_duration
            self._publish(ProgressUpdate(self._raw_progress, remaining_duration))

        execute_on_main_context(self._scheduler, publish)
        return remaining_duration

    # -------------------------------------------------------------------------
    # Notification
    # -------------------------------------------------------------------------

    def _notify(self) -> None:
        def deliver() -> None:
            snapshot = self.progress
            watcher = self.watcher
            self._raw_progress = snapshot.ratio
            if watcher is not None:
                try:
                    watcher.on_progress_changed(snapshot)
                except Exception as e:
                    log_exception(logger, e, context=f"Progress watcher {watcher!r} failed")

        execute_on_main_context(self._scheduler, deliver)

    def _publish(self, update: ProgressUpdate) -> None:
        for listener in list(self._listeners):
            try:
                listener(update)
            except Exception as e:
                log_exception(logger, e, context=f"Progress listener {listener!r} failed")

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(completed={self._completed_steps}, "
            f"total={self._total_steps}, time_remaining={self._time_remaining:.2f})"
        )


def get_shared_coordinator(scheduler: MainContextScheduler | None = None) -> ProgressCoordinator:
    """Get the process-wide :class:`ProgressCoordinator`, optionally binding ``scheduler``."""
    return ProgressCoordinator.shared(scheduler)
