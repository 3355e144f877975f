"""
Main-context dispatch for progress notifications.

Watchers are only ever called on a single designated "main" context. A
scheduler answers whether the caller is already on that context and, if not,
queues work to run there later. Scheduling is fire-and-forget: the caller
never waits for the task to finish.
"""

from __future__ import annotations

import asyncio
import threading
from queue import Empty, Queue
from typing import Callable, Protocol, runtime_checkable

from progress_reporter.utils.logging import get_logger

logger = get_logger(__name__)

Task = Callable[[], None]


@runtime_checkable
class MainContextScheduler(Protocol):
    """Host environment hook for marshaling work onto the main context."""

    def is_on_main_context(self) -> bool: ...

    def schedule_on_main_context(self, callback: Task) -> None: ...


def execute_on_main_context(scheduler: MainContextScheduler, task: Task) -> None:
    """Run ``task`` now if already on the main context, otherwise defer it."""
    if scheduler.is_on_main_context():
        task()
    else:
        scheduler.schedule_on_main_context(task)


class ImmediateScheduler:
    """
    Scheduler that treats every caller as the main context.

    Runs everything inline. Useful in tests and in single-threaded scripts.
    """

    def is_on_main_context(self) -> bool:
        return True

    def schedule_on_main_context(self, callback: Task) -> None:
        callback()


class MainThreadScheduler:
    """
    Queue-backed scheduler bound to one owner thread.

    Tasks submitted from other threads are queued and run, in submission
    order, when the owner thread calls :meth:`process_pending`. The owner
    defaults to the interpreter's main thread.
    """

    def __init__(self, owner: threading.Thread | None = None):
        self._owner = owner or threading.main_thread()
        self._queue: Queue[Task] = Queue()

    @property
    def owner(self) -> threading.Thread:
        return self._owner

    @property
    def pending(self) -> int:
        """Number of tasks waiting for the owner thread."""
        return self._queue.qsize()

    def is_on_main_context(self) -> bool:
        return threading.current_thread() is self._owner

    def schedule_on_main_context(self, callback: Task) -> None:
        logger.debug(
            f"Deferring task from thread {threading.current_thread().name!r} "
            f"to {self._owner.name!r}"
        )
        self._queue.put(callback)

    def process_pending(self, timeout: float | None = None) -> int:
        """
        Run queued tasks on the owner thread.

        Args:
            timeout: If given, wait up to this many seconds for a first task
                when the queue is empty. Remaining tasks are drained without
                waiting.

        Returns:
            Number of tasks executed

        Raises:
            RuntimeError: If called from a thread other than the owner
        """
        if not self.is_on_main_context():
            raise RuntimeError(
                f"process_pending() must run on {self._owner.name!r}, "
                f"not {threading.current_thread().name!r}"
            )

        executed = 0
        if timeout is not None:
            try:
                task = self._queue.get(timeout=timeout)
            except Empty:
                return 0
            task()
            executed += 1

        while True:
            try:
                task = self._queue.get_nowait()
            except Empty:
                break
            task()
            executed += 1
        return executed


class AsyncioScheduler:
    """
    Scheduler whose main context is an asyncio event loop.

    Code running inside ``loop`` is on the main context; everything else is
    deferred with ``loop.call_soon_threadsafe``. Without an explicit loop,
    the scheduler must be created from inside the running loop.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def is_on_main_context(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def schedule_on_main_context(self, callback: Task) -> None:
        logger.debug("Deferring task to asyncio loop")
        self._loop.call_soon_threadsafe(callback)


_default_scheduler: MainThreadScheduler | None = None
_default_lock = threading.Lock()


def get_default_scheduler() -> MainThreadScheduler:
    """
    Get the process-wide default scheduler.

    Created lazily and bound to the interpreter's main thread. The main
    thread must call ``process_pending()`` for deferred notifications to run.
    """
    global _default_scheduler
    with _default_lock:
        if _default_scheduler is None:
            _default_scheduler = MainThreadScheduler()
        return _default_scheduler
