# Path: doc2xbrl/process/jobs/scheduler.py
"""
Task Schedulers

Where conversion attempts run:
- ThreadPoolScheduler: worker pool plus timers for delayed retries
- InlineScheduler: runs tasks synchronously in the caller's thread

Tasks are zero-argument callables. The orchestrator catches step failures
itself; a scheduler only logs what escapes a task.
"""

import threading
import time
from abc import ABC, abstractmethod
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from config_loader import ConfigLoader
from core.logger.ipo_logging import get_process_logger


Task = Callable[[], None]


class TaskScheduler(ABC):
    """Runs tasks now or after a delay."""

    @abstractmethod
    def submit(self, task: Task) -> None:
        """Run a task as soon as possible."""
        pass

    @abstractmethod
    def schedule(self, delay_seconds: float, task: Task) -> None:
        """Run a task after `delay_seconds`."""
        pass

    def shutdown(self, wait: bool = True) -> None:
        """Release worker resources."""
        pass


class ThreadPoolScheduler(TaskScheduler):
    """
    Background scheduler on a ThreadPoolExecutor.

    Delayed tasks wait on a daemon threading.Timer and are then submitted
    to the pool, so the number of concurrently running jobs never exceeds
    max_workers.

    Example:
        scheduler = ThreadPoolScheduler(max_workers=3)
        scheduler.submit(lambda: orchestrator.run_job(job_id))
        scheduler.shutdown()
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Initialize scheduler.

        Args:
            max_workers: Pool size (default: config max_concurrent_jobs)
        """
        if max_workers is None:
            max_workers = ConfigLoader().get('max_concurrent_jobs')
        self.logger = get_process_logger('jobs.scheduler')
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix='doc2xbrl-job'
        )
        self._timers: set[threading.Timer] = set()
        self._lock = threading.Lock()
        self._closed = False

    def submit(self, task: Task) -> None:
        with self._lock:
            if self._closed:
                self.logger.warning('Scheduler is shut down, task dropped')
                return
            future = self._executor.submit(task)
        future.add_done_callback(self._log_failure)

    def schedule(self, delay_seconds: float, task: Task) -> None:
        if delay_seconds <= 0:
            self.submit(task)
            return

        timer: Optional[threading.Timer] = None

        def fire():
            with self._lock:
                self._timers.discard(timer)
            self.submit(task)

        timer = threading.Timer(delay_seconds, fire)
        timer.daemon = True
        with self._lock:
            if self._closed:
                self.logger.warning('Scheduler is shut down, delayed task dropped')
                return
            self._timers.add(timer)
        timer.start()
        self.logger.debug(f"Task scheduled in {delay_seconds:.1f}s")

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            self._closed = True
            timers = list(self._timers)
            self._timers.clear()
        for timer in timers:
            timer.cancel()
        self._executor.shutdown(wait=wait)
        self.logger.info(f"Scheduler shut down ({len(timers)} delayed tasks cancelled)")

    def _log_failure(self, future: Future) -> None:
        error = future.exception()
        if error is not None:
            self.logger.error(f"Background task failed: {error}", exc_info=error)


class InlineScheduler(TaskScheduler):
    """
    Synchronous scheduler.

    Tasks submitted while another task runs are queued and run after it,
    in order, before the outermost submit() returns. Delays are slept
    only when sleep=True.

    Example:
        scheduler = InlineScheduler()
        scheduler.submit(lambda: orchestrator.run_job(job_id))
        # job has finished, including any retries
    """

    def __init__(self, sleep: bool = False):
        """
        Initialize scheduler.

        Args:
            sleep: Honour retry delays with time.sleep
        """
        self.sleep = sleep
        self.delays: list[float] = []
        self._queue: deque = deque()
        self._running = False

    def submit(self, task: Task) -> None:
        self._queue.append((0.0, task))
        self._drain()

    def schedule(self, delay_seconds: float, task: Task) -> None:
        self.delays.append(delay_seconds)
        self._queue.append((delay_seconds, task))
        self._drain()

    def _drain(self) -> None:
        if self._running:
            return
        self._running = True
        try:
            while self._queue:
                delay, task = self._queue.popleft()
                if self.sleep and delay > 0:
                    time.sleep(delay)
                task()
        finally:
            self._running = False


__all__ = ['Task', 'TaskScheduler', 'ThreadPoolScheduler', 'InlineScheduler']
