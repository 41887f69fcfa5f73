"""
Managed thread pools for satellite fan-out and the diagnosis worker.

Brokers dispatch one task per satellite adapter onto a managed pool, and the
job service runs each diagnosis job on a dedicated single-worker pool. The
wrapper adds lifecycle checks and usage statistics on top of
ThreadPoolExecutor.
"""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Set

from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


@dataclass
class ThreadPoolConfig:
    """Configuration for a managed thread pool."""

    max_workers: int = 8
    thread_name_prefix: str = "SatelliteWorker"
    shutdown_timeout: float = 10.0


class ManagedThreadPoolExecutor:
    """
    ThreadPoolExecutor with explicit lifecycle and task statistics.

    The pool is started lazily by `submit` when `auto_start` is set, so a
    broker that never dispatches work never creates threads.
    """

    def __init__(self, config: ThreadPoolConfig, auto_start: bool = False):
        """
        Initialize the managed thread pool executor.

        Args:
            config: Thread pool configuration
            auto_start: Start the pool on first submit instead of raising
        """
        self.config = config
        self.auto_start = auto_start
        self.executor: Optional[ThreadPoolExecutor] = None
        self.active_futures: Set[Future] = set()
        self.is_shutdown = False
        self._lock = threading.Lock()

        self.stats = {
            "tasks_submitted": 0,
            "tasks_completed": 0,
            "tasks_failed": 0,
            "threads_created": 0,
        }

    @property
    def is_running(self) -> bool:
        return self.executor is not None and not self.is_shutdown

    def start(self) -> None:
        """
        Start the thread pool executor.

        Raises:
            RuntimeError: If already started
        """
        if self.executor is not None:
            raise RuntimeError("Thread pool already started")

        try:
            self.executor = ThreadPoolExecutor(
                max_workers=self.config.max_workers,
                thread_name_prefix=self.config.thread_name_prefix,
                initializer=self._thread_initializer,
            )
            self.is_shutdown = False
            logger.debug(
                f"Started thread pool '{self.config.thread_name_prefix}' with {self.config.max_workers} workers"
            )
        except Exception as e:
            handle_error(
                error=e,
                context="starting managed thread pool",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

    def submit(self, fn: Callable, *args, **kwargs) -> Future:
        """
        Submit a task to the thread pool.

        Args:
            fn: Function to execute
            *args: Positional arguments
            **kwargs: Keyword arguments

        Returns:
            Future representing the task

        Raises:
            RuntimeError: If executor is not started or is shutdown
        """
        if self.executor is None:
            if not self.auto_start:
                raise RuntimeError("Thread pool not started")
            with self._lock:
                if self.executor is None:
                    self.start()
        if self.is_shutdown:
            raise RuntimeError("Thread pool is shutdown")

        with self._lock:
            self.stats["tasks_submitted"] += 1
            future = self.executor.submit(fn, *args, **kwargs)
            self.active_futures.add(future)

        future.add_done_callback(self._task_completed)
        return future

    def shutdown(self, wait: bool = True, cancel_futures: bool = False) -> None:
        """
        Shutdown the thread pool executor.

        Args:
            wait: Whether to wait for completion
            cancel_futures: Whether to cancel pending futures
        """
        if self.executor is None or self.is_shutdown:
            return

        try:
            self.is_shutdown = True

            if cancel_futures:
                with self._lock:
                    for future in self.active_futures:
                        future.cancel()

            self.executor.shutdown(wait=wait)

            if wait:
                logger.debug("Thread pool shutdown completed")
            else:
                logger.debug("Thread pool shutdown initiated")

        except Exception as e:
            handle_error(
                error=e,
                context="shutting down thread pool",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )
        finally:
            self.executor = None
            with self._lock:
                self.active_futures.clear()

    def get_stats(self) -> Dict[str, Any]:
        """
        Get current thread pool statistics.

        Returns:
            Dictionary containing usage statistics
        """
        with self._lock:
            stats = self.stats.copy()
            stats["active_futures"] = len(self.active_futures)

        stats["is_shutdown"] = self.is_shutdown
        stats["success_rate"] = (
            stats["tasks_completed"] / max(1, stats["tasks_submitted"]) * 100
        )
        return stats

    def _thread_initializer(self) -> None:
        with self._lock:
            self.stats["threads_created"] += 1

    def _task_completed(self, future: Future) -> None:
        """
        Callback executed when a task completes.

        Args:
            future: The completed future
        """
        with self._lock:
            self.active_futures.discard(future)

            if future.cancelled():
                return
            if future.exception() is not None:
                self.stats["tasks_failed"] += 1
            else:
                self.stats["tasks_completed"] += 1

    def __enter__(self):
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.shutdown(wait=True)
