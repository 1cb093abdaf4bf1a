"""
Bounded concurrent fetching for check flows.

A round runs a batch of blocking fetch tasks on a thread pool. All tasks of
a round share one cancellation scope: the first failure cancels it, tasks
that have not started yet skip their call, and the round reports that first
error.
"""

import logging
import threading
from collections.abc import Callable, MutableSequence, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional

from check_syncthing.core.config import DEFAULT_FETCH_PROCS

logger = logging.getLogger(__name__)

FetchTask = Callable[[], Any]


class FetchRound:
    """One batch of fetch tasks sharing a cancellation scope."""

    def __init__(self, limit: int = DEFAULT_FETCH_PROCS):
        """
        Initialize round.

        Args:
            limit: Maximum number of tasks running at the same time
        """
        if limit < 1:
            raise ValueError(f"fetch concurrency limit must be positive: {limit}")
        self.limit = limit
        self._cancelled = threading.Event()
        self._lock = threading.Lock()
        self._error: Optional[Exception] = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def error(self) -> Optional[Exception]:
        with self._lock:
            return self._error

    def cancel(self) -> None:
        self._cancelled.set()

    def run(
        self,
        tasks: Sequence[FetchTask],
        results: MutableSequence[Any],
    ) -> Optional[Exception]:
        """
        Run tasks and store each result at the task's index.

        Args:
            tasks: Zero-argument callables returning fetched data
            results: Pre-sized list owned by the caller, one slot per task

        Returns:
            First error raised by a task, or None if all succeeded. On error
            every slot is reset to None.
        """
        if len(results) != len(tasks):
            raise ValueError(
                f"got {len(results)} result slots for {len(tasks)} fetch tasks"
            )
        if not tasks:
            return None

        logger.debug(f"Fetch round: {len(tasks)} task(s), limit {self.limit}")

        workers = min(self.limit, len(tasks))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            for index, task in enumerate(tasks):
                if self.cancelled:
                    break
                executor.submit(self._run_task, index, task, results)

        error = self.error
        if error is not None:
            logger.warning(f"Fetch round failed: {error}")
            for index in range(len(results)):
                results[index] = None
        return error

    def _run_task(
        self,
        index: int,
        task: FetchTask,
        results: MutableSequence[Any],
    ) -> None:
        if self.cancelled:
            return

        try:
            value = task()
        except Exception as e:
            self._fail(e)
            return
        results[index] = value

    def _fail(self, error: Exception) -> None:
        with self._lock:
            if self._error is None:
                self._error = error
        self.cancel()


def run_bounded(
    tasks: Sequence[FetchTask],
    results: MutableSequence[Any],
    limit: int = DEFAULT_FETCH_PROCS,
) -> Optional[Exception]:
    """
    Run one fetch round in a fresh cancellation scope.

    Args:
        tasks: Zero-argument callables returning fetched data
        results: Pre-sized list owned by the caller, one slot per task
        limit: Maximum number of concurrently running tasks

    Returns:
        First error raised by a task, or None
    """
    return FetchRound(limit).run(tasks, results)
