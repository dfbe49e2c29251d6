"""Fixed-size thread pool draining an unbounded FIFO of tasks.

``execute`` never blocks the submitter. ``finish`` is a drain barrier that
waits until every submitted task (including tasks submitted while waiting)
has run. ``shutdown`` lets the workers empty the queue and exit. A failing
task is logged and counted but never kills its worker or stalls ``finish``.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Callable
import logging
import threading

from memsearch.observability.metrics import TASKS_COMPLETED


logger = logging.getLogger(__name__)

DEFAULT_THREADS = 5

Task = Callable[[], object]


class WorkQueue:
    """Pool of worker threads consuming tasks in submission order."""

    def __init__(self, threads: int = DEFAULT_THREADS, name: str = "work-queue") -> None:
        if threads < 1:
            raise ValueError(f"WorkQueue needs at least one worker thread, got {threads}")

        self._tasks: deque[Task] = deque()
        self._condition = threading.Condition()
        self._pending = 0
        self._failed = 0
        self._shutdown = False
        self._workers = [
            threading.Thread(target=self._worker_loop, name=f"{name}-{index}", daemon=True) for index in range(threads)
        ]
        for worker in self._workers:
            worker.start()

        logger.debug(f"Started {threads} workers for {name}")

    def __enter__(self) -> WorkQueue:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.finish()
        self.shutdown()

    @property
    def size(self) -> int:
        return len(self._workers)

    @property
    def pending(self) -> int:
        with self._condition:
            return self._pending

    @property
    def failed(self) -> int:
        with self._condition:
            return self._failed

    @property
    def is_shutdown(self) -> bool:
        with self._condition:
            return self._shutdown

    def execute(self, task: Task) -> None:
        """Queue ``task`` for a worker and return immediately."""
        with self._condition:
            if self._shutdown:
                raise RuntimeError("Cannot execute tasks after the work queue has been shut down")
            self._pending += 1
            self._tasks.append(task)
            self._condition.notify_all()

    def finish(self) -> None:
        """Block until all submitted tasks have completed."""
        with self._condition:
            while self._pending > 0:
                self._condition.wait()

    def shutdown(self) -> None:
        """Ask workers to exit once the queue is empty and wait for them."""
        with self._condition:
            if self._shutdown:
                return
            self._shutdown = True
            self._condition.notify_all()

        current = threading.current_thread()
        for worker in self._workers:
            if worker is not current:
                worker.join()
        logger.debug(f"Work queue shut down ({self._failed} failed tasks)")

    def _worker_loop(self) -> None:
        while True:
            with self._condition:
                while not self._tasks and not self._shutdown:
                    self._condition.wait()
                if not self._tasks:
                    return
                task = self._tasks.popleft()

            try:
                task()
            except Exception:
                logger.exception(f"Task {task!r} failed in {threading.current_thread().name}")
                with self._condition:
                    self._failed += 1
                TASKS_COMPLETED.labels(status="failed").inc()
            else:
                TASKS_COMPLETED.labels(status="ok").inc()
            finally:
                self._finish_task()

    def _finish_task(self) -> None:
        with self._condition:
            self._pending -= 1
            if self._pending == 0:
                self._condition.notify_all()
