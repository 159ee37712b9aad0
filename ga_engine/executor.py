"""
Worker pool for the concurrent phases of a generation.

Each phase (crossover, mutation, evaluation) submits one task per pair,
child or genome and then blocks until every task has finished. Results
come back in submission order. If any task raised, the whole phase is
discarded and a single GenerationAbortedError is raised.
"""

import os
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, List, Optional, Sequence, TypeVar

from loguru import logger

from .errors import GenerationAbortedError

T = TypeVar("T")


def default_worker_count() -> int:
    return max(2, os.cpu_count() or 2)


class TaskExecutor:
    """
    Thin wrapper around a ThreadPoolExecutor with a join-all barrier.

    Usable as a context manager; the pool is created lazily on first use.
    """

    def __init__(self, max_workers: Optional[int] = None, thread_name_prefix: str = "ga-worker"):
        self.max_workers = max_workers or default_worker_count()
        self.thread_name_prefix = thread_name_prefix
        self._pool: Optional[ThreadPoolExecutor] = None

    def _get_pool(self) -> ThreadPoolExecutor:
        if self._pool is None:
            self._pool = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix=self.thread_name_prefix,
            )
            logger.debug(f"[TaskExecutor] Created ThreadPoolExecutor with {self.max_workers} workers")
        return self._pool

    def execute(self, task: Callable[[], T]):
        """Submit a single task and return its future."""
        return self._get_pool().submit(task)

    def run_all(self, tasks: Sequence[Callable[[], T]], phase: str = "task") -> List[T]:
        """
        Run every task and wait for all of them.

        Args:
            tasks: Zero-argument callables
            phase: Name used in log and error messages

        Returns:
            Task results in submission order

        Raises:
            GenerationAbortedError: If at least one task raised
        """
        if not tasks:
            return []

        futures = [self.execute(task) for task in tasks]
        wait(futures)

        errors = [future.exception() for future in futures if future.exception() is not None]
        if errors:
            logger.error(f"{len(errors)} of {len(futures)} {phase} task(s) failed; discarding results of this phase")
            raise GenerationAbortedError(phase, len(errors), len(futures), errors[0]) from errors[0]

        return [future.result() for future in futures]

    def shutdown(self) -> None:
        if self._pool is not None:
            self._pool.shutdown(wait=True)
            self._pool = None

    def __enter__(self) -> "TaskExecutor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()
