"""Bounded execution of decode-and-extract jobs off the event loop.

Decoding (Pillow) and bucket counting (numpy) are CPU-bound and release the
GIL for most of their work, so each job runs on a worker thread. An
``asyncio.Semaphore`` sized like the thread pool keeps at most ``capacity``
images in memory at once. A request that cannot get a slot within the
timeout fails with ``TimeoutError``, which the API reports as 503.
"""

from __future__ import annotations

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

T = TypeVar("T")

SEMAPHORE_TIMEOUT_SECONDS: float = 5.0


class ExtractionPool:
    """Runs at most ``capacity`` extractions at a time on worker threads."""

    def __init__(self, capacity: int, timeout: float = SEMAPHORE_TIMEOUT_SECONDS) -> None:
        self._capacity = capacity
        self._slots = asyncio.Semaphore(capacity)
        self._executor = ThreadPoolExecutor(max_workers=capacity, thread_name_prefix="color-extraction")
        self._timeout = timeout
        self._running: int = 0
        self._waiting: int = 0
        self._lock = threading.Lock()

    async def run(self, job: Callable[..., T], *args: object) -> T:
        """Run ``job(*args)`` on a worker thread once a slot frees up.

        Exceptions raised by the job (decode or extraction errors) propagate
        to the caller unchanged.

        Raises:
            TimeoutError: If no slot frees up within the timeout.
        """
        with self._lock:
            self._waiting += 1
        try:
            await asyncio.wait_for(self._slots.acquire(), timeout=self._timeout)
        except TimeoutError:
            logger.warning("All %d extraction slots busy for %.1fs; rejecting job", self._capacity, self._timeout)
            raise
        finally:
            with self._lock:
                self._waiting -= 1

        with self._lock:
            self._running += 1
        try:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(self._executor, job, *args)
        finally:
            self._slots.release()
            with self._lock:
                self._running -= 1

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active_count(self) -> int:
        """Jobs currently running on worker threads."""
        with self._lock:
            return self._running

    @property
    def queue_depth(self) -> int:
        """Jobs waiting for a free slot."""
        with self._lock:
            return self._waiting

    def shutdown(self) -> None:
        """Wait for running jobs, then stop the worker threads."""
        self._executor.shutdown(wait=True)
