"""Fire-and-forget background jobs."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable


logger = logging.getLogger(__name__)


class BackgroundWorker:
    """Bounded thread pool for side effects the tick loop never waits on.

    Jobs return nothing to the caller. Exceptions raised by a job are
    logged and dropped.
    """

    def __init__(self, max_workers: int = 2, name: str = "laneracer-bg"):
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=name)
        self._lock = threading.Lock()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        """Queue a job. Silently dropped after shutdown."""
        with self._lock:
            if self._closed:
                logger.debug("Worker closed, dropping job %s", getattr(fn, "__name__", fn))
                return
            future = self._executor.submit(fn, *args, **kwargs)
        future.add_done_callback(self._log_failure)

    @staticmethod
    def _log_failure(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.warning("Background job failed: %s", exc)

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting jobs and optionally drain the queue."""
        with self._lock:
            self._closed = True
        self._executor.shutdown(wait=wait)
