"""Fixed-size pool of fetch workers draining a bounded job queue.

Producers call `submit()`; a full queue blocks them until a worker frees a
slot, which keeps discovery at most a few jobs ahead of the network. Errors
from a single job are logged and counted, never raised out of a worker.
"""

from __future__ import annotations

import logging
import queue
import threading
from dataclasses import dataclass, field
from typing import List, Optional

import httpx

from .errors import CrawlError, PoolClosedError
from .fetcher import Fetcher
from .models import Job

logger = logging.getLogger(__name__)


@dataclass
class PoolStats:
    fetched: int = 0
    skipped: int = 0
    failed: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record(self, outcome: str) -> None:
        with self._lock:
            setattr(self, outcome, getattr(self, outcome) + 1)


class WorkerPool:
    """Run `size` threads that each pull a Job and hand it to the fetcher.

    Usable as a context manager: entering starts the workers, leaving closes
    the queue and waits for every queued job to finish.
    """

    def __init__(self, fetcher: Fetcher, size: int = 5, queue_size: int = 0, name: str = "fetch") -> None:
        if size < 1:
            raise ValueError("pool size must be at least 1")
        self._fetcher = fetcher
        self._name = name
        self._jobs: "queue.Queue[Optional[Job]]" = queue.Queue(maxsize=queue_size if queue_size > 0 else size)
        self._threads: List[threading.Thread] = [
            threading.Thread(target=self._work, name=f"{name}-worker-{i}", daemon=True)
            for i in range(size)
        ]
        self._started = False
        self._closed = False
        self.stats = PoolStats()

    def start(self) -> "WorkerPool":
        if not self._started:
            for t in self._threads:
                t.start()
            self._started = True
        return self

    def submit(self, job: Job) -> None:
        """Queue a job, blocking while the queue is full."""
        if self._closed:
            raise PoolClosedError(f"{self._name} pool is closed")
        if not self._started:
            self.start()
        self._jobs.put(job)

    def join(self) -> None:
        """Block until every job submitted so far has been processed."""
        self._jobs.join()

    def close(self) -> None:
        """Stop accepting jobs, drain the queue, and wait for workers to exit."""
        if self._closed:
            return
        self._closed = True
        if self._started:
            for _ in self._threads:
                self._jobs.put(None)
            for t in self._threads:
                t.join()
        logger.info(
            "%s pool done: %d fetched, %d skipped, %d failed",
            self._name, self.stats.fetched, self.stats.skipped, self.stats.failed,
        )

    def __enter__(self) -> "WorkerPool":
        return self.start()

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _work(self) -> None:
        while True:
            job = self._jobs.get()
            try:
                if job is None:
                    return
                self._run(job)
            finally:
                self._jobs.task_done()

    def _run(self, job: Job) -> None:
        try:
            fetched = self._fetcher.ensure(job.destination, job.remote_path)
        except (CrawlError, httpx.HTTPError, OSError) as exc:
            logger.error("%s -> %s: %s", job.remote_path, job.destination, exc)
            self.stats.record("failed")
            return
        except Exception:
            logger.exception("Unexpected error fetching %s", job.remote_path)
            self.stats.record("failed")
            return
        self.stats.record("fetched" if fetched else "skipped")
