"""Test doubles shared across the crawler tests."""

from __future__ import annotations

import json
import threading
import time
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from tree_crawler.models import Job

BASE_URL = "https://results.example.test"


def write_json(path: Path, payload: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


class RecordingPool:
    """Stand-in for WorkerPool that only records submitted jobs."""

    def __init__(self) -> None:
        self.jobs: List[Job] = []
        self.joins = 0

    def submit(self, job: Job) -> None:
        self.jobs.append(job)

    def join(self) -> None:
        self.joins += 1

    def remote_paths(self) -> List[str]:
        return [j.remote_path for j in self.jobs]


class WritingPool(RecordingPool):
    """Stand-in for WorkerPool that 'downloads' from an in-memory document map."""

    def __init__(self, documents: Dict[str, Any]) -> None:
        super().__init__()
        self.documents = documents

    def submit(self, job: Job) -> None:
        super().submit(job)
        if job.remote_path in self.documents:
            write_json(job.destination, self.documents[job.remote_path])


class FakeFetcher:
    """Fetcher double: records calls and can fail for chosen paths."""

    def __init__(
        self,
        fail: Optional[Callable[[str], Optional[Exception]]] = None,
        delay_s: float = 0.0,
        gate: Optional[threading.Event] = None,
    ) -> None:
        self.calls: List[str] = []
        self._gate = gate
        self._fail = fail
        self._delay_s = delay_s
        self._lock = threading.Lock()
        self.active = 0
        self.max_active = 0

    def ensure(self, destination: Path, remote_path: str) -> bool:
        with self._lock:
            self.calls.append(remote_path)
            self.active += 1
            self.max_active = max(self.max_active, self.active)
        try:
            if self._gate is not None:
                self._gate.wait(timeout=5)
            if self._delay_s:
                time.sleep(self._delay_s)
            if self._fail is not None:
                exc = self._fail(remote_path)
                if exc is not None:
                    raise exc
            return True
        finally:
            with self._lock:
                self.active -= 1
