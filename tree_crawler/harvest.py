"""Leaf harvesting pass.

Once the structural tree is on disk, every document of the deepest tier is
read (never modified) to find the flat resources it references:

    {"pps": [{"vbs": [{"url": "<prefix>/<unit>", "cs": [<contest id>, ...]}]}]}

Each unit yields one result download; each contest id is downloaded once per
run no matter how many units mention it.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Set

from pydantic import ValidationError

from .errors import SetupError
from .models import Job, LeafDocument, VoteUnit
from .pool import WorkerPool
from .remote import contest_path, result_path
from .utils import batched, ensure_dir, is_safe_name, is_within

logger = logging.getLogger(__name__)

RESULTS_LABEL = "Precinct"
CONTESTS_LABEL = "Contest"


@dataclass
class HarvestCounts:
    files: int = 0
    results: int = 0
    contests: int = 0


class LeafExtractor:
    """Queue result and contest downloads for every leaf document in a directory.

    `seen_contests` is only touched from the harvesting thread; pass a set in
    to share deduplication across several harvests.
    """

    def __init__(
        self,
        pool: WorkerPool,
        output_dir: Path,
        seen_contests: Optional[Set[int]] = None,
        batch_size: int = 10,
    ) -> None:
        self._pool = pool
        self._results_dir = Path(output_dir) / RESULTS_LABEL
        self._contests_dir = Path(output_dir) / CONTESTS_LABEL
        self._batch_size = max(batch_size, 1)
        self.seen_contests: Set[int] = seen_contests if seen_contests is not None else set()
        self.counts = HarvestCounts()

    def harvest(self, leaf_dir: Path) -> HarvestCounts:
        """Walk `leaf_dir` and queue every referenced resource.

        Raises:
            SetupError: The output directories cannot be created or the leaf
                directory cannot be listed.
        """
        try:
            ensure_dir(self._results_dir)
            ensure_dir(self._contests_dir)
        except OSError as exc:
            raise SetupError(f"Cannot create harvest directories: {exc}") from exc

        try:
            listing = os.scandir(leaf_dir)
        except OSError as exc:
            raise SetupError(f"Cannot list {leaf_dir}: {exc}") from exc

        with listing:
            for batch in batched(listing, self._batch_size):
                for entry in batch:
                    if not entry.name.endswith(".json") or not entry.is_file():
                        continue
                    self._harvest_file(Path(entry.path))

        logger.info(
            "Harvested %d files: %d results, %d contests queued",
            self.counts.files, self.counts.results, self.counts.contests,
        )
        return self.counts

    def _harvest_file(self, path: Path) -> None:
        try:
            payload = json.loads(path.read_bytes())
            doc = LeafDocument.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Skipping %s: unexpected shape: %s", path, exc)
            return
        except (OSError, ValueError) as exc:
            logger.warning("Skipping %s: %s", path, exc)
            return

        self.counts.files += 1
        for group in doc.pps:
            for raw_unit in group.vbs:
                if not isinstance(raw_unit, dict):
                    continue
                try:
                    unit = VoteUnit.model_validate(raw_unit)
                except ValidationError as exc:
                    logger.warning("Skipping unit in %s: %s", path, exc)
                    continue
                self._schedule_unit(unit)

    def _schedule_unit(self, unit: VoteUnit) -> None:
        ref = unit.url.strip("/")
        destination = self._results_dir / f"{ref}.json"
        segments_ok = all(is_safe_name(seg) for seg in ref.split("/"))
        if not segments_ok or not is_within(destination, self._results_dir):
            logger.warning("Skipping unit with unsafe reference %r", unit.url)
            return
        try:
            ensure_dir(destination.parent)
        except OSError as exc:
            logger.error("Cannot create %s: %s", destination.parent, exc)
            return

        self._pool.submit(Job(destination=destination, remote_path=result_path(ref)))
        self.counts.results += 1

        for contest_id in unit.cs:
            if contest_id in self.seen_contests:
                continue
            self.seen_contests.add(contest_id)
            self._pool.submit(
                Job(destination=self._contests_dir / f"{contest_id}.json", remote_path=contest_path(contest_id))
            )
            self.counts.contests += 1
