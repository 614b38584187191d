"""Structural tree expansion.

Starting from the (already downloaded) root, every node is parsed, all of its
children are queued for download, and only once that batch has been fetched
are the children expanded in turn. Expansion is depth-first and uses an
explicit stack, so tree depth is not bounded by the interpreter's recursion
limit.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Set

from .errors import CrawlError
from .models import Job
from .parser import parse_node
from .pool import WorkerPool
from .remote import region_path
from .utils import ensure_dir

logger = logging.getLogger(__name__)


class TreeWalker:
    """Mirror the structural tree under `output_dir/<label>/<code>.json`."""

    def __init__(self, pool: WorkerPool, output_dir: Path) -> None:
        self._pool = pool
        self._output_dir = Path(output_dir)
        self.expanded = 0

    def expand(self, root: Path) -> int:
        """Expand the tree below `root`; returns the number of nodes parsed."""
        stack: List[Path] = [Path(root)]
        seen: Set[Path] = set()
        while stack:
            path = stack.pop()
            if path in seen:
                continue
            seen.add(path)
            children = self._expand_node(path)
            # reversed so the first-listed child is expanded first
            stack.extend(reversed(children))
        return self.expanded

    def _expand_node(self, path: Path) -> List[Path]:
        """Fetch the children of one node and return their local paths.

        Any failure abandons this branch only; the caller moves on to siblings.
        """
        try:
            summary = parse_node(path)
        except (CrawlError, OSError) as exc:
            logger.error("Skipping %s: %s", path, exc)
            return []
        self.expanded += 1
        if summary.is_leaf:
            return []

        out_dir = self._output_dir / summary.label
        try:
            ensure_dir(out_dir)
        except OSError as exc:
            logger.error("Cannot create %s: %s", out_dir, exc)
            return []

        local_paths: List[Path] = []
        queued: Set[Path] = set()
        for child in summary.children:
            destination = out_dir / f"{child.code}.json"
            if destination in queued:
                logger.debug("%s lists %s twice", path, child.code)
                continue
            queued.add(destination)
            self._pool.submit(Job(destination=destination, remote_path=region_path(child)))
            local_paths.append(destination)

        # children must be on disk before they are parsed
        self._pool.join()
        return local_paths
