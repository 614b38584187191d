"""Utility helpers shared across the crawler."""

from __future__ import annotations

import itertools
import os
from pathlib import Path
from typing import Iterable, Iterator, List, TypeVar

T = TypeVar("T")

DIR_MODE = 0o777


def code_from_fragment(fragment: str) -> str:
    """Return the local filename stem for a remote fragment ('R01/0101' -> '0101')."""
    return fragment.strip("/").split("/")[-1]


def ensure_dir(path: Path) -> Path:
    """Create `path` and its parents if missing (world-writable, idempotent)."""
    os.makedirs(path, mode=DIR_MODE, exist_ok=True)
    return path


def batched(items: Iterable[T], size: int) -> Iterator[List[T]]:
    """Yield lists of at most `size` items until `items` is exhausted."""
    it = iter(items)
    while True:
        chunk = list(itertools.islice(it, size))
        if not chunk:
            return
        yield chunk


def is_safe_name(name: str) -> bool:
    """True if `name` can be used as a single path component under the output root."""
    if not name or name in (".", ".."):
        return False
    return "/" not in name and "\\" not in name and not os.path.isabs(name)


def is_within(path: Path, root: Path) -> bool:
    """True if `path` resolves to a location inside `root`."""
    try:
        Path(os.path.abspath(path)).relative_to(os.path.abspath(root))
    except ValueError:
        return False
    return True
