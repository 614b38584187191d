from __future__ import annotations

from pathlib import Path

import pytest

from helpers import BASE_URL
from tree_crawler.fetcher import Fetcher


@pytest.fixture()
def out_dir(tmp_path: Path) -> Path:
    d = tmp_path / "output"
    d.mkdir()
    return d


@pytest.fixture()
def fetcher():
    with Fetcher(BASE_URL, delay_s=0) as f:
        yield f
