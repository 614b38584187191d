"""Remote path construction.

The service exposes three kinds of documents:
- structural nodes under `/data/regions/`
- per-unit results under `/data/results/`
- per-contest definitions under `/data/contests/`
"""

from __future__ import annotations

from .models import ChildRef

ROOT_PATH = "/data/regions/root.json"


def region_path(child: ChildRef) -> str:
    """Remote path of a structural child.

    A child carrying its own fragment is fetched from that fragment; a bare
    code is placed under a directory named by its first two characters.
    """
    if child.fragment:
        return f"/data/regions/{child.fragment.strip('/')}.json"
    return f"/data/regions/{child.code[:2]}/{child.code}.json"


def result_path(unit_ref: str) -> str:
    return f"/data/results/{unit_ref.strip('/')}.json"


def contest_path(contest_id: int) -> str:
    return f"/data/contests/{contest_id}.json"
