"""Structural node parsing.

A node's children are listed under `srs`. The tier label ("can") is read from
the first child only and assumed to hold for all of them.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .errors import NodeDecodeError, NodeSchemaError
from .models import NodeDocument, NodeSummary
from .utils import is_safe_name

logger = logging.getLogger(__name__)


def parse_node(path: Path) -> NodeSummary:
    """Parse the structural node stored at `path`.

    A file that is not a valid JSON object is deleted before NodeDecodeError
    is raised, so the next run fetches it again.

    Raises:
        NodeDecodeError: Invalid JSON (file removed).
        NodeSchemaError: `srs` or one of its entries has the wrong shape, or
            the first child carries no label, or a label or code would
            leave its directory.
        OSError: The file could not be read.
    """
    path = Path(path)
    raw = path.read_bytes()
    try:
        payload = json.loads(raw)
        if not isinstance(payload, dict):
            raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
    except ValueError as exc:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.warning("%s Removing file %s", exc, path)
        path.unlink(missing_ok=True)
        raise NodeDecodeError(f"{path}: {exc}") from exc

    try:
        doc = NodeDocument.model_validate(payload)
    except ValidationError as exc:
        raise NodeSchemaError(f"{path}: {exc}") from exc

    entries = doc.entries()
    if not entries:
        return NodeSummary()

    label = entries[0].can
    if not label:
        raise NodeSchemaError(f"{path}: first child has no 'can' label")
    if not is_safe_name(label):
        raise NodeSchemaError(f"{path}: label {label!r} is not a plain directory name")

    others = {e.can for e in entries[1:] if e.can and e.can != label}
    if others:
        logger.debug("%s: children disagree on label, using %r over %s", path, label, sorted(others))

    children = [e.to_ref() for e in entries]
    bad = [c.code for c in children if not is_safe_name(c.code)]
    if bad:
        raise NodeSchemaError(f"{path}: child codes {bad!r} are not plain file names")

    return NodeSummary(children=children, label=label)
