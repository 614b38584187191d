"""Data models for the crawler.

The remote documents carry far more than the crawler needs; these schemas only
describe the handful of fields used to discover children and classify nodes.
Unknown fields are kept (`extra="allow"`) but never read.

This file uses Pydantic v2.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .utils import code_from_fragment


class ChildEntry(BaseModel):
    """One entry of a node's `srs` collection."""

    model_config = ConfigDict(extra="allow")

    url: Optional[str] = Field(default=None, description="Remote fragment, e.g. 'R01/0101'.")
    rc: Optional[str] = Field(default=None, description="Bare reference code, used when no url is given.")
    can: Optional[str] = Field(default=None, description="Category name of this child's tier.")

    @model_validator(mode="after")
    def _require_reference(self) -> "ChildEntry":
        if not (self.url or self.rc):
            raise ValueError("child entry has neither 'url' nor 'rc'")
        return self

    def to_ref(self) -> "ChildRef":
        if self.url:
            return ChildRef(code=code_from_fragment(self.url), fragment=self.url)
        return ChildRef(code=self.rc)


class NodeDocument(BaseModel):
    """A structural node. `srs` is usually an object keyed by id, sometimes a list."""

    model_config = ConfigDict(extra="allow")

    srs: Optional[Union[Dict[str, ChildEntry], List[ChildEntry]]] = None

    @field_validator("srs", mode="before")
    @classmethod
    def _drop_non_objects(cls, value: Any) -> Any:
        # scalar or array entries carry no child reference
        if isinstance(value, dict):
            return {k: v for k, v in value.items() if isinstance(v, dict)}
        if isinstance(value, list):
            return [v for v in value if isinstance(v, dict)]
        return value

    def entries(self) -> List[ChildEntry]:
        """Child entries in document order."""
        if self.srs is None:
            return []
        if isinstance(self.srs, dict):
            return list(self.srs.values())
        return list(self.srs)


class ChildRef(BaseModel):
    """A child reference: local filename stem plus the remote fragment, if any."""

    model_config = ConfigDict(frozen=True)

    code: str
    fragment: Optional[str] = None


class NodeSummary(BaseModel):
    """What the walker needs from a parsed node."""

    children: List[ChildRef] = Field(default_factory=list)
    label: str = ""

    @property
    def is_leaf(self) -> bool:
        return not self.children


class Job(BaseModel):
    """A unit of fetch work handed to the worker pool."""

    model_config = ConfigDict(frozen=True)

    destination: Path
    remote_path: str


class VoteUnit(BaseModel):
    """A unit entry of a leaf document: its result resource and contest ids."""

    model_config = ConfigDict(extra="allow")

    url: str
    cs: List[int] = Field(default_factory=list)


class UnitGroup(BaseModel):
    """A grouping entry of a leaf document. Units are validated one by one."""

    model_config = ConfigDict(extra="allow")

    vbs: List[Any] = Field(default_factory=list)


class LeafDocument(BaseModel):
    """A document of the deepest structural tier."""

    model_config = ConfigDict(extra="allow")

    pps: List[UnitGroup]
