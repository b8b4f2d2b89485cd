"""Core data models for package-versions.

A Snapshot is the dependency state of one manifest at one instant. The
Baseline maps absolute manifest paths to the last recorded Snapshot and is
the comparison point for change detection. Changes are the per-dependency
version transitions between two snapshots.

Absent vs. empty vs. sentinel:
- A field missing from ``Snapshot.fields`` means the manifest had no entry
  for it. The diff engine treats it like an empty map.
- ``Change.from_`` / ``Change.to`` being ``None`` means the dependency did not
  exist on that side.
- ``"*"`` is a real version value recorded for names in list-shaped fields.
"""

from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .utils import now_ms


DependencyMap = Dict[str, str]


# ============= Snapshots =============

class Snapshot(BaseModel):
    """Dependency state of one manifest (stored inside the baseline)."""

    model_config = ConfigDict(populate_by_name=True)

    fields: Dict[str, DependencyMap] = Field(default_factory=dict)
    taken_at: int = Field(default_factory=now_ms, alias="takenAt")  # informational only

    def iter_dependencies(self) -> Iterator[tuple]:
        """Yield (field, name, version) for every recorded dependency."""
        for field, deps in self.fields.items():
            for name, version in deps.items():
                yield field, name, version


class Baseline(BaseModel):
    """Last-recorded snapshot per absolute manifest path."""

    entries: Dict[str, Snapshot] = Field(default_factory=dict)

    def get(self, path) -> Optional[Snapshot]:
        return self.entries.get(str(path))

    def with_entry(self, path, snapshot: Snapshot) -> "Baseline":
        """Return a copy with one entry replaced."""
        entries = dict(self.entries)
        entries[str(path)] = snapshot
        return Baseline(entries=entries)

    @property
    def paths(self) -> List[str]:
        return list(self.entries.keys())

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, path) -> bool:
        return str(path) in self.entries


# ============= Change Detection =============

class ChangeKind(str, Enum):
    """Kind of version transition."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class Change(BaseModel):
    """One detected version transition for a dependency."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    field: str
    name: str
    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None

    @model_validator(mode="after")
    def _not_a_noop(self) -> "Change":
        if self.from_ == self.to:
            raise ValueError(
                f"Change for {self.field}.{self.name} must differ on each side "
                f"(got {self.from_!r} on both)"
            )
        return self

    @property
    def kind(self) -> ChangeKind:
        if self.from_ is None:
            return ChangeKind.ADDED
        if self.to is None:
            return ChangeKind.REMOVED
        return ChangeKind.MODIFIED


class ManifestChanges(BaseModel):
    """Changes detected for a single manifest."""

    path: str
    changes: List[Change] = Field(default_factory=list)

    @property
    def folder(self) -> Path:
        return Path(self.path).parent


def format_change(change: Change) -> str:
    """Render a change as ``field: name  from → to`` with ∅ for absent sides."""
    before = "∅" if change.from_ is None else change.from_
    after = "∅" if change.to is None else change.to
    return f"{change.field}: {change.name}  {before} → {after}"


def format_changes(changes: List[Change]) -> List[str]:
    return [format_change(c) for c in changes]
