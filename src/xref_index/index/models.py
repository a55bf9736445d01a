"""Typed models for cross-reference index state."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ShardKind(str, Enum):
    """Shard channels emitted by the documentation compiler."""

    IMPLEMENTORS = "implementors"
    TYPE_IMPLS = "type_impls"


class RegistryStatus(str, Enum):
    """One-way registry lifecycle."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"


class DuplicatePolicy(str, Enum):
    """How a re-registered unit name combines with earlier records."""

    APPEND = "append"
    REPLACE = "replace"


@dataclass(slots=True, frozen=True)
class ImplementorRecord:
    """Pre-rendered impl fragment plus the types it applies to."""

    content: str
    type_tags: tuple[str, ...] = ()
    synthetic: bool = False
    trait_name: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return a JSON-friendly view of the record."""
        return {
            "content": self.content,
            "type_tags": list(self.type_tags),
            "synthetic": self.synthetic,
            "trait_name": self.trait_name,
        }


@dataclass(slots=True, frozen=True)
class UnitRecords:
    """Records contributed by one shard for one compilation unit."""

    name: str
    records: tuple[ImplementorRecord, ...]


@dataclass(slots=True, frozen=True)
class Shard:
    """Immutable validated shard, units kept in producer order."""

    kind: ShardKind
    units: tuple[UnitRecords, ...]

    def names(self) -> tuple[str, ...]:
        """Return unit names in producer order."""
        return tuple(unit.name for unit in self.units)

    def record_count(self) -> int:
        """Return the total number of records across units."""
        return sum(len(unit.records) for unit in self.units)


@dataclass(slots=True, frozen=True)
class NotFound:
    """Lookup miss returned as a value: no records known yet for a name."""

    name: str
    reason: str = "no records registered"


@dataclass(slots=True, frozen=True)
class ExpandResult:
    """Outcome of rendering one or more units into a target."""

    name: str
    rendered: int
    skipped: int
    anchors: tuple[str, ...]
