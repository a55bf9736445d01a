"""Shared registry state for one shard channel."""

from __future__ import annotations

from dataclasses import dataclass, field

from xref_index.index.models import (
    DuplicatePolicy,
    ImplementorRecord,
    RegistryStatus,
    Shard,
    ShardKind,
)


@dataclass(slots=True)
class IndexState:
    """Registry plus pending queue, passed by reference to registrar and consumer.

    ``registry`` is ``None`` until the consumer initializes it. Shards that
    arrive before then wait in ``pending`` in arrival order.
    """

    kind: ShardKind
    duplicate_policy: DuplicatePolicy = DuplicatePolicy.APPEND
    registry: dict[str, list[ImplementorRecord]] | None = None
    pending: list[Shard] = field(default_factory=list)
    merged_shard_count: int = 0

    @property
    def status(self) -> RegistryStatus:
        """Return the lifecycle status derived from registry presence."""
        if self.registry is None:
            return RegistryStatus.UNINITIALIZED
        return RegistryStatus.INITIALIZED

    def unit_names(self) -> tuple[str, ...]:
        """Return registered unit names in first-registration order."""
        if self.registry is None:
            return ()
        return tuple(self.registry.keys())

    def snapshot(self) -> dict[str, object]:
        """Return a serializable status summary."""
        registry = self.registry or {}
        return {
            "kind": self.kind.value,
            "status": self.status.value,
            "duplicate_policy": self.duplicate_policy.value,
            "pending_shard_count": len(self.pending),
            "merged_shard_count": self.merged_shard_count,
            "unit_count": len(registry),
            "record_count": sum(len(records) for records in registry.values()),
        }
def merge_shard(state: IndexState, shard: Shard) -> None:
    """Merge one validated shard into an initialized registry."""
    if state.registry is None:
        raise RuntimeError("Registry must be initialized before merging shards.")
    merge_units(state.registry, shard, state.duplicate_policy)
    state.merged_shard_count += 1


def merge_units(
    registry: dict[str, list[ImplementorRecord]], shard: Shard, policy: DuplicatePolicy
) -> None:
    """Apply a shard's units to a registry mapping.

    Updates are collected first, so a unit that cannot be read leaves
    ``registry`` as it was.
    """
    updates = [(unit.name, list(unit.records)) for unit in shard.units]
    for name, records in updates:
        if policy is DuplicatePolicy.REPLACE:
            registry[name] = records
            continue
        registry.setdefault(name, []).extend(records)
