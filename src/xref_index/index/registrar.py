"""Shard registration entry point."""

from __future__ import annotations

from dataclasses import dataclass

from xref_index.index.models import RegistryStatus, Shard
from xref_index.index.state import IndexState, merge_shard
from xref_index.index.validation import parse_shard

MERGED = "merged"
QUEUED = "queued"


@dataclass(slots=True, frozen=True)
class RegisterOutcome:
    """Result of one registration call."""

    status: str
    shard: Shard


class ShardRegistrar:
    """Merges shards into the registry, or queues them until it exists."""

    def __init__(self, state: IndexState) -> None:
        self._state = state

    def register(self, shard: object) -> RegisterOutcome:
        """Validate and register one shard.

        Raises ShardValidationError for malformed input; in that case neither
        the registry nor the pending queue is modified.
        """
        validated = parse_shard(shard, self._state.kind)
        if self._state.status is RegistryStatus.INITIALIZED:
            merge_shard(self._state, validated)
            return RegisterOutcome(status=MERGED, shard=validated)
        self._state.pending.append(validated)
        return RegisterOutcome(status=QUEUED, shard=validated)
