"""Registrar and consumer wired to one shared state."""

from __future__ import annotations

from dataclasses import dataclass

from xref_index.index.consumer import IndexConsumer
from xref_index.index.models import DuplicatePolicy, ShardKind
from xref_index.index.registrar import ShardRegistrar
from xref_index.index.state import IndexState
from xref_index.render import RenderOptions


@dataclass(slots=True, frozen=True)
class IndexChannel:
    """One shard channel: state plus the two components that share it."""

    state: IndexState
    registrar: ShardRegistrar
    consumer: IndexConsumer

    @classmethod
    def create(
        cls,
        kind: ShardKind,
        duplicate_policy: DuplicatePolicy = DuplicatePolicy.APPEND,
        options: RenderOptions | None = None,
    ) -> IndexChannel:
        """Build a channel with a fresh uninitialized registry."""
        state = IndexState(kind=kind, duplicate_policy=duplicate_policy)
        return cls(
            state=state,
            registrar=ShardRegistrar(state),
            consumer=IndexConsumer(state, options),
        )

    @property
    def kind(self) -> ShardKind:
        """Return the shard kind this channel accepts."""
        return self.state.kind
