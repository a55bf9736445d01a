"""Registry initialization, lookup, and on-demand expansion."""

from __future__ import annotations

from xref_index.index.models import (
    ExpandResult,
    ImplementorRecord,
    NotFound,
    RegistryStatus,
)
from xref_index.index.state import IndexState, merge_units
from xref_index.render import RenderOptions, RenderPlanner, RenderTarget

ALL_UNITS = "*"


class IndexConsumer:
    """Owns the registry lifecycle and reads merged state for rendering."""

    def __init__(self, state: IndexState, options: RenderOptions | None = None) -> None:
        self._state = state
        self._options = options or RenderOptions()

    @property
    def options(self) -> RenderOptions:
        """Return the render options used by expand."""
        return self._options

    def initialize(self) -> int | None:
        """Create the registry and drain pending shards in arrival order.

        Returns the number of flushed shards, or None when the registry
        already existed. The registry is built aside and installed only
        after every pending shard merged, so a failing merge leaves the
        channel uninitialized with its queue intact.
        """
        if self._state.status is RegistryStatus.INITIALIZED:
            return None
        registry: dict[str, list[ImplementorRecord]] = {}
        pending = self._state.pending
        for shard in pending:
            merge_units(registry, shard, self._state.duplicate_policy)
        self._state.registry = registry
        self._state.pending = []
        self._state.merged_shard_count += len(pending)
        return len(pending)

    def lookup(self, name: str) -> tuple[ImplementorRecord, ...] | NotFound:
        """Return the merged records for a unit."""
        registry = self._state.registry
        if registry is None:
            return NotFound(name=name, reason="registry not initialized")
        records = registry.get(name)
        if records is None:
            return NotFound(name=name)
        return tuple(records)

    def expand(
        self,
        name: str,
        target: RenderTarget,
        options: RenderOptions | None = None,
    ) -> ExpandResult | NotFound:
        """Re-render the full current record sequence for one unit.

        A unit with no records is reported as NotFound and the target is
        left untouched.
        """
        records = self.lookup(name)
        if isinstance(records, NotFound):
            return records
        if not records:
            return NotFound(name=name)
        planner = RenderPlanner(kind=self._state.kind, options=options or self._options)
        items = planner.plan(name, records)
        target.reset()
        for item in items:
            target.add(item)
        return ExpandResult(
            name=name,
            rendered=len(items),
            skipped=planner.skipped,
            anchors=tuple(item.anchor_id for item in items),
        )

    def expand_all(
        self,
        target: RenderTarget,
        options: RenderOptions | None = None,
    ) -> ExpandResult | NotFound:
        """Render every registered unit except the page's own and ignored crates."""
        registry = self._state.registry
        if registry is None:
            return NotFound(name=ALL_UNITS, reason="registry not initialized")
        planner = RenderPlanner(kind=self._state.kind, options=options or self._options)
        items = []
        for unit, records in registry.items():
            if planner.skips_unit(unit):
                planner.skipped += len(records)
                continue
            items.extend(planner.plan(unit, tuple(records)))
        target.reset()
        for item in items:
            target.add(item)
        return ExpandResult(
            name=ALL_UNITS,
            rendered=len(items),
            skipped=planner.skipped,
            anchors=tuple(item.anchor_id for item in items),
        )
