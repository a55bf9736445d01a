"""Deterministic render planning for implementor panels."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Final

from bs4 import BeautifulSoup

from xref_index.index.models import ImplementorRecord, ShardKind

EXTERNAL_URL_PATTERN: Final[re.Pattern[str]] = re.compile(r"^(?:[a-z+]+:)?//")


@dataclass(slots=True, frozen=True)
class RenderOptions:
    """Page-level rendering settings."""

    group_by_type_tags: bool = True
    root_path: str = ""
    anchor_prefix: str = "impl"
    anchor_offset: int = 0
    self_alias: str | None = None
    current_crate: str | None = None
    ignore_extern_crates: tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class RenderItem:
    """One record ready to be placed into a render target."""

    anchor_id: str
    unit: str
    kind: ShardKind
    content: str
    type_tags: tuple[str, ...]
    synthetic: bool
    trait_name: str | None
    starts_group: bool


@dataclass(slots=True)
class RenderPlanner:
    """Plans one expansion; state spans all units rendered into one target."""

    kind: ShardKind
    options: RenderOptions
    skipped: int = 0
    _next_anchor: int = -1
    _inlined_types: set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self._next_anchor = self.options.anchor_offset

    def skips_unit(self, unit: str) -> bool:
        """Return True for units already rendered statically on the page."""
        if self.options.current_crate is not None and unit == self.options.current_crate:
            return True
        return unit in self.options.ignore_extern_crates

    def plan(self, unit: str, records: tuple[ImplementorRecord, ...]) -> list[RenderItem]:
        """Return render items for one unit in registry order."""
        items: list[RenderItem] = []
        previous_tags: tuple[str, ...] | None = None
        for record in records:
            if not self._accepts(record):
                self.skipped += 1
                continue
            starts_group = False
            if self.options.group_by_type_tags and record.type_tags:
                starts_group = record.type_tags != previous_tags
            previous_tags = record.type_tags
            items.append(
                RenderItem(
                    anchor_id=f"{self.options.anchor_prefix}-{self._next_anchor}",
                    unit=unit,
                    kind=self.kind,
                    content=rewrite_relative_links(record.content, self.options.root_path),
                    type_tags=record.type_tags,
                    synthetic=record.synthetic,
                    trait_name=record.trait_name,
                    starts_group=starts_group,
                )
            )
            self._next_anchor += 1
        return items

    def _accepts(self, record: ImplementorRecord) -> bool:
        if self.kind is ShardKind.TYPE_IMPLS:
            alias = self.options.self_alias
            return alias is None or alias in record.type_tags
        if not record.synthetic:
            return True
        # A synthetic impl is shown once per concrete type. Tags seen before
        # the first repeat stay marked even when the record is dropped.
        for type_tag in record.type_tags:
            if type_tag in self._inlined_types:
                return False
            self._inlined_types.add(type_tag)
        return True


def rewrite_relative_links(content: str, root_path: str) -> str:
    """Prefix relative anchor hrefs with the page root path."""
    if not root_path:
        return content
    soup = BeautifulSoup(content, "html.parser")
    rewritten = False
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"]
        if not href or href.startswith("#") or EXTERNAL_URL_PATTERN.match(href):
            continue
        anchor["href"] = f"{root_path}{href}"
        rewritten = True
    if not rewritten:
        return content
    return str(soup)
