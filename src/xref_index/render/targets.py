"""Render targets that receive planned implementor items."""

from __future__ import annotations

import html
from typing import Protocol

from bs4 import BeautifulSoup

from xref_index.index.models import ShardKind
from xref_index.render.planning import RenderItem


class RenderTarget(Protocol):
    """Container an expansion renders into."""

    def reset(self) -> None:
        """Drop previously rendered content."""

    def add(self, item: RenderItem) -> None:
        """Append one planned item."""


class HtmlListTarget:
    """Collects HTML blocks the way the documentation page lays them out."""

    def __init__(self) -> None:
        self.implementors: list[str] = []
        self.synthetic_implementors: list[str] = []
        self.trait_implementations: list[str] = []
        self.inherent_implementations: list[str] = []
        self.reset_count = 0

    def reset(self) -> None:
        self.implementors.clear()
        self.synthetic_implementors.clear()
        self.trait_implementations.clear()
        self.inherent_implementations.clear()
        self.reset_count += 1

    def add(self, item: RenderItem) -> None:
        section = self._section_for(item)
        if item.starts_group:
            label = html.escape(", ".join(item.type_tags))
            section.append(f'<h4 class="impl-group">{label}</h4>')
        if item.kind is ShardKind.TYPE_IMPLS:
            section.append(f'<div id="{item.anchor_id}" class="impl">{item.content}</div>')
            return
        section.append(
            f'<div id="{item.anchor_id}" class="impl">'
            f'<a href="#{item.anchor_id}" class="anchor">§</a>'
            f'<h3 class="code-header">{item.content}</h3></div>'
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "implementors": list(self.implementors),
            "synthetic_implementors": list(self.synthetic_implementors),
            "trait_implementations": list(self.trait_implementations),
            "inherent_implementations": list(self.inherent_implementations),
        }

    def _section_for(self, item: RenderItem) -> list[str]:
        if item.kind is ShardKind.TYPE_IMPLS:
            if item.trait_name is None:
                return self.inherent_implementations
            return self.trait_implementations
        if item.synthetic:
            return self.synthetic_implementors
        return self.implementors


class TextListTarget:
    """Plain-text lines for terminal hosts."""

    def __init__(self) -> None:
        self.lines: list[str] = []
        self.reset_count = 0

    def reset(self) -> None:
        self.lines.clear()
        self.reset_count += 1

    def add(self, item: RenderItem) -> None:
        if item.starts_group:
            self.lines.append(f"[{', '.join(item.type_tags)}]")
        marker = "auto " if item.synthetic else ""
        self.lines.append(f"{marker}{html_to_text(item.content)}")

    def to_dict(self) -> dict[str, object]:
        return {"lines": list(self.lines)}


def html_to_text(content: str) -> str:
    """Strip tags and collapse whitespace."""
    text = BeautifulSoup(content, "html.parser").get_text()
    return " ".join(text.split())
