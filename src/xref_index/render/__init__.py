"""Implementor panel rendering."""

from .planning import RenderItem, RenderOptions, RenderPlanner, rewrite_relative_links
from .targets import HtmlListTarget, RenderTarget, TextListTarget, html_to_text

__all__ = [
    "HtmlListTarget",
    "RenderItem",
    "RenderOptions",
    "RenderPlanner",
    "RenderTarget",
    "TextListTarget",
    "html_to_text",
    "rewrite_relative_links",
]
