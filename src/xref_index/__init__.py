"""Order-independent aggregation of documentation cross-reference shards."""

from .index import (
    IndexChannel,
    IndexConsumer,
    NotFound,
    ShardKind,
    ShardRegistrar,
    ShardValidationError,
)
from .render import HtmlListTarget, RenderOptions, TextListTarget
from .session import IndexSession, create_session

__all__ = [
    "HtmlListTarget",
    "IndexChannel",
    "IndexConsumer",
    "IndexSession",
    "NotFound",
    "RenderOptions",
    "ShardKind",
    "ShardRegistrar",
    "ShardValidationError",
    "TextListTarget",
    "create_session",
]
