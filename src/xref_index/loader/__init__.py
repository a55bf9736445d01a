"""Shard script loading."""

from .scripts import (
    LoadedShard,
    ShardSource,
    discover_shard_scripts,
    load_shard_script,
    parse_shard_script,
    shard_source_for,
)

__all__ = [
    "LoadedShard",
    "ShardSource",
    "discover_shard_scripts",
    "load_shard_script",
    "parse_shard_script",
    "shard_source_for",
]
