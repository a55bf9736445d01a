"""Cross-reference index registry package."""

from .models import (
    DuplicatePolicy,
    ExpandResult,
    ImplementorRecord,
    NotFound,
    RegistryStatus,
    Shard,
    ShardKind,
    UnitRecords,
)
from .state import IndexState, merge_shard, merge_units
from .validation import ShardValidationError, parse_shard
from .registrar import MERGED, QUEUED, RegisterOutcome, ShardRegistrar
from .consumer import ALL_UNITS, IndexConsumer
from .channel import IndexChannel

__all__ = [
    "ALL_UNITS",
    "DuplicatePolicy",
    "ExpandResult",
    "ImplementorRecord",
    "IndexChannel",
    "IndexConsumer",
    "IndexState",
    "MERGED",
    "NotFound",
    "QUEUED",
    "RegisterOutcome",
    "RegistryStatus",
    "Shard",
    "ShardKind",
    "ShardRegistrar",
    "ShardValidationError",
    "UnitRecords",
    "merge_shard",
    "merge_units",
    "parse_shard",
]
