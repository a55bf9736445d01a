"""Shard payload validation.

Raw shards are JSON-like mappings of unit name to a list of records. The
whole payload is converted before anything is returned, so a malformed shard
never reaches the registry half-applied.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from xref_index.index.models import ImplementorRecord, Shard, ShardKind, UnitRecords

TEXT_IDX = 0
SYNTHETIC_IDX = 1
TYPES_IDX = 2
TRAIT_IDX = 1
ALIASES_START_IDX = 2

RawRecord = list[object] | tuple[object, ...]


@dataclass(slots=True, frozen=True)
class ShardValidationError(Exception):
    """Raised when a shard payload is malformed."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


def parse_shard(payload: object, kind: ShardKind) -> Shard:
    """Validate a raw payload (or a prebuilt Shard) for the given channel."""
    if isinstance(payload, Shard):
        if payload.kind != kind:
            raise ShardValidationError(
                code="KIND_MISMATCH",
                message=f"Shard kind {payload.kind.value} cannot register on {kind.value}.",
            )
        _check_prebuilt_units(payload)
        return payload
    if not isinstance(payload, Mapping):
        raise ShardValidationError(
            code="INVALID_SHARD",
            message="Shard must be a mapping of unit name to record list.",
        )

    units: list[UnitRecords] = []
    for name, raw_records in payload.items():
        if not isinstance(name, str) or not name:
            raise ShardValidationError(
                code="INVALID_SHARD",
                message="Shard unit names must be non-empty strings.",
            )
        if isinstance(raw_records, (str, bytes)) or not isinstance(raw_records, (list, tuple)):
            raise ShardValidationError(
                code="INVALID_SHARD",
                message=f"Records for unit '{name}' must be a list.",
            )
        records = tuple(
            _parse_record(raw, kind, name, position) for position, raw in enumerate(raw_records)
        )
        units.append(UnitRecords(name=name, records=records))
    return Shard(kind=kind, units=tuple(units))


def _parse_record(raw: object, kind: ShardKind, unit: str, position: int) -> ImplementorRecord:
    if isinstance(raw, str):
        return ImplementorRecord(content=raw)
    if not isinstance(raw, (list, tuple)) or not raw or not isinstance(raw[TEXT_IDX], str):
        raise ShardValidationError(
            code="INVALID_RECORD",
            message=f"Record {position} of unit '{unit}' must start with a content string.",
        )
    if kind is ShardKind.IMPLEMENTORS:
        return _parse_implementor(raw, unit, position)
    return _parse_type_impl(raw, unit, position)


def _parse_implementor(raw: RawRecord, unit: str, position: int) -> ImplementorRecord:
    if len(raw) > TYPES_IDX + 1:
        raise ShardValidationError(
            code="INVALID_RECORD",
            message=f"Record {position} of unit '{unit}' has too many fields.",
        )
    synthetic = False
    if len(raw) > SYNTHETIC_IDX:
        flag = raw[SYNTHETIC_IDX]
        if isinstance(flag, bool):
            synthetic = flag
        elif isinstance(flag, int) and flag in (0, 1):
            synthetic = bool(flag)
        else:
            raise ShardValidationError(
                code="INVALID_RECORD",
                message=f"Record {position} of unit '{unit}' has a non-boolean synthetic flag.",
            )
    type_tags: tuple[str, ...] = ()
    if len(raw) > TYPES_IDX:
        type_tags = _string_tuple(raw[TYPES_IDX], unit, position)
    return ImplementorRecord(
        content=str(raw[TEXT_IDX]),
        type_tags=type_tags,
        synthetic=synthetic,
    )


def _parse_type_impl(raw: RawRecord, unit: str, position: int) -> ImplementorRecord:
    trait_name: str | None = None
    if len(raw) > TRAIT_IDX:
        trait_value = raw[TRAIT_IDX]
        if isinstance(trait_value, str):
            trait_name = trait_value or None
        elif type(trait_value) is int and trait_value == 0:
            trait_name = None
        else:
            raise ShardValidationError(
                code="INVALID_RECORD",
                message=f"Record {position} of unit '{unit}' has an invalid trait name.",
            )
    aliases = _string_tuple(list(raw[ALIASES_START_IDX:]), unit, position)
    return ImplementorRecord(
        content=str(raw[TEXT_IDX]),
        type_tags=aliases,
        trait_name=trait_name,
    )


def _string_tuple(value: object, unit: str, position: int) -> tuple[str, ...]:
    if not isinstance(value, (list, tuple)):
        raise ShardValidationError(
            code="INVALID_RECORD",
            message=f"Record {position} of unit '{unit}' must list types as strings.",
        )
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ShardValidationError(
                code="INVALID_RECORD",
                message=f"Record {position} of unit '{unit}' must list types as strings.",
            )
        output.append(item)
    return tuple(output)


def _check_prebuilt_units(shard: Shard) -> None:
    if not isinstance(shard.units, tuple):
        raise ShardValidationError(
            code="INVALID_SHARD", message="Shard units must be a tuple of UnitRecords."
        )
    for unit in shard.units:
        if not isinstance(unit, UnitRecords) or not isinstance(unit.name, str) or not unit.name:
            raise ShardValidationError(
                code="INVALID_SHARD",
                message="Shard units must be UnitRecords with non-empty names.",
            )
        if not isinstance(unit.records, tuple) or not all(map(_is_record, unit.records)):
            raise ShardValidationError(
                code="INVALID_SHARD",
                message=f"Records for unit '{unit.name}' must be well-formed ImplementorRecords.",
            )


def _is_record(record: object) -> bool:
    return (
        isinstance(record, ImplementorRecord)
        and isinstance(record.content, str)
        and isinstance(record.type_tags, tuple)
        and all(isinstance(tag, str) for tag in record.type_tags)
        and isinstance(record.synthetic, bool)
        and (record.trait_name is None or isinstance(record.trait_name, str))
    )
