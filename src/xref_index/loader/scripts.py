"""Parsing of shard script resources emitted by the documentation compiler."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Final

from xref_index.index import Shard, ShardKind, ShardValidationError, parse_shard

SCRIPT_PATTERN: Final[re.Pattern[str]] = re.compile(
    r"var\s+(?P<var>implementors|type_impls)\s*=\s*(?P<body>\{.*\})\s*;\s*"
    r"if\s*\(\s*window\.register_(?P=var)\s*\)",
    re.DOTALL,
)
DIRECTORY_KINDS: Final[dict[str, ShardKind]] = {
    "implementors": ShardKind.IMPLEMENTORS,
    "type.impl": ShardKind.TYPE_IMPLS,
}
SCRIPT_SUFFIX = ".js"


@dataclass(slots=True, frozen=True)
class ShardSource:
    """Documented entity a shard script belongs to."""

    kind: ShardKind
    item_type: str
    entity_path: str


@dataclass(slots=True, frozen=True)
class LoadedShard:
    """Validated shard plus where it came from."""

    path: str
    source: ShardSource
    shard: Shard


def parse_shard_script(text: str) -> tuple[ShardKind, object]:
    """Extract the shard kind and raw payload from script text."""
    match = SCRIPT_PATTERN.search(text)
    if match is None:
        raise ShardValidationError(
            code="INVALID_SHARD_SCRIPT",
            message="Script does not contain a recognised shard registration.",
        )
    kind = ShardKind(match.group("var"))
    try:
        payload = json.loads(match.group("body"))
    except json.JSONDecodeError as error:
        raise ShardValidationError(
            code="INVALID_SHARD_SCRIPT",
            message=f"Shard object literal is not valid JSON: {error.msg}.",
        ) from error
    return kind, payload


def shard_source_for(relative_path: str) -> ShardSource:
    """Derive the documented entity from a doc-root relative script path."""
    parts = PurePosixPath(relative_path.replace("\\", "/")).parts
    if len(parts) < 2 or parts[0] not in DIRECTORY_KINDS:
        raise ShardValidationError(
            code="INVALID_SHARD_SCRIPT",
            message=f"Script path is not under implementors/ or type.impl/: {relative_path}",
        )
    filename = parts[-1]
    if not filename.endswith(SCRIPT_SUFFIX) or "." not in filename[: -len(SCRIPT_SUFFIX)]:
        raise ShardValidationError(
            code="INVALID_SHARD_SCRIPT",
            message=f"Script file name must look like '<type>.<Name>.js': {filename}",
        )
    item_type, _, name = filename[: -len(SCRIPT_SUFFIX)].partition(".")
    module_path = list(parts[1:-1])
    return ShardSource(
        kind=DIRECTORY_KINDS[parts[0]],
        item_type=item_type,
        entity_path="::".join([*module_path, name]),
    )


def load_shard_script(doc_root: Path, path: Path, max_bytes: int) -> LoadedShard:
    """Read, parse, and validate one shard script under doc_root."""
    relative = path.resolve().relative_to(doc_root.resolve()).as_posix()
    source = shard_source_for(relative)
    size = path.stat().st_size
    if size > max_bytes:
        raise ShardValidationError(
            code="SHARD_TOO_LARGE",
            message=f"Shard script is {size} bytes; limit is {max_bytes}.",
        )
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as error:
        raise ShardValidationError(
            code="INVALID_SHARD_SCRIPT",
            message=f"Shard script is not valid UTF-8 at byte {error.start}.",
        ) from error
    kind, payload = parse_shard_script(text)
    if kind != source.kind:
        raise ShardValidationError(
            code="KIND_MISMATCH",
            message=f"Script registers {kind.value} but lives under {source.kind.value}.",
        )
    return LoadedShard(path=relative, source=source, shard=parse_shard(payload, kind))


def discover_shard_scripts(doc_root: Path, entity_path: str | None = None) -> list[str]:
    """List shard script paths under doc_root in deterministic order."""
    root = doc_root.resolve()
    found: list[str] = []
    for directory in DIRECTORY_KINDS:
        base = root / directory
        if not base.is_dir():
            continue
        for candidate in sorted(base.rglob(f"*{SCRIPT_SUFFIX}")):
            if not candidate.is_file():
                continue
            relative = candidate.relative_to(root).as_posix()
            if entity_path is not None:
                try:
                    source = shard_source_for(relative)
                except ShardValidationError:
                    continue
                if source.entity_path != entity_path:
                    continue
            found.append(relative)
    return found
