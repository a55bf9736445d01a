"""Built-in session methods over the shard channels."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import replace

from xref_index.config import SessionConfig
from xref_index.index import ExpandResult, IndexChannel, NotFound, ShardKind
from xref_index.loader import LoadedShard
from xref_index.methods.registry import MethodDispatchError, MethodHandler, MethodRegistry
from xref_index.render import HtmlListTarget, RenderOptions, TextListTarget

OUTPUT_FORMATS = ("html", "text")
MAX_AUDIT_LIMIT = 500


def register_builtin_methods(
    registry: MethodRegistry,
    channels: Mapping[ShardKind, IndexChannel],
    config: SessionConfig,
    load_script: Callable[[str], tuple[LoadedShard, str]],
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> None:
    """Register the xref.* method set."""
    render_params = ("kind", "format", "self_alias", "anchor_offset")
    registry.register("xref.register", _register_handler(channels), ("kind", "shard"))
    registry.register("xref.load_script", _load_script_handler(load_script), ("path",))
    registry.register("xref.initialize", _initialize_handler(channels), ("kind",))
    registry.register("xref.lookup", _lookup_handler(channels), ("kind", "name"))
    registry.register(
        "xref.expand", _expand_handler(channels, expand_all=False), (*render_params, "name")
    )
    registry.register(
        "xref.expand_all", _expand_handler(channels, expand_all=True), render_params
    )
    registry.register("xref.status", _status_handler(channels, config, registry))
    registry.register(
        "xref.audit_log", _audit_log_handler(read_audit_entries), ("since", "limit")
    )


def _register_handler(channels: Mapping[ShardKind, IndexChannel]) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        channel = channels[_kind_argument(arguments, "xref.register")]
        if "shard" not in arguments:
            raise MethodDispatchError(
                code="INVALID_PARAMS", message="xref.register requires a shard argument."
            )
        outcome = channel.registrar.register(arguments["shard"])
        return {
            "kind": channel.kind.value,
            "status": outcome.status,
            "units": list(outcome.shard.names()),
            "record_count": outcome.shard.record_count(),
        }

    return handler


def _load_script_handler(load_script: Callable[[str], tuple[LoadedShard, str]]) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        path_value = arguments.get("path")
        if not isinstance(path_value, str) or not path_value:
            raise MethodDispatchError(
                code="INVALID_PARAMS", message="xref.load_script path must be a non-empty string."
            )
        loaded, status = load_script(path_value)
        return {
            "path": loaded.path,
            "kind": loaded.source.kind.value,
            "item_type": loaded.source.item_type,
            "entity_path": loaded.source.entity_path,
            "status": status,
            "units": list(loaded.shard.names()),
            "record_count": loaded.shard.record_count(),
        }

    return handler


def _initialize_handler(channels: Mapping[ShardKind, IndexChannel]) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        if arguments.get("kind") is None:
            kinds = list(channels.keys())
        else:
            kinds = [_kind_argument(arguments, "xref.initialize")]
        summary: dict[str, object] = {}
        for kind in kinds:
            flushed = channels[kind].consumer.initialize()
            summary[kind.value] = {
                "initialized": flushed is not None,
                "flushed_shards": flushed or 0,
            }
        return {"channels": summary}

    return handler


def _lookup_handler(channels: Mapping[ShardKind, IndexChannel]) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        channel = channels[_kind_argument(arguments, "xref.lookup")]
        name = _name_argument(arguments, "xref.lookup")
        records = channel.consumer.lookup(name)
        if isinstance(records, NotFound):
            raise _not_found(records)
        return {
            "kind": channel.kind.value,
            "name": name,
            "records": [record.to_dict() for record in records],
        }

    return handler


def _expand_handler(
    channels: Mapping[ShardKind, IndexChannel], expand_all: bool
) -> MethodHandler:
    method = "xref.expand_all" if expand_all else "xref.expand"

    def handler(arguments: dict[str, object]) -> dict[str, object]:
        channel = channels[_kind_argument(arguments, method)]
        output_format = arguments.get("format", "html")
        if output_format not in OUTPUT_FORMATS:
            raise MethodDispatchError(
                code="INVALID_PARAMS", message=f"{method} format must be 'html' or 'text'."
            )
        options = _render_options(channel.consumer.options, arguments, method)
        target = HtmlListTarget() if output_format == "html" else TextListTarget()
        result: ExpandResult | NotFound
        if expand_all:
            result = channel.consumer.expand_all(target, options)
        else:
            result = channel.consumer.expand(_name_argument(arguments, method), target, options)
        if isinstance(result, NotFound):
            raise _not_found(result)
        return {
            "kind": channel.kind.value,
            "name": result.name,
            "rendered": result.rendered,
            "skipped": result.skipped,
            "anchors": list(result.anchors),
            "output": target.to_dict(),
        }

    return handler


def _status_handler(
    channels: Mapping[ShardKind, IndexChannel],
    config: SessionConfig,
    registry: MethodRegistry,
) -> MethodHandler:
    def handler(_: dict[str, object]) -> dict[str, object]:
        return {
            "doc_root": str(config.doc_root),
            "channels": {
                kind.value: {**channel.state.snapshot(), "units": list(channel.state.unit_names())}
                for kind, channel in channels.items()
            },
            "methods": registry.describe(),
            "effective_config": config.to_public_dict(),
        }

    return handler


def _audit_log_handler(
    read_audit_entries: Callable[[str | None, int], list[dict[str, object]]],
) -> MethodHandler:
    def handler(arguments: dict[str, object]) -> dict[str, object]:
        since_value = arguments.get("since")
        since = since_value if isinstance(since_value, str) else None
        limit_value = arguments.get("limit", 50)
        if isinstance(limit_value, bool) or not isinstance(limit_value, int) or limit_value < 1:
            raise MethodDispatchError(
                code="INVALID_PARAMS", message="xref.audit_log limit must be a positive integer."
            )
        return {"entries": read_audit_entries(since, min(limit_value, MAX_AUDIT_LIMIT))}

    return handler


def _kind_argument(arguments: dict[str, object], method: str) -> ShardKind:
    value = arguments.get("kind", ShardKind.IMPLEMENTORS.value)
    if isinstance(value, str):
        for kind in ShardKind:
            if kind.value == value:
                return kind
    raise MethodDispatchError(
        code="INVALID_PARAMS",
        message=f"{method} kind must be 'implementors' or 'type_impls'.",
    )


def _name_argument(arguments: dict[str, object], method: str) -> str:
    value = arguments.get("name")
    if not isinstance(value, str) or not value:
        raise MethodDispatchError(
            code="INVALID_PARAMS", message=f"{method} name must be a non-empty string."
        )
    return value


def _render_options(
    base: RenderOptions, arguments: dict[str, object], method: str
) -> RenderOptions:
    options = base
    alias = arguments.get("self_alias")
    if alias is not None:
        if not isinstance(alias, str) or not alias:
            raise MethodDispatchError(
                code="INVALID_PARAMS", message=f"{method} self_alias must be a non-empty string."
            )
        options = replace(options, self_alias=alias)
    offset = arguments.get("anchor_offset")
    if offset is not None:
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise MethodDispatchError(
                code="INVALID_PARAMS",
                message=f"{method} anchor_offset must be a non-negative integer.",
            )
        options = replace(options, anchor_offset=offset)
    return options


def _not_found(result: NotFound) -> MethodDispatchError:
    return MethodDispatchError(
        code="NOT_FOUND", message=f"No implementors known for '{result.name}': {result.reason}."
    )
