"""Configuration loading and deterministic merge order."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from pathlib import Path

from xref_index.index import DuplicatePolicy
from xref_index.render import RenderOptions

CONFIG_FILENAME = "xref_index.toml"

MAX_SHARD_BYTES_CAP = 16 * 1024 * 1024
MAX_RESPONSE_BYTES_CAP = 8 * 1024 * 1024


@dataclass(slots=True, frozen=True)
class SessionLimits:
    """Size limits for loaded scripts and host responses."""

    max_shard_bytes: int = 2 * 1024 * 1024
    max_response_bytes: int = 1024 * 1024


@dataclass(slots=True, frozen=True)
class SessionConfig:
    """Fully merged session configuration."""

    doc_root: Path
    data_dir: Path | None
    duplicate_policy: DuplicatePolicy
    render: RenderOptions
    limits: SessionLimits

    def to_public_dict(self) -> dict[str, object]:
        """Return serializable config snapshot for status responses."""
        return {
            "doc_root": str(self.doc_root),
            "data_dir": str(self.data_dir) if self.data_dir is not None else None,
            "registry": {"duplicate_policy": self.duplicate_policy.value},
            "render": {
                "group_by_type_tags": self.render.group_by_type_tags,
                "root_path": self.render.root_path,
                "anchor_prefix": self.render.anchor_prefix,
                "current_crate": self.render.current_crate,
                "ignore_extern_crates": list(self.render.ignore_extern_crates),
            },
            "limits": {
                "max_shard_bytes": self.limits.max_shard_bytes,
                "max_response_bytes": self.limits.max_response_bytes,
            },
        }


@dataclass(slots=True, frozen=True)
class SessionOverrides:
    """Optional startup overrides applied at highest precedence."""

    data_dir: Path | None = None
    duplicate_policy: str | None = None
    root_path: str | None = None
    current_crate: str | None = None
    max_shard_bytes: int | None = None
    max_response_bytes: int | None = None


def default_config(doc_root: Path) -> SessionConfig:
    """Build default config for a given doc root."""
    return SessionConfig(
        doc_root=doc_root.resolve(),
        data_dir=None,
        duplicate_policy=DuplicatePolicy.APPEND,
        render=RenderOptions(),
        limits=SessionLimits(),
    )


def load_config_file(doc_root: Path) -> dict[str, object]:
    """Load optional xref_index.toml from the doc root."""
    config_path = doc_root / CONFIG_FILENAME
    if not config_path.exists():
        return {}
    with config_path.open("rb") as handle:
        payload = tomllib.load(handle)
    if not isinstance(payload, dict):
        raise ValueError(f"{CONFIG_FILENAME} must contain a top-level table.")
    return payload


def _get_table(payload: dict[str, object], key: str) -> dict[str, object]:
    value = payload.get(key, {})
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{key}' must be a table.")
    return value


def _tuple_of_strings(value: object, section: str, field: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        raise ValueError(f"Config field '{section}.{field}' must be a list of strings.")
    output: list[str] = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"Config field '{section}.{field}' must contain only strings.")
        output.append(item)
    return tuple(output)


def _optional_str(value: object, name: str, default: str | None) -> str | None:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be a string.")
    return value


def _duplicate_policy(value: object, name: str, default: DuplicatePolicy) -> DuplicatePolicy:
    if value is None:
        return default
    if not isinstance(value, str):
        raise ValueError(f"Config field '{name}' must be 'append' or 'replace'.")
    try:
        return DuplicatePolicy(value)
    except ValueError as error:
        raise ValueError(f"Config field '{name}' must be 'append' or 'replace'.") from error


def merge_config(
    base: SessionConfig, file_payload: dict[str, object], overrides: SessionOverrides
) -> SessionConfig:
    """Merge defaults, config file, then startup overrides."""
    registry_payload = _get_table(file_payload, "registry")
    render_payload = _get_table(file_payload, "render")
    limits_payload = _get_table(file_payload, "limits")

    duplicate_policy = _duplicate_policy(
        registry_payload.get("duplicate_policy"),
        "registry.duplicate_policy",
        base.duplicate_policy,
    )

    group_by_type_tags = base.render.group_by_type_tags
    if "group_by_type_tags" in render_payload:
        raw_group = render_payload["group_by_type_tags"]
        if not isinstance(raw_group, bool):
            raise ValueError("Config field 'render.group_by_type_tags' must be a boolean.")
        group_by_type_tags = raw_group

    ignore_extern_crates = base.render.ignore_extern_crates
    if "ignore_extern_crates" in render_payload:
        ignore_extern_crates = _tuple_of_strings(
            render_payload["ignore_extern_crates"], "render", "ignore_extern_crates"
        )

    anchor_prefix = _optional_str(
        render_payload.get("anchor_prefix"), "render.anchor_prefix", base.render.anchor_prefix
    )
    if not anchor_prefix:
        raise ValueError("Config field 'render.anchor_prefix' must be a non-empty string.")

    merged = SessionConfig(
        doc_root=base.doc_root,
        data_dir=base.data_dir,
        duplicate_policy=duplicate_policy,
        render=RenderOptions(
            group_by_type_tags=group_by_type_tags,
            root_path=_optional_str(
                render_payload.get("root_path"), "render.root_path", base.render.root_path
            )
            or "",
            anchor_prefix=anchor_prefix,
            current_crate=_optional_str(
                render_payload.get("current_crate"),
                "render.current_crate",
                base.render.current_crate,
            ),
            ignore_extern_crates=ignore_extern_crates,
        ),
        limits=SessionLimits(
            max_shard_bytes=_optional_positive_int_with_cap(
                limits_payload.get("max_shard_bytes"),
                "limits.max_shard_bytes",
                base.limits.max_shard_bytes,
                MAX_SHARD_BYTES_CAP,
            ),
            max_response_bytes=_optional_positive_int_with_cap(
                limits_payload.get("max_response_bytes"),
                "limits.max_response_bytes",
                base.limits.max_response_bytes,
                MAX_RESPONSE_BYTES_CAP,
            ),
        ),
    )
    return apply_overrides(merged, overrides)


def apply_overrides(config: SessionConfig, overrides: SessionOverrides) -> SessionConfig:
    """Apply startup overrides at highest precedence."""
    render = RenderOptions(
        group_by_type_tags=config.render.group_by_type_tags,
        root_path=(
            overrides.root_path if overrides.root_path is not None else config.render.root_path
        ),
        anchor_prefix=config.render.anchor_prefix,
        current_crate=(
            overrides.current_crate
            if overrides.current_crate is not None
            else config.render.current_crate
        ),
        ignore_extern_crates=config.render.ignore_extern_crates,
    )
    limits = SessionLimits(
        max_shard_bytes=_optional_positive_int_with_cap(
            overrides.max_shard_bytes,
            "overrides.max_shard_bytes",
            config.limits.max_shard_bytes,
            MAX_SHARD_BYTES_CAP,
        ),
        max_response_bytes=_optional_positive_int_with_cap(
            overrides.max_response_bytes,
            "overrides.max_response_bytes",
            config.limits.max_response_bytes,
            MAX_RESPONSE_BYTES_CAP,
        ),
    )
    data_dir = overrides.data_dir or config.data_dir
    return SessionConfig(
        doc_root=config.doc_root,
        data_dir=data_dir.resolve() if data_dir is not None else None,
        duplicate_policy=_duplicate_policy(
            overrides.duplicate_policy, "overrides.duplicate_policy", config.duplicate_policy
        ),
        render=render,
        limits=limits,
    )


def load_effective_config(
    doc_root: Path, overrides: SessionOverrides | None = None
) -> SessionConfig:
    """Load effective config using merge order defaults -> file -> overrides."""
    resolved_root = doc_root.resolve()
    base = default_config(resolved_root)
    payload = load_config_file(resolved_root)
    return merge_config(base, payload, overrides or SessionOverrides())


def _optional_positive_int_with_cap(
    value: object,
    name: str,
    default: int,
    cap: int | None,
) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"Config field '{name}' must be a positive integer.")
    if cap is not None and value > cap:
        raise ValueError(f"Config field '{name}' must be <= {cap}.")
    return value
