from __future__ import annotations

from pathlib import Path

import pytest

from xref_index.config import SessionOverrides
from xref_index.session import create_session


def _write_config(root: Path, lines: list[str]) -> None:
    (root / "xref_index.toml").write_text("\n".join(lines), encoding="utf-8")


def test_unknown_duplicate_policy_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[registry]", 'duplicate_policy = "merge"'])

    with pytest.raises(ValueError, match="registry.duplicate_policy"):
        create_session(doc_root=tmp_path)


def test_invalid_section_type_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ['render = "not-a-table"'])

    with pytest.raises(ValueError, match="section 'render'"):
        create_session(doc_root=tmp_path)


def test_non_boolean_grouping_flag_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[render]", 'group_by_type_tags = "yes"'])

    with pytest.raises(ValueError, match="render.group_by_type_tags"):
        create_session(doc_root=tmp_path)


def test_limit_above_cap_raises_value_error(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[limits]", "max_shard_bytes = 999999999999"])

    with pytest.raises(ValueError, match="limits.max_shard_bytes"):
        create_session(doc_root=tmp_path)


def test_invalid_override_raises_value_error(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="overrides.max_response_bytes"):
        create_session(doc_root=tmp_path, overrides=SessionOverrides(max_response_bytes=0))


def test_ignore_list_must_hold_strings(tmp_path: Path) -> None:
    _write_config(tmp_path, ["[render]", "ignore_extern_crates = [1, 2]"])

    with pytest.raises(ValueError, match="render.ignore_extern_crates"):
        create_session(doc_root=tmp_path)
