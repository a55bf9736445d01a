from __future__ import annotations

from pathlib import Path


def test_required_package_paths_exist() -> None:
    root = Path(__file__).resolve().parents[1]
    required = [
        "src/xref_index/session.py",
        "src/xref_index/config.py",
        "src/xref_index/index/__init__.py",
        "src/xref_index/render/__init__.py",
        "src/xref_index/loader/__init__.py",
        "src/xref_index/methods/__init__.py",
        "src/xref_index/security/__init__.py",
        "src/xref_index/logging/__init__.py",
    ]
    for rel in required:
        assert (root / rel).exists(), rel
