"""Resolution of shard script paths requested by the host."""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Final

from xref_index.loader.scripts import DIRECTORY_KINDS, SCRIPT_SUFFIX

SCRIPT_PATH_HINT: Final[str] = (
    "Use a doc-root relative path such as 'implementors/core/clone/trait.Clone.js'."
)


class PathBlockedError(Exception):
    """Raised when a requested script path is not a shard script under the doc root."""

    def __init__(self, reason: str, hint: str = SCRIPT_PATH_HINT) -> None:
        super().__init__(reason)
        self.reason = reason
        self.hint = hint


def _relative_parts(root: Path, candidate: str) -> tuple[str, ...]:
    normalized = candidate.replace("\\", "/")
    path = PurePosixPath(normalized)
    if path.is_absolute() or (len(normalized) > 1 and normalized[1] == ":"):
        absolute = Path(candidate).resolve(strict=False)
        if not absolute.is_relative_to(root):
            raise PathBlockedError("Absolute path is outside doc_root.")
        return absolute.relative_to(root).parts
    return tuple(part for part in path.parts if part != ".")


def resolve_script_path(doc_root: Path, candidate: str) -> Path:
    """Resolve a shard script path, allowing only ``*.js`` under the shard directories."""
    root = doc_root.resolve()
    if not candidate.strip():
        raise PathBlockedError("Path is empty.")

    parts = _relative_parts(root, candidate)
    if ".." in parts:
        raise PathBlockedError("Path traversal is blocked.")
    if len(parts) < 2 or parts[0] not in DIRECTORY_KINDS:
        raise PathBlockedError("Path is not under implementors/ or type.impl/.")
    if not parts[-1].endswith(SCRIPT_SUFFIX):
        raise PathBlockedError("Only shard scripts ending in .js can be loaded.")

    # Symlinks may not lead out of the shard directory they were found in.
    resolved = root.joinpath(*parts).resolve(strict=False)
    if not resolved.is_relative_to(root / parts[0]):
        raise PathBlockedError("Resolved path escapes its shard directory.")
    return resolved
