"""Doc-root sandboxing for shard script loading."""

from .paths import PathBlockedError, resolve_script_path

__all__ = ["PathBlockedError", "resolve_script_path"]
