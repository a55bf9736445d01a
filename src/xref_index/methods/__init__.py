"""Session method interfaces and registrations."""

from .registry import MethodDispatchError, MethodHandler, MethodRegistry, MethodSpec

__all__ = ["MethodDispatchError", "MethodHandler", "MethodRegistry", "MethodSpec"]
