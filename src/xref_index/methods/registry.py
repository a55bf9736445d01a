"""Method table for the session host surface."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field

MethodHandler = Callable[[dict[str, object]], dict[str, object]]

METHOD_NAMESPACE = "xref."


@dataclass(slots=True, frozen=True)
class MethodDispatchError(Exception):
    """Routing or parameter failure reported back as an error envelope."""

    code: str
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(slots=True, frozen=True)
class MethodSpec:
    """A host method and the parameter names it accepts."""

    name: str
    handler: MethodHandler
    params: frozenset[str]

    def unexpected_params(self, arguments: dict[str, object]) -> list[str]:
        return sorted(key for key in arguments if key not in self.params)


@dataclass(slots=True)
class MethodRegistry:
    """xref.* methods keyed by name, each with a closed parameter set."""

    _specs: dict[str, MethodSpec] = field(default_factory=dict)

    def register(self, name: str, handler: MethodHandler, params: Iterable[str] = ()) -> None:
        if not name.startswith(METHOD_NAMESPACE) or name == METHOD_NAMESPACE:
            raise ValueError(f"Method names must live under '{METHOD_NAMESPACE}': {name}")
        self._specs[name] = MethodSpec(name=name, handler=handler, params=frozenset(params))

    def describe(self) -> list[dict[str, object]]:
        """Return method names and accepted parameters in registration order."""
        return [{"name": spec.name, "params": sorted(spec.params)} for spec in self._specs.values()]

    def dispatch(self, name: str, arguments: dict[str, object]) -> dict[str, object]:
        """Check the method name and parameter names, then call the handler."""
        spec = self._specs.get(name)
        if spec is None:
            raise MethodDispatchError(code="UNKNOWN_METHOD", message=f"Unknown method: {name}")
        unexpected = spec.unexpected_params(arguments)
        if unexpected:
            raise MethodDispatchError(
                code="INVALID_PARAMS",
                message=f"{name} does not accept parameter(s): {', '.join(unexpected)}.",
            )
        return spec.handler(arguments)
