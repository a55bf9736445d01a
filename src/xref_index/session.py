"""Per-page index session and its in-process request surface."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from xref_index.config import SessionConfig, SessionOverrides, load_effective_config
from xref_index.index import (
    IndexChannel,
    RegisterOutcome,
    ShardKind,
    ShardValidationError,
)
from xref_index.loader import LoadedShard, load_shard_script
from xref_index.logging import (
    AuditEvent,
    AuditLog,
    JsonlAuditLogger,
    MemoryAuditLogger,
    sanitize_arguments,
    utc_timestamp,
)
from xref_index.methods.builtin import register_builtin_methods
from xref_index.methods.registry import MethodDispatchError, MethodRegistry
from xref_index.security import PathBlockedError, resolve_script_path


@dataclass(slots=True, frozen=True)
class Request:
    """Normalized incoming request."""

    request_id: str
    method: str
    params: dict[str, object]


class IndexSession:
    """Both shard channels of one documentation page plus request routing.

    Shards may be registered at any time; the host calls ``initialize`` once
    the page is ready and may call it again safely.
    """

    def __init__(self, config: SessionConfig) -> None:
        self._config = config
        self._channels: dict[ShardKind, IndexChannel] = {
            kind: IndexChannel.create(
                kind, duplicate_policy=config.duplicate_policy, options=config.render
            )
            for kind in ShardKind
        }
        self._audit_logger: AuditLog
        if config.data_dir is not None:
            self._audit_logger = JsonlAuditLogger(path=config.data_dir / "audit.jsonl")
        else:
            self._audit_logger = MemoryAuditLogger()
        self._methods = MethodRegistry()
        register_builtin_methods(
            self._methods,
            channels=self._channels,
            config=config,
            load_script=self._load_script,
            read_audit_entries=self._audit_logger.read,
        )
        self._fallback_request_counter = 0

    @property
    def config(self) -> SessionConfig:
        return self._config

    def channel(self, kind: ShardKind) -> IndexChannel:
        """Return the channel for a shard kind."""
        return self._channels[kind]

    def register(self, kind: ShardKind, shard: object) -> RegisterOutcome:
        """Stable registration entry point for shard producers."""
        return self._channels[kind].registrar.register(shard)

    def initialize(self) -> dict[ShardKind, int | None]:
        """Initialize every channel, returning flushed shard counts."""
        return {kind: channel.consumer.initialize() for kind, channel in self._channels.items()}

    def handle_payload(self, payload: object) -> dict[str, object]:
        """Validate and dispatch a parsed request, always returning an envelope."""
        parsed = self.parse_request(payload)
        if isinstance(parsed, dict):
            request_id_value = parsed.get("request_id")
            request_id = (
                request_id_value if isinstance(request_id_value, str) else self.next_request_id()
            )
            self.log_request(
                request_id=request_id,
                method="invalid_request",
                arguments={},
                response=parsed,
            )
            return parsed

        request = parsed
        try:
            result = self._methods.dispatch(name=request.method, arguments=request.params)
        except ShardValidationError as error:
            response = self.error_response(
                request_id=request.request_id,
                code="VALIDATION_ERROR",
                message=error.message,
                reason=error.code,
            )
        except PathBlockedError as error:
            response = self.blocked_response(
                request_id=request.request_id,
                reason=error.reason,
                hint=error.hint,
            )
        except MethodDispatchError as error:
            response = self.error_response(
                request_id=request.request_id,
                code=error.code,
                message=error.message,
            )
        except Exception:
            response = self.error_response(
                request_id=request.request_id,
                code="INTERNAL_ERROR",
                message="Unhandled error while executing method.",
            )
        else:
            response = self.enforce_response_size_limit(
                request_id=request.request_id,
                response=self.success_response(request_id=request.request_id, result=result),
            )
        self.log_request(
            request_id=request.request_id,
            method=request.method,
            arguments=request.params,
            response=response,
        )
        return response

    def parse_request(self, payload: object) -> Request | dict[str, object]:
        """Validate request payload and return normalized Request."""
        if not isinstance(payload, dict):
            return self.error_response(
                request_id=self.next_request_id(),
                code="INVALID_REQUEST",
                message="Request must be an object.",
            )

        request_id = self.extract_request_id(payload.get("id"))
        method = payload.get("method")
        params = payload.get("params", {})

        if not isinstance(method, str) or not method:
            return self.error_response(
                request_id=request_id,
                code="INVALID_REQUEST",
                message="Request method must be a non-empty string.",
            )
        if not isinstance(params, dict):
            return self.error_response(
                request_id=request_id,
                code="INVALID_PARAMS",
                message="Request params must be an object.",
            )

        return Request(request_id=request_id, method=method, params=params)

    def extract_request_id(self, request_id: object) -> str:
        """Extract request ID from payload or synthesize a fallback."""
        if isinstance(request_id, str) and request_id:
            return request_id
        if isinstance(request_id, int) and not isinstance(request_id, bool):
            return str(request_id)
        return self.next_request_id()

    def next_request_id(self) -> str:
        """Generate sequential fallback request IDs for invalid/missing IDs."""
        self._fallback_request_counter += 1
        return f"req-{self._fallback_request_counter:06d}"

    @staticmethod
    def success_response(request_id: str, result: dict[str, object]) -> dict[str, object]:
        """Build success envelope."""
        return {
            "request_id": request_id,
            "ok": True,
            "result": result,
            "warnings": [],
            "blocked": False,
        }

    @staticmethod
    def error_response(
        request_id: str, code: str, message: str, reason: str | None = None
    ) -> dict[str, object]:
        """Build explicit error envelope."""
        error: dict[str, object] = {"code": code, "message": message}
        if reason is not None:
            error["reason"] = reason
        return {
            "request_id": request_id,
            "ok": False,
            "result": {},
            "warnings": [],
            "blocked": False,
            "error": error,
        }

    @staticmethod
    def blocked_response(request_id: str, reason: str, hint: str) -> dict[str, object]:
        """Build explicit blocked response envelope."""
        return {
            "request_id": request_id,
            "ok": False,
            "result": {"reason": reason, "hint": hint},
            "warnings": [],
            "blocked": True,
            "error": {"code": "PATH_BLOCKED", "message": reason},
        }

    def enforce_response_size_limit(
        self,
        request_id: str,
        response: dict[str, object],
    ) -> dict[str, object]:
        """Replace responses that exceed max_response_bytes with an error."""
        response_bytes = len(json.dumps(response, sort_keys=True).encode("utf-8"))
        if response_bytes <= self._config.limits.max_response_bytes:
            return response
        return self.error_response(
            request_id=request_id,
            code="RESPONSE_TOO_LARGE",
            message="Response exceeds max_response_bytes limit.",
        )

    def log_request(
        self,
        request_id: str,
        method: str,
        arguments: dict[str, object],
        response: dict[str, object],
    ) -> None:
        """Log one sanitized request event."""
        error_payload = response.get("error")
        error_code: str | None = None
        if isinstance(error_payload, dict):
            code_value = error_payload.get("code")
            if isinstance(code_value, str):
                error_code = code_value
        event = AuditEvent(
            timestamp=utc_timestamp(),
            request_id=request_id,
            method=method,
            ok=bool(response.get("ok", False)),
            error_code=error_code,
            metadata=sanitize_arguments(arguments),
        )
        self._audit_logger.append(event)

    def _load_script(self, path: str) -> tuple[LoadedShard, str]:
        resolved = resolve_script_path(doc_root=self._config.doc_root, candidate=path)
        if not resolved.is_file():
            raise MethodDispatchError(
                code="INVALID_PARAMS",
                message=f"xref.load_script path is not a readable file: {path}",
            )
        loaded = load_shard_script(
            doc_root=self._config.doc_root,
            path=resolved,
            max_bytes=self._config.limits.max_shard_bytes,
        )
        outcome = self.register(loaded.source.kind, loaded.shard)
        return loaded, outcome.status


def create_session(
    doc_root: str | Path = ".",
    overrides: SessionOverrides | None = None,
) -> IndexSession:
    """Create a configured index session."""
    config = load_effective_config(doc_root=Path(doc_root), overrides=overrides)
    return IndexSession(config=config)
