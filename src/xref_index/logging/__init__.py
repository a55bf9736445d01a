"""Structured logging utilities."""

from .audit import (
    AuditEvent,
    AuditLog,
    JsonlAuditLogger,
    MemoryAuditLogger,
    sanitize_arguments,
    utc_timestamp,
)

__all__ = [
    "AuditEvent",
    "AuditLog",
    "JsonlAuditLogger",
    "MemoryAuditLogger",
    "sanitize_arguments",
    "utc_timestamp",
]
