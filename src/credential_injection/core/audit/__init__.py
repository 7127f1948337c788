"""Audit event types and sinks."""

from credential_injection.core.audit.sinks import (
    AuditSink,
    CompositeAuditSink,
    FileAuditSink,
    LoggingAuditSink,
)
from credential_injection.core.audit.types import (
    AuditAction,
    AuditEvent,
    AuditStatus,
)

__all__ = [
    "AuditAction",
    "AuditEvent",
    "AuditSink",
    "AuditStatus",
    "CompositeAuditSink",
    "FileAuditSink",
    "LoggingAuditSink",
]
