"""Audit trail hooks for header building."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

from credential_injection.core.audit.sinks import AuditSink
from credential_injection.core.audit.types import (
    AuditAction,
    AuditEvent,
    AuditStatus,
)
from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.exceptions import (
    AmbiguousSequenceError,
    EvalFailedError,
    NoApplicableMappingError,
)
from credential_injection.core.resolution.principal import Principal
from credential_injection.runner.result import HeaderSet


class AuditHooks:
    """Header building hooks that emit an audit event per request.

    Each instance carries a ``correlation_id`` shared by every event it
    emits. Events record the principal, endpoint, and header names;
    header values are never recorded.

    Args:
        sink: The audit sink to emit events to.
        correlation_id: Defaults to a new UUID4.
        now_fn: Injectable clock for testing.
            Defaults to ``datetime.now(timezone.utc)``.
    """

    def __init__(
        self,
        sink: AuditSink,
        correlation_id: str | None = None,
        now_fn: Callable[[], datetime] | None = None,
    ) -> None:
        self._sink = sink
        self._correlation_id = correlation_id or str(uuid.uuid4())
        self._now_fn = now_fn or (lambda: datetime.now(timezone.utc))

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    def _emit(
        self,
        action: AuditAction,
        actor: str,
        target: str,
        status: AuditStatus,
        details: dict[str, str],
    ) -> None:
        event = AuditEvent(
            action=action,
            actor=actor,
            target=target,
            status=status,
            timestamp=self._now_fn(),
            details=details,
            correlation_id=self._correlation_id,
        )
        self._sink.emit(event)

    # ------------------------------------------------------------------
    # AugmentHooks protocol
    # ------------------------------------------------------------------

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        pass

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        self._emit(
            AuditAction.HEADERS_BUILT,
            principal.name,
            endpoint.name,
            AuditStatus.SUCCESS,
            {
                "container": endpoint.container,
                "headers": ",".join(headers.names),
                "duration_ms": str(duration_ms),
            },
        )

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        details = {
            "container": endpoint.container,
            "error_type": type(error).__name__,
        }
        if isinstance(error, NoApplicableMappingError):
            details["failed_container"] = error.container
        elif isinstance(error, EvalFailedError):
            details["header"] = error.header_name
        elif isinstance(error, AmbiguousSequenceError):
            details["target"] = error.target
        self._emit(
            AuditAction.HEADERS_FAILED,
            principal.name,
            endpoint.name,
            AuditStatus.FAILURE,
            details,
        )
