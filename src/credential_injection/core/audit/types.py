"""Audit trail records for configuration loads, secret lookups and header builds."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class AuditAction(str, Enum):
    """What happened."""

    CONFIG_LOADED = "config_loaded"
    TEMPLATE_REJECTED = "template_rejected"
    SECRET_ACCESSED = "secret_accessed"
    HEADERS_BUILT = "headers_built"
    HEADERS_FAILED = "headers_failed"


class AuditStatus(str, Enum):
    """Outcome of the audited action."""

    SUCCESS = "success"
    FAILURE = "failure"
    WARNING = "warning"


@dataclass(frozen=True)
class AuditEvent:
    """One entry in the audit trail.

    ``details`` holds names, counts and statuses. Secret values and
    rendered header values never go into an event.

    Args:
        action: What happened.
        actor: Principal name, configuration name, or the secret store
            actor that performed the action.
        target: Endpoint name, ``container/key`` reference, or template owner.
        status: Outcome.
        timestamp: When it happened (UTC).
        details: Extra name/status pairs.
        correlation_id: Groups the events emitted by one augmenter.
    """

    action: AuditAction
    actor: str
    target: str
    status: AuditStatus
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    details: dict[str, str] = field(default_factory=dict)
    correlation_id: str | None = None

    @property
    def severity(self) -> int:
        """Logging level for this event: ``INFO`` on success, else ``WARNING``."""
        return logging.INFO if self.status == AuditStatus.SUCCESS else logging.WARNING

    def to_dict(self) -> dict[str, Any]:
        return {
            "action": self.action.value,
            "actor": self.actor,
            "target": self.target,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "details": dict(self.details),
            "correlation_id": self.correlation_id,
        }

    def to_json(self) -> str:
        """Serialize as a single JSON line with stable key order."""
        return json.dumps(self.to_dict(), sort_keys=True)
