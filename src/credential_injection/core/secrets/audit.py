"""Audit-aware wrapper for secret lookups."""

from __future__ import annotations

import logging

from credential_injection.core.audit.sinks import AuditSink
from credential_injection.core.audit.types import AuditAction, AuditEvent, AuditStatus
from credential_injection.core.secrets.base import (
    SecretLookupResult,
    SecretLookupStatus,
    SecretStore,
)
from credential_injection.core.utils import safe_call

logger = logging.getLogger(__name__)

_STATUS_MAP: dict[SecretLookupStatus, AuditStatus] = {
    SecretLookupStatus.SUCCESS: AuditStatus.SUCCESS,
    SecretLookupStatus.NOT_FOUND: AuditStatus.WARNING,
    SecretLookupStatus.ERROR: AuditStatus.FAILURE,
}


class AuditedSecretStore(SecretStore):
    """Decorator that emits audit events for secret access.

    Wraps any :class:`SecretStore` and emits an :class:`AuditEvent` with
    :attr:`AuditAction.SECRET_ACCESSED` for every ``lookup()`` call.
    The secret **value is never included** in the audit trail. A failing
    sink is logged and does not affect the lookup.

    Args:
        store: The underlying store to delegate to.
        sink: Audit sink that receives the events.
        actor: Actor name recorded in audit events.
            Defaults to ``"secret_store"``.
    """

    def __init__(
        self,
        store: SecretStore,
        sink: AuditSink,
        actor: str = "secret_store",
    ) -> None:
        self._store = store
        self._sink = sink
        self._actor = actor

    @property
    def store_name(self) -> str:
        return self._store.store_name

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        """Look up a secret and emit an audit event."""
        result = self._store.lookup(container, key)
        self._emit(result)
        return result

    def _emit(self, result: SecretLookupResult) -> None:
        reference = result.reference
        details: dict[str, str] = {
            "store": self._store.store_name,
            "container": reference.container,
            "key": reference.key,
            "lookup_status": result.status.value,
        }
        if result.error is not None:
            details["error"] = result.error

        event = AuditEvent(
            action=AuditAction.SECRET_ACCESSED,
            actor=self._actor,
            target=str(reference),
            status=_STATUS_MAP.get(result.status, AuditStatus.FAILURE),
            details=details,
        )

        safe_call(
            lambda: self._sink.emit(event),
            logger,
            "Failed to emit audit event for secret %s",
            reference,
        )
