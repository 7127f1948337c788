"""Destinations for audit events."""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO, Any

from credential_injection.core.audit.types import AuditEvent
from credential_injection.core.utils import safe_call

logger = logging.getLogger(__name__)

AUDIT_LOGGER = "credential_injection.audit"


class AuditSink(ABC):
    """Receives audit events from the augmenter, secret store and factory."""

    @abstractmethod
    def emit(self, event: AuditEvent) -> None:
        ...

    def close(self) -> None:  # noqa: B027
        """Release any resources held by the sink."""


class LoggingAuditSink(AuditSink):
    """Write audit events to a dedicated logger.

    Successful actions log at ``INFO``; failures and missing secrets at
    ``WARNING``. The structured event is attached as ``record.audit_event``.
    """

    def __init__(self, logger_name: str = AUDIT_LOGGER) -> None:
        self._logger = logging.getLogger(logger_name)

    def emit(self, event: AuditEvent) -> None:
        self._logger.log(
            event.severity,
            "%s actor=%s target=%s status=%s",
            event.action.value,
            event.actor,
            event.target,
            event.status.value,
            extra={"audit_event": event.to_dict()},
        )


class FileAuditSink(AuditSink):
    """Append audit events to a JSON-lines file.

    The file (and its parent directory) is created on the first event.
    Concurrent header builds write whole lines.

    Args:
        path: Audit trail location.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file: IO[Any] | None = None
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def emit(self, event: AuditEvent) -> None:
        line = event.to_json() + "\n"
        with self._lock:
            if self._file is None:
                self._path.parent.mkdir(parents=True, exist_ok=True)
                self._file = open(self._path, "a", encoding="utf-8")  # noqa: SIM115
            self._file.write(line)
            self._file.flush()

    def close(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.close()
                self._file = None


class CompositeAuditSink(AuditSink):
    """Send each event to several sinks; one failing sink does not stop the rest."""

    def __init__(self, *sinks: AuditSink) -> None:
        self._sinks: tuple[AuditSink, ...] = sinks

    def emit(self, event: AuditEvent) -> None:
        for sink in self._sinks:
            safe_call(lambda s=sink: s.emit(event), logger, "Audit sink %s failed to emit", type(sink).__name__)

    def close(self) -> None:
        for sink in self._sinks:
            safe_call(sink.close, logger, "Audit sink %s failed to close", type(sink).__name__)
