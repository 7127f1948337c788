"""Observability hooks configuration models."""

from dataclasses import dataclass

from credential_injection.core.config.base import LogLevel, MetricsBackend


@dataclass
class LoggingConfig:
    """Configuration for logging behavior."""

    level: LogLevel = LogLevel.INFO
    """Logging level (default: INFO)"""

    logger_name: str = "cie.headers"
    """Logger used by the built-in logging hooks (default: cie.headers)"""


@dataclass
class MetricsConfig:
    """Configuration for metrics collection."""

    enabled: bool = True
    """Enable metrics collection (default: True)"""

    backend: MetricsBackend = MetricsBackend.IN_MEMORY
    """Metrics backend to use (default: in_memory)"""


@dataclass
class AuditConfig:
    """Configuration for the audit trail."""

    enabled: bool = True
    """Enable audit trail (default: True)"""

    audit_trail_path: str | None = None
    """JSON-lines file for audit events; logging only when unset (default: None)"""

    audit_secret_access: bool = True
    """Emit an event for every secret store lookup (default: True)"""


@dataclass
class HooksConfig:
    """Composite configuration for all observability hooks."""

    logging: LoggingConfig = None  # type: ignore
    """Logging configuration"""

    metrics: MetricsConfig | None = None
    """Metrics configuration (optional)"""

    audit: AuditConfig | None = None
    """Audit configuration (optional)"""

    def __post_init__(self) -> None:
        """Initialize default logging if not provided."""
        if self.logging is None:
            self.logging = LoggingConfig()
