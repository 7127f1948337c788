"""Base types and enums for configuration models."""

from enum import Enum


class SequenceTieBreak(str, Enum):
    """How equal sequence numbers are settled when picking a winner."""

    FAIL = "fail"
    FIRST_DECLARED = "first_declared"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SecretsProvider(str, Enum):
    """Secret store backends."""

    ENV = "env"
    VAULT = "vault"
    AWS_SECRETS_MANAGER = "aws_secrets_manager"


class MetricsBackend(str, Enum):
    """Metrics collection backends."""

    IN_MEMORY = "in_memory"
    PROMETHEUS = "prometheus"
