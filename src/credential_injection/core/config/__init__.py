"""Configuration models for credential-injection-engine.

This package provides dataconf-based configuration models for declaring
auth containers, permission-set mappings, header templates, and endpoints
in HOCON format.
"""

from credential_injection.core.config.base import (
    LogLevel,
    MetricsBackend,
    SecretsProvider,
    SequenceTieBreak,
)
from credential_injection.core.config.container import (
    AuthContainerConfig,
    HeaderTemplateConfig,
    ParameterConfig,
    PermissionSetMappingConfig,
)
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.config.hooks import AuditConfig, HooksConfig, LoggingConfig, MetricsConfig
from credential_injection.core.config.loader import load_from_env, load_from_file, load_from_string
from credential_injection.core.config.secrets import SecretsConfig
from credential_injection.core.config.validator import (
    ValidationError,
    ValidationPhase,
    ValidationResult,
    validate_configuration,
)

__all__ = [
    "AuditConfig",
    "AuthContainerConfig",
    "CredentialConfig",
    "EndpointConfig",
    "HeaderTemplateConfig",
    "HooksConfig",
    "LogLevel",
    "LoggingConfig",
    "MetricsBackend",
    "MetricsConfig",
    "ParameterConfig",
    "PermissionSetMappingConfig",
    "SecretsConfig",
    "SecretsProvider",
    "SequenceTieBreak",
    "ValidationError",
    "ValidationPhase",
    "ValidationResult",
    "load_from_env",
    "load_from_file",
    "load_from_string",
    "validate_configuration",
]
