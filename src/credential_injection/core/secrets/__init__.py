"""Secret stores: backends, chaining, caching, and audit."""

from credential_injection.core.secrets.audit import AuditedSecretStore
from credential_injection.core.secrets.base import (
    SecretLookupResult,
    SecretLookupStatus,
    SecretReference,
    SecretStore,
)
from credential_injection.core.secrets.providers import (
    AwsSecretStore,
    EnvSecretStore,
    InMemorySecretStore,
    VaultSecretStore,
)
from credential_injection.core.secrets.resolver import CachedSecretStore, ChainedSecretStore

__all__ = [
    "AuditedSecretStore",
    "AwsSecretStore",
    "CachedSecretStore",
    "ChainedSecretStore",
    "EnvSecretStore",
    "InMemorySecretStore",
    "SecretLookupResult",
    "SecretLookupStatus",
    "SecretReference",
    "SecretStore",
    "VaultSecretStore",
]
