"""Secret store configuration models."""

from dataclasses import dataclass

from credential_injection.core.config.base import SecretsProvider


@dataclass
class SecretsConfig:
    """Configuration for the secret store backing parameter values."""

    provider: SecretsProvider = SecretsProvider.ENV
    """Secret store backend (default: env)"""

    env_prefix: str = "CIE_"
    """Prefix for environment variable names (default: CIE_)"""

    vault_url: str | None = None
    """HashiCorp Vault URL (required for vault provider)"""

    vault_token: str | None = None
    """Vault authentication token (optional, can use env var VAULT_TOKEN)"""

    vault_mount_point: str = "secret"
    """KV v2 mount point (default: secret)"""

    vault_base_path: str = "credentials"
    """Path under which one secret per container is stored (default: credentials)"""

    aws_region: str | None = None
    """AWS region for Secrets Manager (required for aws_secrets_manager provider)"""

    aws_secret_prefix: str = ""
    """Prefix prepended to the container name to form the SecretId (default: "")"""

    cache_ttl_seconds: int = 300
    """TTL for the lookup cache in seconds; 0 disables caching (default: 300)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.cache_ttl_seconds < 0:
            raise ValueError("cache_ttl_seconds must be non-negative")

        if self.provider == SecretsProvider.VAULT and not self.vault_url:
            raise ValueError("vault_url is required when provider is vault")

        if self.provider == SecretsProvider.AWS_SECRETS_MANAGER and not self.aws_region:
            raise ValueError("aws_region is required when provider is aws_secrets_manager")
