"""Tests for CredentialConfig, EndpointConfig, and the secrets/hooks sections."""

import pytest

from credential_injection.core.config import (
    CredentialConfig,
    EndpointConfig,
    HooksConfig,
    LoggingConfig,
    LogLevel,
    SecretsConfig,
    SecretsProvider,
    SequenceTieBreak,
)
from tests.factories import make_container, make_endpoint


class TestEndpointConfig:
    def test_valid(self) -> None:
        endpoint = EndpointConfig("github-api", "https://api.github.com", "GitHub")
        assert endpoint.headers == []

    @pytest.mark.parametrize(
        ("kwargs", "message"),
        [
            ({"name": "", "url": "u", "container": "c"}, "name is required"),
            ({"name": "e", "url": "", "container": "c"}, "requires a url"),
            ({"name": "e", "url": "u", "container": ""}, "requires a container"),
        ],
    )
    def test_required_fields(self, kwargs: dict[str, str], message: str) -> None:
        with pytest.raises(ValueError, match=message):
            EndpointConfig(**kwargs)


class TestCredentialConfig:
    def test_defaults(self) -> None:
        config = CredentialConfig("creds", [make_container()])

        assert config.sequence_tie_break == SequenceTieBreak.FAIL
        assert config.endpoints == []
        assert config.secrets is None
        assert isinstance(config.hooks, HooksConfig)

    def test_lookups(self) -> None:
        config = CredentialConfig("creds", [make_container()], [make_endpoint()])

        assert config.get_container("GitHub") is config.containers[0]
        assert config.get_endpoint("github-api") is config.endpoints[0]
        assert config.get_container("Jira") is None
        assert config.get_endpoint("jira") is None

    def test_requires_name(self) -> None:
        with pytest.raises(ValueError, match="name is required"):
            CredentialConfig("", [make_container()])

    def test_requires_containers(self) -> None:
        with pytest.raises(ValueError, match="At least one container"):
            CredentialConfig("creds", [])

    def test_duplicate_containers(self) -> None:
        with pytest.raises(ValueError, match="Container names must be unique"):
            CredentialConfig("creds", [make_container(), make_container()])

    def test_duplicate_endpoints(self) -> None:
        with pytest.raises(ValueError, match="Endpoint names must be unique"):
            CredentialConfig("creds", [make_container()], [make_endpoint(), make_endpoint()])

    def test_endpoint_with_unknown_container(self) -> None:
        with pytest.raises(ValueError, match="unknown container 'Jira'"):
            CredentialConfig("creds", [make_container()], [make_endpoint("jira", "Jira")])


class TestSecretsConfig:
    def test_defaults(self) -> None:
        config = SecretsConfig()
        assert config.provider == SecretsProvider.ENV
        assert config.env_prefix == "CIE_"
        assert config.cache_ttl_seconds == 300

    def test_negative_ttl_raises(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            SecretsConfig(cache_ttl_seconds=-1)

    def test_vault_requires_url(self) -> None:
        with pytest.raises(ValueError, match="vault_url is required"):
            SecretsConfig(provider=SecretsProvider.VAULT)

    def test_aws_requires_region(self) -> None:
        with pytest.raises(ValueError, match="aws_region is required"):
            SecretsConfig(provider=SecretsProvider.AWS_SECRETS_MANAGER)

    def test_providers(self) -> None:
        assert [p.value for p in SecretsProvider] == ["env", "vault", "aws_secrets_manager"]


class TestHooksConfig:
    def test_default_logging(self) -> None:
        hooks = HooksConfig()
        assert hooks.logging == LoggingConfig()
        assert hooks.logging.level == LogLevel.INFO
        assert hooks.metrics is None
        assert hooks.audit is None

    def test_explicit_logging_kept(self) -> None:
        logging_config = LoggingConfig(level=LogLevel.DEBUG, logger_name="custom")
        assert HooksConfig(logging=logging_config).logging is logging_config
