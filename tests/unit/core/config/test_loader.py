"""Tests for HOCON configuration loader functions."""

from pathlib import Path

import pytest

from credential_injection.core.config import (
    CredentialConfig,
    MetricsBackend,
    SecretsConfig,
    SecretsProvider,
    SequenceTieBreak,
    load_from_env,
    load_from_file,
    load_from_string,
)

_FULL = """
{
  name: "integrations"
  sequence_tie_break: first_declared

  secrets {
    provider: vault
    vault_url: "https://vault.internal:8200"
    vault_base_path: "teams/platform"
    cache_ttl_seconds: 60
  }

  hooks {
    logging { level: DEBUG }
    metrics { enabled: true, backend: prometheus }
    audit { audit_trail_path: "/var/log/cie/audit.jsonl" }
  }

  containers: [
    {
      name: "Jira"
      description: "Jira Cloud basic auth"
      parameters: [{ name: "User" }, { name: "Pass", description: "API token" }]
      mappings: [
        { name: "admin", permission_set: "jira-admin", sequence_number: 1, parameters: { User: "admin_user", Pass: "admin_pass" } }
        { name: "svc", permission_set: "jira-user", sequence_number: 10, parameters: { User: "user", Pass: "pass" } }
      ]
      headers: [
        {
          name: "Authorization"
          template: "{!'Basic ' & BASE64($Credential.Jira.User & ':' & $Credential.Jira.Pass)}"
        }
        { name: "X-Literal", template: "{!not a formula}", allow_formula: false, sequence_number: 5 }
      ]
    }
  ]

  endpoints: [
    {
      name: "jira-search"
      url: "https://example.atlassian.net/rest/api/3/search"
      container: "Jira"
      headers: [{ name: "Accept", template: "application/json" }]
    }
  ]
}
"""


class TestLoadFromString:
    """Tests for load_from_string function."""

    def test_full_configuration(self) -> None:
        config = load_from_string(_FULL, CredentialConfig)

        assert config.name == "integrations"
        assert config.sequence_tie_break == SequenceTieBreak.FIRST_DECLARED

        jira = config.get_container("Jira")
        assert jira is not None
        assert jira.parameter_names == ["User", "Pass"]
        assert jira.parameters[1].description == "API token"
        assert [m.name for m in jira.mappings] == ["admin", "svc"]
        assert jira.mappings[1].parameters == {"User": "user", "Pass": "pass"}

        literal = jira.headers[1]
        assert literal.allow_formula is False
        assert literal.sequence_number == 5

        endpoint = config.get_endpoint("jira-search")
        assert endpoint is not None
        assert endpoint.headers[0].name == "Accept"

    def test_secrets_and_hooks(self) -> None:
        config = load_from_string(_FULL, CredentialConfig)

        assert config.secrets is not None
        assert config.secrets.provider == SecretsProvider.VAULT
        assert config.secrets.vault_base_path == "teams/platform"
        assert config.secrets.cache_ttl_seconds == 60
        assert config.hooks.logging.level.value == "DEBUG"
        assert config.hooks.metrics is not None
        assert config.hooks.metrics.backend == MetricsBackend.PROMETHEUS
        assert config.hooks.audit is not None
        assert config.hooks.audit.audit_trail_path == "/var/log/cie/audit.jsonl"

    def test_minimal_configuration_defaults(self) -> None:
        config = load_from_string(
            """
            {
              name: "minimal"
              containers: [{ name: "GitHub" }]
            }
            """,
            CredentialConfig,
        )

        assert config.sequence_tie_break == SequenceTieBreak.FAIL
        assert config.endpoints == []
        assert config.secrets is None
        assert config.hooks.logging.logger_name == "cie.headers"
        assert config.containers[0].mappings == []

    def test_validation_runs_on_load(self) -> None:
        with pytest.raises(Exception):
            load_from_string(
                """
                {
                  name: "broken"
                  containers: [{ name: "GitHub" }]
                  endpoints: [{ name: "jira", url: "https://jira", container: "Jira" }]
                }
                """,
                CredentialConfig,
            )


class TestLoadFromFile:
    """Tests for load_from_file function."""

    def test_load_from_file(self, tmp_path: Path) -> None:
        config_file = tmp_path / "credentials.conf"
        config_file.write_text(_FULL)

        config = load_from_file(str(config_file), CredentialConfig)

        assert config.name == "integrations"
        assert len(config.containers) == 1

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(Exception):
            load_from_file(str(tmp_path / "missing.conf"), CredentialConfig)


class TestLoadFromEnv:
    """Tests for load_from_env function."""

    def test_secrets_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CIE_SECRETS_PROVIDER", "env")

        config = load_from_env("CIE_SECRETS_", SecretsConfig)

        assert config.provider == SecretsProvider.ENV
        assert config.env_prefix == "CIE_"
