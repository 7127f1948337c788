"""Tests for RequestAugmenter.build_headers."""

from __future__ import annotations

import base64
from typing import Any
from unittest.mock import MagicMock

import pytest

from credential_injection.core.config.base import SequenceTieBreak
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.exceptions import (
    AmbiguousSequenceError,
    AugmentError,
    EvalFailedError,
    NoApplicableMappingError,
    UnresolvedReferenceError,
)
from credential_injection.core.resolution.principal import Principal
from credential_injection.core.secrets.base import SecretLookupResult, SecretReference, SecretStore
from credential_injection.core.secrets.providers import InMemorySecretStore
from credential_injection.runner.result import HeaderSet
from tests.factories import (
    make_augmenter,
    make_container,
    make_credential_config,
    make_endpoint,
    make_header,
    make_mapping,
    make_principal,
    make_store,
)


def _jira_config(**kwargs: Any) -> CredentialConfig:
    jira = make_container(
        "Jira",
        parameters=["User", "Pass"],
        mappings=[make_mapping("svc", "jira-user", 10, {"User": "user", "Pass": "pass"})],
        headers=[
            make_header(
                "Authorization",
                "{!'Basic ' & BASE64($Credential.Jira.User & \":\" & $Credential.Jira.Pass)}",
            )
        ],
    )
    return make_credential_config([jira], [make_endpoint("jira-api", "Jira")], **kwargs)


def _jira_store() -> InMemorySecretStore:
    return make_store({("Jira", "user"): "alice", ("Jira", "pass"): "s3cret"})


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


class TestRendering:
    def test_bearer_token(self) -> None:
        augmenter = make_augmenter()

        headers = augmenter.build_headers("github-api", make_principal())

        assert isinstance(headers, HeaderSet)
        assert headers.as_list() == [("Authorization", "Bearer gh-123")]
        assert headers.endpoint == "github-api"

    def test_literal_template_passes_through(self) -> None:
        container = make_container(headers=[make_header("X-Api-Version", "2022-11-28")])
        augmenter = make_augmenter(make_credential_config([container]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.get("X-Api-Version") == "2022-11-28"

    def test_client_id_concatenation(self) -> None:
        container = make_container(
            "C",
            parameters=["P"],
            mappings=[make_mapping(parameters={"P": "p"})],
            headers=[make_header("Client-ID", "{!'Client-ID ' & $Credential.C.P}")],
        )
        config = make_credential_config([container], [make_endpoint("api", "C")])
        augmenter = make_augmenter(config, make_store({("C", "p"): "abc123"}))

        headers = augmenter.build_headers("api", make_principal())

        assert headers.get("Client-ID") == "Client-ID abc123"

    def test_basic_auth_base64(self) -> None:
        augmenter = make_augmenter(_jira_config(), _jira_store())

        headers = augmenter.build_headers("jira-api", make_principal("alice", "jira-user"))

        expected = base64.b64encode(b"alice:s3cret").decode("ascii")
        assert expected == "YWxpY2U6czNjcmV0"
        assert headers.get("Authorization") == f"Basic {expected}"

    def test_formula_disabled_emits_template_verbatim(self) -> None:
        container = make_container(
            headers=[make_header("X-Raw", "{!$Credential.GitHub.Token}", allow_formula=False)]
        )
        augmenter = make_augmenter(make_credential_config([container]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.get("X-Raw") == "{!$Credential.GitHub.Token}"

    def test_idempotent(self) -> None:
        augmenter = make_augmenter(_jira_config(), _jira_store())
        principal = make_principal("alice", "jira-user")

        first = augmenter.build_headers("jira-api", principal)
        second = augmenter.build_headers("jira-api", principal)

        assert first == second
        assert [h.value.encode() for h in first] == [h.value.encode() for h in second]

    def test_repr_masks_values(self) -> None:
        headers = make_augmenter().build_headers("github-api", make_principal())

        assert "gh-123" not in repr(headers)
        assert "gh-123" not in repr(list(headers))


# ---------------------------------------------------------------------------
# Template selection
# ---------------------------------------------------------------------------


class TestTemplateSelection:
    @pytest.mark.parametrize("order", [(1, 2), (2, 1)])
    def test_lowest_sequence_wins_regardless_of_order(self, order: tuple[int, int]) -> None:
        templates = [make_header("X-Token", f"seq-{n}", sequence_number=n) for n in order]
        container = make_container(headers=templates)
        augmenter = make_augmenter(make_credential_config([container]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.as_list() == [("X-Token", "seq-1")]

    def test_tie_fails_by_default(self) -> None:
        container = make_container(
            headers=[make_header("X-Token", "a", 1), make_header("X-Token", "b", 1)]
        )
        augmenter = make_augmenter(make_credential_config([container]))

        with pytest.raises(AmbiguousSequenceError, match="X-Token") as exc_info:
            augmenter.build_headers("github-api", make_principal())

        assert exc_info.value.kind == "header"
        assert exc_info.value.sequence_number == 1

    def test_tie_first_declared(self) -> None:
        container = make_container(
            headers=[make_header("X-Token", "a", 1), make_header("X-Token", "b", 1)]
        )
        config = make_credential_config([container], sequence_tie_break=SequenceTieBreak.FIRST_DECLARED)
        augmenter = make_augmenter(config)

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.as_list() == [("X-Token", "a")]

    def test_header_names_compare_case_insensitively(self) -> None:
        container = make_container(headers=[make_header("Authorization", "container", 5)])
        endpoint = make_endpoint(headers=[make_header("authorization", "endpoint", 1)])
        augmenter = make_augmenter(make_credential_config([container], [endpoint]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.as_list() == [("authorization", "endpoint")]

    def test_endpoint_headers_precede_container_headers(self) -> None:
        container = make_container(
            headers=[make_header("Authorization"), make_header("Accept", "application/json")]
        )
        endpoint = make_endpoint(headers=[make_header("X-Trace", "on")])
        augmenter = make_augmenter(make_credential_config([container], [endpoint]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.names == ["X-Trace", "Authorization", "Accept"]

    def test_container_template_can_win_over_endpoint(self) -> None:
        container = make_container(headers=[make_header("Accept", "container", 1)])
        endpoint = make_endpoint(headers=[make_header("Accept", "endpoint", 9)])
        augmenter = make_augmenter(make_credential_config([container], [endpoint]))

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.as_list() == [("Accept", "container")]


# ---------------------------------------------------------------------------
# Mapping selection
# ---------------------------------------------------------------------------


class TestMappingSelection:
    def _config(self, tie_break: SequenceTieBreak = SequenceTieBreak.FAIL, admin_seq: int = 1) -> CredentialConfig:
        container = make_container(
            mappings=[
                make_mapping("user", "integration-user", 10, {"Token": "user-token"}),
                make_mapping("admin", "integration-admin", admin_seq, {"Token": "admin-token"}),
            ]
        )
        return make_credential_config([container], sequence_tie_break=tie_break)

    def _store(self) -> InMemorySecretStore:
        return make_store({("GitHub", "user-token"): "u", ("GitHub", "admin-token"): "a"})

    def test_lowest_held_mapping_wins(self) -> None:
        augmenter = make_augmenter(self._config(), self._store())

        headers = augmenter.build_headers("github-api", make_principal("bob", "integration-user", "integration-admin"))

        assert headers.get("Authorization") == "Bearer a"

    def test_unheld_mapping_is_skipped(self) -> None:
        augmenter = make_augmenter(self._config(), self._store())

        headers = augmenter.build_headers("github-api", make_principal("carol", "integration-user"))

        assert headers.get("Authorization") == "Bearer u"

    def test_mapping_tie_fails(self) -> None:
        augmenter = make_augmenter(self._config(admin_seq=10), self._store())
        principal = make_principal("bob", "integration-user", "integration-admin")

        with pytest.raises(AmbiguousSequenceError) as exc_info:
            augmenter.build_headers("github-api", principal)

        assert exc_info.value.target == "GitHub"
        assert exc_info.value.candidates == ["user", "admin"]

    def test_mapping_tie_first_declared(self) -> None:
        config = self._config(SequenceTieBreak.FIRST_DECLARED, admin_seq=10)
        augmenter = make_augmenter(config, self._store())

        headers = augmenter.build_headers("github-api", make_principal("bob", "integration-user", "integration-admin"))

        assert headers.get("Authorization") == "Bearer u"

    def test_tie_with_unheld_mapping_is_not_ambiguous(self) -> None:
        augmenter = make_augmenter(self._config(admin_seq=10), self._store())

        headers = augmenter.build_headers("github-api", make_principal("carol", "integration-user"))

        assert headers.get("Authorization") == "Bearer u"

    def test_permission_checker_is_consulted(self) -> None:
        checker = MagicMock()
        checker.holds.side_effect = lambda principal, ps: ps == "integration-admin"
        augmenter = make_augmenter(self._config(), self._store(), permission_checker=checker)

        headers = augmenter.build_headers("github-api", Principal("svc"))

        assert headers.get("Authorization") == "Bearer a"
        checker.holds.assert_any_call(Principal("svc"), "integration-admin")


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    def test_no_applicable_mapping(self) -> None:
        hooks = MagicMock()
        augmenter = make_augmenter(hooks=hooks)
        result: list[HeaderSet] = []

        with pytest.raises(NoApplicableMappingError) as exc_info:
            result.append(augmenter.build_headers("github-api", make_principal("mallory", "guest")))

        assert result == []
        assert exc_info.value.container == "GitHub"
        assert exc_info.value.principal == "mallory"
        hooks.on_build_failure.assert_called_once()
        hooks.after_build.assert_not_called()

    def test_no_mapping_for_referenced_container(self) -> None:
        jira = make_container(
            "Jira",
            parameters=["User"],
            mappings=[make_mapping("svc", "jira-user", 1, {"User": "user"})],
            headers=[],
        )
        github = make_container(headers=[make_header("X-Jira-User", "{!$Credential.Jira.User}")])
        augmenter = make_augmenter(
            make_credential_config([github, jira]),
            make_store({("Jira", "user"): "alice"}),
        )

        with pytest.raises(NoApplicableMappingError, match="Jira"):
            augmenter.build_headers("github-api", make_principal())

        headers = augmenter.build_headers("github-api", make_principal("alice", "integration-user", "jira-user"))
        assert headers.get("X-Jira-User") == "alice"

    def test_endpoint_container_requires_mapping_even_without_references(self) -> None:
        container = make_container(headers=[make_header("Accept", "application/json")])
        augmenter = make_augmenter(make_credential_config([container]))

        with pytest.raises(NoApplicableMappingError):
            augmenter.build_headers("github-api", make_principal("mallory", "guest"))

    def test_missing_secret(self) -> None:
        augmenter = make_augmenter(store=make_store({}))

        with pytest.raises(EvalFailedError) as exc_info:
            augmenter.build_headers("github-api", make_principal())

        error = exc_info.value
        assert error.header_name == "Authorization"
        assert isinstance(error.__cause__, UnresolvedReferenceError)
        assert "GitHub" in str(error)

    def test_parameter_not_bound_by_winning_mapping(self) -> None:
        container = make_container(mappings=[make_mapping(parameters={})])
        augmenter = make_augmenter(make_credential_config([container]))

        with pytest.raises(EvalFailedError, match="not bound by mapping 'default'"):
            augmenter.build_headers("github-api", make_principal())

    def test_unknown_container_reference(self) -> None:
        container = make_container(headers=[make_header("X-Other", "{!$Credential.Nope.Token}")])
        augmenter = make_augmenter(make_credential_config([container]))

        with pytest.raises(EvalFailedError, match="X-Other"):
            augmenter.build_headers("github-api", make_principal())

    def test_error_does_not_leak_secret(self) -> None:
        container = make_container(headers=[make_header("X-Bad", "{!BASE64($Credential.GitHub.Token) & SHA256('x')}")])
        augmenter = make_augmenter(make_credential_config([container]))

        with pytest.raises(EvalFailedError) as exc_info:
            augmenter.build_headers("github-api", make_principal())

        assert "gh-123" not in str(exc_info.value)

    def test_all_failures_are_augment_errors(self) -> None:
        augmenter = make_augmenter(store=make_store({}))

        with pytest.raises(AugmentError):
            augmenter.build_headers("github-api", make_principal())

    def test_unknown_endpoint(self) -> None:
        with pytest.raises(KeyError, match="nope"):
            make_augmenter().build_headers("nope", make_principal())


# ---------------------------------------------------------------------------
# Secret access
# ---------------------------------------------------------------------------


class TestSecretAccess:
    def test_only_referenced_parameters_are_fetched(self) -> None:
        container = make_container(
            parameters=["Token", "Unused"],
            mappings=[make_mapping(parameters={"Token": "token", "Unused": "unused"})],
        )
        store = MagicMock(spec=SecretStore)
        store.lookup.side_effect = lambda c, k: SecretLookupResult.success(SecretReference(c, k), "v")
        augmenter = make_augmenter(make_credential_config([container]), store)

        augmenter.build_headers("github-api", make_principal())

        store.lookup.assert_called_once_with("GitHub", "token")

    def test_store_error_surfaces_as_eval_failure(self) -> None:
        store = MagicMock(spec=SecretStore)
        store.store_name = "broken"
        store.lookup.side_effect = lambda c, k: SecretLookupResult.failed(SecretReference(c, k), "timeout")
        augmenter = make_augmenter(store=store)

        with pytest.raises(EvalFailedError, match="timeout"):
            augmenter.build_headers("github-api", make_principal())

    def test_literal_only_headers_fetch_nothing(self) -> None:
        container = make_container(headers=[make_header("Accept", "application/json")])
        store = MagicMock(spec=SecretStore)
        augmenter = make_augmenter(make_credential_config([container]), store)

        augmenter.build_headers("github-api", make_principal())

        store.lookup.assert_not_called()


# ---------------------------------------------------------------------------
# Endpoints and hooks
# ---------------------------------------------------------------------------


class TestEndpointsAndHooks:
    def test_accepts_endpoint_config(self) -> None:
        augmenter = make_augmenter()
        adhoc = make_endpoint("adhoc", headers=[make_header("X-Adhoc", "{!UPPER('yes')}")])

        headers = augmenter.build_headers(adhoc, make_principal())

        assert headers.endpoint == "adhoc"
        assert headers.as_list() == [("X-Adhoc", "YES"), ("Authorization", "Bearer gh-123")]

    def test_endpoint_config_with_unknown_container(self) -> None:
        augmenter = make_augmenter()

        with pytest.raises(KeyError, match="Missing"):
            augmenter.build_headers(make_endpoint("adhoc", "Missing"), make_principal())

    def test_hooks_receive_lifecycle_events(self) -> None:
        hooks = MagicMock()
        clock = MagicMock(side_effect=[10.0, 10.25])
        augmenter = make_augmenter(hooks=hooks, clock=clock)
        principal = make_principal()

        headers = augmenter.build_headers("github-api", principal)

        endpoint = augmenter.snapshot.endpoint("github-api")
        hooks.before_build.assert_called_once_with(endpoint, principal)
        hooks.after_build.assert_called_once_with(endpoint, principal, headers, 250)
        hooks.on_build_failure.assert_not_called()

    def test_failing_hook_does_not_break_build(self) -> None:
        hooks = MagicMock()
        hooks.before_build.side_effect = RuntimeError("hook boom")
        hooks.after_build.side_effect = RuntimeError("hook boom")
        augmenter = make_augmenter(hooks=hooks)

        headers = augmenter.build_headers("github-api", make_principal())

        assert headers.get("Authorization") == "Bearer gh-123"

    def test_from_config(self) -> None:
        from credential_injection.runner.augmenter import RequestAugmenter

        augmenter = RequestAugmenter.from_config(make_credential_config(), make_store())

        assert augmenter.build_headers("github-api", make_principal()).get("authorization") == "Bearer gh-123"
