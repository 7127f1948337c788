"""Tests for secret store models."""

from __future__ import annotations

from credential_injection.core.secrets.base import (
    SecretLookupResult,
    SecretLookupStatus,
    SecretReference,
)


class TestSecretReference:
    def test_str(self) -> None:
        assert str(SecretReference("GitHub", "token")) == "GitHub/token"

    def test_hashable(self) -> None:
        assert len({SecretReference("A", "x"), SecretReference("A", "x")}) == 1


class TestSecretLookupResult:
    def test_success(self) -> None:
        ref = SecretReference("GitHub", "token")

        result = SecretLookupResult.success(ref, "gh-123")

        assert result.found
        assert result.status == SecretLookupStatus.SUCCESS
        assert result.error is None

    def test_not_found(self) -> None:
        result = SecretLookupResult.not_found(SecretReference("GitHub", "token"), "missing")

        assert not result.found
        assert result.status == SecretLookupStatus.NOT_FOUND
        assert result.value is None
        assert result.error == "missing"

    def test_failed(self) -> None:
        result = SecretLookupResult.failed(SecretReference("GitHub", "token"), "boom")

        assert result.status == SecretLookupStatus.ERROR
        assert not result.found

    def test_repr_masks_value(self) -> None:
        result = SecretLookupResult.success(SecretReference("GitHub", "token"), "gh-123")

        text = repr(result)

        assert "gh-123" not in text
        assert "value=***" in text

    def test_repr_without_value(self) -> None:
        result = SecretLookupResult.not_found(SecretReference("GitHub", "token"), "missing")

        assert "value=None" in repr(result)
