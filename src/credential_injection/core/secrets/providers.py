"""Built-in secret store implementations."""

from __future__ import annotations

import json
import os
import re
import threading
from collections.abc import Mapping
from typing import Any

from credential_injection.core.secrets.base import (
    SecretLookupResult,
    SecretReference,
    SecretStore,
)

_ENV_UNSAFE = re.compile(r"[^A-Za-z0-9]")


class InMemorySecretStore(SecretStore):
    """Hold secrets in a process-local dictionary.

    Intended for tests and for embedding the engine behind a caller-owned
    store. Writes are guarded by a lock; values are never exposed through
    ``repr``.

    Args:
        secrets: Initial ``{(container, key): value}`` entries.
    """

    def __init__(self, secrets: Mapping[tuple[str, str], str] | None = None) -> None:
        self._lock = threading.Lock()
        self._secrets: dict[tuple[str, str], str] = dict(secrets or {})

    @property
    def store_name(self) -> str:
        return "memory"

    def put(self, container: str, key: str, value: str) -> None:
        """Store or replace a secret value."""
        with self._lock:
            self._secrets[(container, key)] = value

    def remove(self, container: str, key: str) -> None:
        """Remove a secret if present."""
        with self._lock:
            self._secrets.pop((container, key), None)

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        reference = SecretReference(container, key)
        with self._lock:
            value = self._secrets.get((container, key))
        if value is None:
            return SecretLookupResult.not_found(reference, f"No secret stored for '{reference}'")
        return SecretLookupResult.success(reference, value)

    def __repr__(self) -> str:
        return f"InMemorySecretStore(entries={len(self._secrets)})"


class EnvSecretStore(SecretStore):
    """Look up secrets from environment variables.

    The variable name is ``PREFIX + CONTAINER + "_" + KEY`` upper-cased,
    with every non-alphanumeric character replaced by ``_``. For example
    container ``GitHub`` and key ``ops-token`` with the default prefix
    read ``CIE_GITHUB_OPS_TOKEN``.

    Args:
        prefix: Variable name prefix. Defaults to ``"CIE_"``.
        environ: Mapping to read from. Defaults to ``os.environ``.
    """

    def __init__(self, prefix: str = "CIE_", environ: Mapping[str, str] | None = None) -> None:
        self._prefix = prefix
        self._environ = environ

    @property
    def store_name(self) -> str:
        return "env"

    def variable_name(self, container: str, key: str) -> str:
        """Return the environment variable consulted for *container*/*key*."""
        suffix = _ENV_UNSAFE.sub("_", f"{container}_{key}").upper()
        return f"{self._prefix}{suffix}"

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        reference = SecretReference(container, key)
        environ = self._environ if self._environ is not None else os.environ
        name = self.variable_name(container, key)
        value = environ.get(name)
        if value is None:
            return SecretLookupResult.not_found(reference, f"Environment variable '{name}' not set")
        return SecretLookupResult.success(reference, value)


class AwsSecretStore(SecretStore):
    """Look up secrets from AWS Secrets Manager.

    Each container is one secret whose ``SecretString`` is a JSON object
    keyed by secret key. The SecretId is ``secret_prefix + container``.

    Requires ``boto3`` to be installed. The client is created lazily
    on the first call to :meth:`lookup`.

    Args:
        region_name: AWS region. Defaults to boto3's default region.
        secret_prefix: Prefix prepended to the container name.
    """

    def __init__(self, region_name: str | None = None, secret_prefix: str = "") -> None:
        self._region = region_name
        self._prefix = secret_prefix
        self._client: Any = None

    @property
    def store_name(self) -> str:
        return "aws"

    def _get_client(self) -> Any:
        if self._client is None:
            import boto3  # type: ignore[import-untyped]

            self._client = boto3.client("secretsmanager", region_name=self._region)
        return self._client

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        reference = SecretReference(container, key)
        secret_id = f"{self._prefix}{container}"
        try:
            response = self._get_client().get_secret_value(SecretId=secret_id)
        except Exception as exc:
            code = getattr(exc, "response", {}).get("Error", {}).get("Code")
            if code == "ResourceNotFoundException":
                return SecretLookupResult.not_found(reference, f"Secret '{secret_id}' not found")
            return SecretLookupResult.failed(reference, str(exc))

        try:
            data = json.loads(response.get("SecretString") or "{}")
        except ValueError:
            return SecretLookupResult.failed(reference, f"Secret '{secret_id}' is not a JSON object")
        if not isinstance(data, dict):
            return SecretLookupResult.failed(reference, f"Secret '{secret_id}' is not a JSON object")

        value = data.get(key)
        if value is None:
            return SecretLookupResult.not_found(reference, f"Key '{key}' not found in secret '{secret_id}'")
        return SecretLookupResult.success(reference, str(value))


class VaultSecretStore(SecretStore):
    """Look up secrets from HashiCorp Vault (KV v2 engine).

    Each container is stored at ``base_path/container``; the secret key
    selects a field of that entry.

    Requires ``hvac`` to be installed. The client is created lazily
    on the first call to :meth:`lookup`.

    Args:
        url: Vault server URL.
        token: Vault token. Defaults to ``VAULT_TOKEN`` environment variable.
        mount_point: KV v2 mount point. Defaults to ``"secret"``.
        base_path: Path prefix for container entries. Defaults to ``"credentials"``.
    """

    def __init__(
        self,
        url: str,
        token: str | None = None,
        mount_point: str = "secret",
        base_path: str = "credentials",
    ) -> None:
        if not url:
            raise ValueError("url is required")
        self._url = url
        self._token = token or os.environ.get("VAULT_TOKEN")
        self._mount_point = mount_point
        self._base_path = base_path.strip("/")
        self._client: Any = None

    @property
    def store_name(self) -> str:
        return "vault"

    def _get_client(self) -> Any:
        if self._client is None:
            import hvac  # type: ignore[import-untyped]

            self._client = hvac.Client(url=self._url, token=self._token)
        return self._client

    def _path_for(self, container: str) -> str:
        return f"{self._base_path}/{container}" if self._base_path else container

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        reference = SecretReference(container, key)
        path = self._path_for(container)
        try:
            response = self._get_client().secrets.kv.v2.read_secret_version(
                path=path, mount_point=self._mount_point
            )
        except Exception as exc:
            if type(exc).__name__ == "InvalidPath":
                return SecretLookupResult.not_found(reference, f"Path '{path}' not found")
            return SecretLookupResult.failed(reference, str(exc))

        data = response.get("data", {}).get("data", {})
        value = data.get(key)
        if value is None:
            return SecretLookupResult.not_found(reference, f"Field '{key}' not found in secret '{path}'")
        return SecretLookupResult.success(reference, str(value))
