"""HOCON configuration loader using dataconf.

Credential configuration is declarative: containers, mappings, and header
templates are described in HOCON files or strings and parsed into the
dataclass models of :mod:`credential_injection.core.config`.
"""

from typing import TypeVar, cast

import dataconf

T = TypeVar("T")


def load_from_file(path: str, config_class: type[T]) -> T:
    """Load configuration from a HOCON file.

    Args:
        path: Path to the HOCON configuration file
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from the file

    Example:
        >>> config = load_from_file("credentials.conf", CredentialConfig)
    """
    return cast(T, dataconf.file(path, config_class))


def load_from_string(hocon_str: str, config_class: type[T]) -> T:
    """Load configuration from a HOCON string.

    Args:
        hocon_str: HOCON configuration as a string
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from the string

    Example:
        >>> hocon = '''
        ... {
        ...   name: "integrations"
        ...   containers: [{ name: "GitHub" }]
        ... }
        ... '''
        >>> config = load_from_string(hocon, CredentialConfig)
    """
    return cast(T, dataconf.string(hocon_str, config_class))


def load_from_env(prefix: str, config_class: type[T]) -> T:
    """Load configuration from environment variables.

    Args:
        prefix: Prefix for environment variables (e.g., "CIE_SECRETS_")
        config_class: The configuration dataclass type to load into

    Returns:
        Instance of config_class populated with configuration from env vars

    Example:
        >>> # With CIE_SECRETS_PROVIDER=vault CIE_SECRETS_VAULT_URL=https://vault
        >>> config = load_from_env("CIE_SECRETS_", SecretsConfig)
    """
    return cast(T, dataconf.env(prefix, config_class))
