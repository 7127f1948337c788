"""Immutable, compiled view of a credential configuration."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType

from credential_injection.core.config.base import SequenceTieBreak
from credential_injection.core.config.container import AuthContainerConfig, HeaderTemplateConfig
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.config.loader import load_from_file, load_from_string
from credential_injection.core.exceptions import ParseError, TemplateRegistrationError
from credential_injection.core.template.cache import TemplateCache
from credential_injection.core.template.compiler import CompiledTemplate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundTemplate:
    """A compiled header template together with its owner.

    Args:
        owner: ``"endpoint:<name>"`` or ``"container:<name>"``.
        config: The declared template.
        compiled: Its compiled form.
    """

    owner: str
    config: HeaderTemplateConfig
    compiled: CompiledTemplate

    @property
    def header_name(self) -> str:
        return self.config.name

    @property
    def sequence_number(self) -> int:
        return self.config.sequence_number


class ConfigurationSnapshot:
    """Compiled, read-only configuration passed to the request augmenter.

    Every template is compiled when the snapshot is built; a template
    that fails to compile aborts the build, so no snapshot ever holds a
    broken template. The source configuration is deep-copied and never
    mutated afterwards, making snapshots safe to share between threads.

    Use :meth:`from_config`, :meth:`from_file`, or :meth:`from_string`
    instead of the constructor.
    """

    def __init__(
        self,
        config: CredentialConfig,
        container_templates: dict[str, tuple[BoundTemplate, ...]],
        endpoint_templates: dict[str, tuple[BoundTemplate, ...]],
        cache: TemplateCache,
    ) -> None:
        self._config = config
        self._containers = MappingProxyType({c.name: c for c in config.containers})
        self._endpoints = MappingProxyType({e.name: e for e in config.endpoints})
        self._container_templates = MappingProxyType(dict(container_templates))
        self._endpoint_templates = MappingProxyType(dict(endpoint_templates))
        self._cache = cache

    @classmethod
    def from_config(cls, config: CredentialConfig, cache: TemplateCache | None = None) -> ConfigurationSnapshot:
        """Compile *config* into a snapshot.

        Args:
            config: Source configuration; copied, not retained.
            cache: Template cache to compile through. A private cache is
                used when omitted.

        Raises:
            TemplateRegistrationError: If any template fails to compile.
        """
        frozen = copy.deepcopy(config)
        templates = cache if cache is not None else TemplateCache()

        container_templates = {
            c.name: _bind(f"container:{c.name}", c.headers, templates) for c in frozen.containers
        }
        endpoint_templates = {
            e.name: _bind(f"endpoint:{e.name}", e.headers, templates) for e in frozen.endpoints
        }
        logger.info(
            "Compiled configuration '%s': %d containers, %d endpoints, %d templates",
            frozen.name,
            len(container_templates),
            len(endpoint_templates),
            sum(len(t) for t in container_templates.values()) + sum(len(t) for t in endpoint_templates.values()),
        )
        return cls(frozen, container_templates, endpoint_templates, templates)

    @classmethod
    def from_file(cls, path: str | Path, cache: TemplateCache | None = None) -> ConfigurationSnapshot:
        """Load a HOCON file and compile it."""
        return cls.from_config(load_from_file(str(path), CredentialConfig), cache=cache)

    @classmethod
    def from_string(cls, hocon_str: str, cache: TemplateCache | None = None) -> ConfigurationSnapshot:
        """Parse a HOCON string and compile it."""
        return cls.from_config(load_from_string(hocon_str, CredentialConfig), cache=cache)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def sequence_tie_break(self) -> SequenceTieBreak:
        return self._config.sequence_tie_break

    @property
    def endpoint_names(self) -> list[str]:
        return list(self._endpoints)

    def has_container(self, name: str) -> bool:
        return name in self._containers

    def container(self, name: str) -> AuthContainerConfig:
        """Return the container named *name*.

        Raises:
            KeyError: If no such container exists.
        """
        try:
            return self._containers[name]
        except KeyError:
            raise KeyError(f"Unknown container '{name}'") from None

    def endpoint(self, name: str) -> EndpointConfig:
        """Return the endpoint named *name*.

        Raises:
            KeyError: If no such endpoint exists.
        """
        try:
            return self._endpoints[name]
        except KeyError:
            raise KeyError(f"Unknown endpoint '{name}'") from None

    def compiled(self, template: HeaderTemplateConfig) -> CompiledTemplate:
        """Return the compiled form of *template*.

        Templates already in the snapshot are served from the template
        cache without recompiling.

        Raises:
            ParseError: If *template* is not part of the snapshot and fails
                to compile.
        """
        return self._cache.get(template.template, template.allow_formula)

    def templates_for(self, endpoint: EndpointConfig) -> tuple[BoundTemplate, ...]:
        """Return the templates applicable to *endpoint* in declaration order.

        The endpoint's own templates come first, then its container's.
        Endpoints that are not part of the snapshot are compiled through
        the snapshot's template cache.

        Raises:
            KeyError: If the endpoint's container is unknown.
            TemplateRegistrationError: If an ad-hoc endpoint template fails
                to compile.
        """
        self.container(endpoint.container)
        own = self._endpoint_templates.get(endpoint.name) if self._endpoints.get(endpoint.name) is endpoint else None
        if own is None:
            own = _bind(f"endpoint:{endpoint.name}", endpoint.headers, self._cache)
        return own + self._container_templates[endpoint.container]

    def __repr__(self) -> str:
        return (
            f"ConfigurationSnapshot(name={self.name!r}, containers={list(self._containers)!r}, "
            f"endpoints={list(self._endpoints)!r})"
        )


def _bind(owner: str, headers: list[HeaderTemplateConfig], cache: TemplateCache) -> tuple[BoundTemplate, ...]:
    bound: list[BoundTemplate] = []
    for header in headers:
        try:
            compiled = cache.get(header.template, header.allow_formula)
        except ParseError as exc:
            logger.error("Rejected header '%s' on %s: %s", header.name, owner, exc)
            raise TemplateRegistrationError(owner, header.name, exc) from exc
        bound.append(BoundTemplate(owner, header, compiled))
    return tuple(bound)
