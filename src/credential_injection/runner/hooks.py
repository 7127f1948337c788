"""Header building lifecycle hooks protocol and infrastructure."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.resolution.principal import Principal
from credential_injection.runner.result import HeaderSet

logger = logging.getLogger(__name__)


class AugmentHooks(Protocol):
    """Protocol defining lifecycle callbacks for header building.

    Implementations receive notifications around every
    ``RequestAugmenter.build_headers`` call. Hooks may be called from
    several threads at once. This protocol is NOT ``@runtime_checkable``;
    use structural typing or ``hasattr`` checks.
    """

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        """Called before templates are selected."""
        ...

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        """Called after a complete header set was built."""
        ...

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        """Called when header building raises."""
        ...


class NoOpHooks:
    """Hooks implementation that does nothing.

    Useful as a default or placeholder.
    """

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        pass

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        pass

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        pass


class CompositeHooks:
    """Broadcasts lifecycle events to multiple hooks implementations.

    Exceptions raised by individual hooks are caught and logged so that
    one misbehaving hook does not break header building.
    """

    def __init__(self, *hooks: AugmentHooks) -> None:
        self._hooks: tuple[AugmentHooks, ...] = hooks

    @property
    def hooks(self) -> tuple[AugmentHooks, ...]:
        return self._hooks

    def _call_all(self, method: str, *args: Any) -> None:
        """Invoke *method* on every registered hook, swallowing errors."""
        for hook in self._hooks:
            try:
                getattr(hook, method)(*args)
            except Exception:
                logger.warning(
                    "Hook %s.%s raised an exception",
                    type(hook).__name__,
                    method,
                    exc_info=True,
                )

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        self._call_all("before_build", endpoint, principal)

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        self._call_all("after_build", endpoint, principal, headers, duration_ms)

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        self._call_all("on_build_failure", endpoint, principal, error)
