"""Request augmenter: builds the credential headers for an outbound request."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from typing import Any

from credential_injection.core.config.base import SequenceTieBreak
from credential_injection.core.config.container import AuthContainerConfig, PermissionSetMappingConfig
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.exceptions import EvalError, EvalFailedError, NoApplicableMappingError
from credential_injection.core.formula.evaluator import FormulaEvaluator
from credential_injection.core.resolution.context import ContainerBinding, ResolutionContext
from credential_injection.core.resolution.principal import PermissionChecker, Principal, StaticPermissionChecker
from credential_injection.core.secrets.base import SecretStore
from credential_injection.core.sequence import group_by_header, pick_lowest
from credential_injection.core.utils import safe_call
from credential_injection.runner.hooks import AugmentHooks, NoOpHooks
from credential_injection.runner.result import Header, HeaderSet
from credential_injection.runner.snapshot import BoundTemplate, ConfigurationSnapshot

logger = logging.getLogger(__name__)


class RequestAugmenter:
    """Compute the headers to attach to a request for an endpoint.

    For every ``build_headers`` call the augmenter selects one template
    per header name, binds each required auth container to the mapping
    that wins for the principal, fetches the referenced secrets, and
    renders the templates. Either every selected header is produced or
    an :class:`~credential_injection.core.exceptions.AugmentError` is
    raised; a partial header set is never returned.

    The augmenter holds no per-request state and may be shared between
    threads.

    Args:
        snapshot: Compiled configuration.
        secret_store: Store holding the parameter values.
        permission_checker: Answers permission-set questions (default:
            ``StaticPermissionChecker``).
        hooks: Lifecycle hooks (default: ``NoOpHooks``).
        evaluator: Formula evaluator (default: builtin functions and the
            ``$Credential`` namespace).
        clock: Injectable monotonic clock for testing.
    """

    def __init__(
        self,
        snapshot: ConfigurationSnapshot,
        secret_store: SecretStore,
        permission_checker: PermissionChecker | None = None,
        hooks: AugmentHooks | None = None,
        evaluator: FormulaEvaluator | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._snapshot = snapshot
        self._store = secret_store
        self._checker: PermissionChecker = permission_checker or StaticPermissionChecker()
        self._hooks: AugmentHooks = hooks or NoOpHooks()
        self._evaluator = evaluator or FormulaEvaluator()
        self._clock = clock or time.monotonic

    @classmethod
    def from_config(cls, config: CredentialConfig, secret_store: SecretStore, **kwargs: Any) -> RequestAugmenter:
        """Compile *config* and create an augmenter for it.

        Args:
            config: Credential configuration.
            secret_store: Store holding the parameter values.
            **kwargs: Forwarded to the constructor.

        Raises:
            TemplateRegistrationError: If a template fails to compile.
        """
        return cls(ConfigurationSnapshot.from_config(config), secret_store, **kwargs)

    @property
    def snapshot(self) -> ConfigurationSnapshot:
        return self._snapshot

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def build_headers(self, endpoint: str | EndpointConfig, principal: Principal) -> HeaderSet:
        """Build the headers for a request to *endpoint* made by *principal*.

        Args:
            endpoint: Endpoint name, or an endpoint definition not
                registered in the snapshot.
            principal: The acting principal.

        Returns:
            The computed headers in template-declaration order.

        Raises:
            KeyError: If the endpoint or its container is unknown.
            AmbiguousSequenceError: If two candidates tie under the
                ``fail`` tie-break policy.
            NoApplicableMappingError: If the principal holds no permission
                set granting a mapping for a required container.
            EvalFailedError: If a template fails to evaluate.
        """
        endpoint_config = self._snapshot.endpoint(endpoint) if isinstance(endpoint, str) else endpoint
        self._call_hook("before_build", endpoint_config, principal)
        start = self._clock()

        try:
            selected = self.select_templates(endpoint_config)
            context = self.build_context(endpoint_config, selected, principal)
            headers = [Header(t.header_name, self._render(t, context)) for t in selected]
        except Exception as exc:
            self._call_hook("on_build_failure", endpoint_config, principal, exc)
            raise

        result = HeaderSet(endpoint_config.name, headers)
        duration_ms = int((self._clock() - start) * 1000)
        self._call_hook("after_build", endpoint_config, principal, result, duration_ms)
        return result

    def select_templates(self, endpoint: EndpointConfig) -> list[BoundTemplate]:
        """Return one winning template per header name, in declaration order.

        Raises:
            AmbiguousSequenceError: On a tie under the ``fail`` policy.
        """
        candidates = self._snapshot.templates_for(endpoint)
        winners = {
            id(pick_lowest(
                group,
                lambda t: t.sequence_number,
                lambda t: t.owner,
                fail_on_tie=self._fail_on_tie,
                kind="header",
                target=group[0].header_name,
            ))
            for group in group_by_header(candidates, lambda t: t.header_name).values()
        }
        return [t for t in candidates if id(t) in winners]

    def build_context(
        self,
        endpoint: EndpointConfig,
        selected: Sequence[BoundTemplate],
        principal: Principal,
    ) -> ResolutionContext:
        """Bind every required container and prefetch referenced secrets.

        Containers referenced by a template but missing from the
        configuration are left unbound; evaluating such a template fails
        with an unresolved reference.

        Raises:
            NoApplicableMappingError: If the principal holds no permission
                set granting a mapping for a required container.
            AmbiguousSequenceError: On a mapping tie under the ``fail`` policy.
        """
        needed: dict[str, dict[str, None]] = {endpoint.container: {}}
        for template in selected:
            for container, parameter in template.compiled.credential_references():
                needed.setdefault(container, {})[parameter] = None

        bindings: dict[str, ContainerBinding] = {}
        for name, parameters in needed.items():
            if not self._snapshot.has_container(name):
                logger.debug("Template references unknown container '%s'", name)
                continue
            container = self._snapshot.container(name)
            mapping = self._winning_mapping(container, principal)
            bindings[name] = self._bind(container, mapping, list(parameters))
        return ResolutionContext(bindings, principal=principal.name)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @property
    def _fail_on_tie(self) -> bool:
        return self._snapshot.sequence_tie_break == SequenceTieBreak.FAIL

    def _winning_mapping(self, container: AuthContainerConfig, principal: Principal) -> PermissionSetMappingConfig:
        held = [m for m in container.mappings if self._checker.holds(principal, m.permission_set)]
        if not held:
            raise NoApplicableMappingError(container.name, principal.name)
        mapping = pick_lowest(
            held,
            lambda m: m.sequence_number,
            lambda m: m.name,
            fail_on_tie=self._fail_on_tie,
            kind="permission-set mapping",
            target=container.name,
        )
        logger.debug(
            "Container '%s' bound to mapping '%s' (sequence %d) for '%s'",
            container.name,
            mapping.name,
            mapping.sequence_number,
            principal.name,
        )
        return mapping

    def _bind(
        self,
        container: AuthContainerConfig,
        mapping: PermissionSetMappingConfig,
        parameters: list[str],
    ) -> ContainerBinding:
        values: dict[str, str] = {}
        missing: dict[str, str] = {}
        for parameter in parameters:
            key = mapping.parameters.get(parameter)
            if key is None:
                missing[parameter] = f"not bound by mapping '{mapping.name}'"
                continue
            result = self._store.lookup(container.name, key)
            if result.found and result.value is not None:
                values[parameter] = result.value
            else:
                missing[parameter] = result.error or f"secret lookup {result.status.value}"
                logger.warning(
                    "Secret for '%s.%s' unavailable from store '%s': %s",
                    container.name,
                    parameter,
                    self._store.store_name,
                    result.status.value,
                )
        return ContainerBinding(
            container=container.name,
            mapping=mapping.name,
            sequence_number=mapping.sequence_number,
            values=values,
            missing=missing,
        )

    def _render(self, template: BoundTemplate, context: ResolutionContext) -> str:
        try:
            return template.compiled.render(context, self._evaluator)
        except EvalError as exc:
            raise EvalFailedError(template.header_name, exc) from exc

    def _call_hook(self, method: str, *args: Any) -> None:
        """Invoke a hook method defensively; errors are logged, not raised."""
        safe_call(
            lambda: getattr(self._hooks, method)(*args),
            logger,
            "Hook %s.%s raised an exception",
            type(self._hooks).__name__,
            method,
        )


