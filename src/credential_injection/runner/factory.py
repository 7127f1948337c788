"""Wire a credential configuration into a ready-to-use augmenter.

Translates the ``secrets`` and ``hooks`` sections of a
:class:`~credential_injection.core.config.credential.CredentialConfig`
into a secret store, an audit sink, a meter registry, and lifecycle hooks.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from credential_injection.core.audit.sinks import AuditSink, CompositeAuditSink, FileAuditSink, LoggingAuditSink
from credential_injection.core.audit.types import AuditAction, AuditEvent, AuditStatus
from credential_injection.core.config.base import MetricsBackend, SecretsProvider
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.config.hooks import AuditConfig, HooksConfig, MetricsConfig
from credential_injection.core.config.secrets import SecretsConfig
from credential_injection.core.exceptions import TemplateRegistrationError
from credential_injection.core.metrics.exporters import PrometheusRegistry
from credential_injection.core.metrics.registry import InMemoryRegistry, MeterRegistry
from credential_injection.core.resolution.principal import PermissionChecker
from credential_injection.core.secrets.audit import AuditedSecretStore
from credential_injection.core.secrets.base import SecretStore
from credential_injection.core.secrets.providers import AwsSecretStore, EnvSecretStore, VaultSecretStore
from credential_injection.core.secrets.resolver import CachedSecretStore
from credential_injection.core.utils import safe_call
from credential_injection.runner.audit_hooks import AuditHooks
from credential_injection.runner.augmenter import RequestAugmenter
from credential_injection.runner.hooks import AugmentHooks, CompositeHooks
from credential_injection.runner.hooks_builtin import LoggingHooks, MetricsHooks
from credential_injection.runner.snapshot import ConfigurationSnapshot

logger = logging.getLogger(__name__)


def build_secret_store(
    secrets: SecretsConfig | None = None,
    sink: AuditSink | None = None,
    environ: Mapping[str, str] | None = None,
) -> SecretStore:
    """Create the secret store described by *secrets*.

    The backend is wrapped in a :class:`CachedSecretStore` unless the TTL
    is zero, and in an :class:`AuditedSecretStore` when *sink* is given.

    Args:
        secrets: Store settings (default: environment variables).
        sink: Audit sink for secret-access events.
        environ: Environment mapping for the ``env`` provider; defaults
            to ``os.environ``.
    """
    settings = secrets or SecretsConfig()
    store: SecretStore
    if settings.provider == SecretsProvider.VAULT:
        store = VaultSecretStore(
            url=settings.vault_url or "",
            token=settings.vault_token,
            mount_point=settings.vault_mount_point,
            base_path=settings.vault_base_path,
        )
    elif settings.provider == SecretsProvider.AWS_SECRETS_MANAGER:
        store = AwsSecretStore(region_name=settings.aws_region, secret_prefix=settings.aws_secret_prefix)
    else:
        store = EnvSecretStore(prefix=settings.env_prefix, environ=environ)

    if settings.cache_ttl_seconds > 0:
        store = CachedSecretStore(store, ttl_seconds=settings.cache_ttl_seconds)
    if sink is not None:
        store = AuditedSecretStore(store, sink)
    logger.debug("Secret store: %s (cache ttl %ds)", settings.provider.value, settings.cache_ttl_seconds)
    return store


def build_audit_sink(audit: AuditConfig | None) -> AuditSink | None:
    """Return the audit sink for *audit*, or ``None`` when auditing is off."""
    if audit is None or not audit.enabled:
        return None
    if audit.audit_trail_path:
        return CompositeAuditSink(LoggingAuditSink(), FileAuditSink(audit.audit_trail_path))
    return LoggingAuditSink()


def build_registry(metrics: MetricsConfig | None) -> MeterRegistry | None:
    """Return the meter registry for *metrics*, or ``None`` when metrics are off.

    Raises:
        ImportError: If the Prometheus backend is selected without
            ``prometheus_client`` installed.
    """
    if metrics is None or not metrics.enabled:
        return None
    if metrics.backend == MetricsBackend.PROMETHEUS:
        return PrometheusRegistry()
    return InMemoryRegistry()


def build_hooks(
    config: HooksConfig,
    sink: AuditSink | None = None,
    registry: MeterRegistry | None = None,
) -> AugmentHooks:
    """Combine the built-in hooks enabled by *config*."""
    hooks: list[AugmentHooks] = [LoggingHooks(logging.getLogger(config.logging.logger_name))]
    if registry is not None:
        hooks.append(MetricsHooks(registry))
    if sink is not None:
        hooks.append(AuditHooks(sink))
    return CompositeHooks(*hooks)


def build_augmenter(
    config: CredentialConfig,
    secret_store: SecretStore | None = None,
    permission_checker: PermissionChecker | None = None,
    registry: MeterRegistry | None = None,
    environ: Mapping[str, str] | None = None,
) -> RequestAugmenter:
    """Compile *config* and wire an augmenter from its own settings.

    Args:
        config: Credential configuration.
        secret_store: Overrides the store described by ``config.secrets``.
        permission_checker: Permission checker (default: static).
        registry: Overrides the registry described by ``config.hooks.metrics``.
        environ: Environment mapping for the ``env`` secrets provider.

    Raises:
        TemplateRegistrationError: If a template fails to compile.
    """
    audit = config.hooks.audit
    sink = build_audit_sink(audit)

    try:
        snapshot = ConfigurationSnapshot.from_config(config)
    except TemplateRegistrationError as exc:
        if sink is not None:
            _emit(
                sink,
                AuditAction.TEMPLATE_REJECTED,
                config.name,
                exc.owner,
                AuditStatus.FAILURE,
                {"header": exc.header_name, "error": str(exc.cause)[:500]},
            )
        raise

    if sink is not None:
        _emit(
            sink,
            AuditAction.CONFIG_LOADED,
            config.name,
            config.name,
            AuditStatus.SUCCESS,
            {"containers": str(len(config.containers)), "endpoints": str(len(config.endpoints))},
        )

    if secret_store is None:
        secret_sink = sink if audit is not None and audit.audit_secret_access else None
        secret_store = build_secret_store(config.secrets, secret_sink, environ=environ)
    if registry is None:
        registry = build_registry(config.hooks.metrics)

    return RequestAugmenter(
        snapshot,
        secret_store,
        permission_checker=permission_checker,
        hooks=build_hooks(config.hooks, sink, registry),
    )


def _emit(
    sink: AuditSink,
    action: AuditAction,
    actor: str,
    target: str,
    status: AuditStatus,
    details: dict[str, str],
) -> None:
    event = AuditEvent(action=action, actor=actor, target=target, status=status, details=details)
    safe_call(lambda: sink.emit(event), logger, "Audit sink %s failed", type(sink).__name__)
