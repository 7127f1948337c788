"""Credential configuration validation.

Compiles every header template and checks sequence numbers and merge-field
references without touching any secret store. Intended for CI/CD
pre-flight checks and for the ``--validate-only`` CLI mode; it collects
every problem instead of stopping at the first.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from credential_injection.core.config.base import SequenceTieBreak
from credential_injection.core.config.container import (
    AuthContainerConfig,
    HeaderTemplateConfig,
    PermissionSetMappingConfig,
)
from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.exceptions import ParseError
from credential_injection.core.resolution.merge_fields import CREDENTIAL_NAMESPACE
from credential_injection.core.sequence import group_by_header, lowest_ties
from credential_injection.core.template.cache import TemplateCache
from credential_injection.core.template.compiler import CompiledTemplate

logger = logging.getLogger(__name__)


class ValidationPhase(str, enum.Enum):
    """Phase in which a validation error occurred."""

    TEMPLATE_SYNTAX = "template-syntax"
    SEQUENCE = "sequence"
    REFERENCES = "references"


@dataclass
class ValidationError:
    """A single validation error.

    Args:
        phase: The validation phase that produced this error.
        message: Human-readable error description.
        owner: Container or endpoint involved, if applicable.
    """

    phase: ValidationPhase
    message: str
    owner: str | None = None


@dataclass
class ValidationResult:
    """Outcome of a configuration validation.

    Args:
        errors: Issues that would make header building fail.
        warnings: Non-fatal concerns worth noting.
    """

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Return ``True`` if no errors were found."""
        return len(self.errors) == 0


def validate_configuration(config: CredentialConfig, cache: TemplateCache | None = None) -> ValidationResult:
    """Validate a credential configuration.

    Args:
        config: Configuration to validate.
        cache: Template cache to compile through. A private cache is
            used when omitted.

    Returns:
        A ``ValidationResult`` with errors and warnings.
    """
    result = ValidationResult()
    templates = cache if cache is not None else TemplateCache()
    fail_on_tie = config.sequence_tie_break == SequenceTieBreak.FAIL

    for container in config.containers:
        owner = f"container '{container.name}'"
        _check_templates(config, owner, container.headers, templates, result)
        _check_header_sequences(owner, container.headers, fail_on_tie, result)
        _check_mappings(container, fail_on_tie, result)

    for endpoint in config.endpoints:
        owner = f"endpoint '{endpoint.name}'"
        _check_templates(config, owner, endpoint.headers, templates, result)
        container = config.get_container(endpoint.container)
        inherited = container.headers if container is not None else []
        _check_header_sequences(owner, [*endpoint.headers, *inherited], fail_on_tie, result)

    for error in result.errors:
        logger.debug("Validation error [%s]: %s", error.phase.value, error.message)
    return result


def _check_templates(
    config: CredentialConfig,
    owner: str,
    headers: list[HeaderTemplateConfig],
    cache: TemplateCache,
    result: ValidationResult,
) -> None:
    for header in headers:
        try:
            compiled = cache.get(header.template, header.allow_formula)
        except ParseError as exc:
            result.errors.append(
                ValidationError(ValidationPhase.TEMPLATE_SYNTAX, f"Header '{header.name}': {exc}", owner=owner)
            )
            continue
        if not header.allow_formula and "{!" in header.template:
            result.warnings.append(f"[{owner}] Header '{header.name}' contains '{{!' but formulas are disabled")
        _check_references(config, owner, header, compiled, result)


def _check_references(
    config: CredentialConfig,
    owner: str,
    header: HeaderTemplateConfig,
    compiled: CompiledTemplate,
    result: ValidationResult,
) -> None:
    for ref in compiled.references():
        if ref.namespace != CREDENTIAL_NAMESPACE:
            message = f"Header '{header.name}' uses unknown namespace in {ref.reference}"
        elif len(ref.parts) != 2:
            message = f"Header '{header.name}' reference {ref.reference} must be $Credential.Container.Parameter"
        else:
            container = config.get_container(ref.parts[0])
            if container is None:
                message = f"Header '{header.name}' references unknown container in {ref.reference}"
            elif ref.parts[1] not in container.parameter_names:
                message = f"Header '{header.name}' references undeclared parameter in {ref.reference}"
            else:
                continue
        result.errors.append(ValidationError(ValidationPhase.REFERENCES, message, owner=owner))


def _check_header_sequences(
    owner: str,
    headers: list[HeaderTemplateConfig],
    fail_on_tie: bool,
    result: ValidationResult,
) -> None:
    for candidates in group_by_header(headers, lambda h: h.name).values():
        tied = lowest_ties(candidates, lambda h: h.sequence_number)
        if len(tied) < 2:
            continue
        message = (
            f"Header '{tied[0].name}' has {len(tied)} templates "
            f"with sequence number {tied[0].sequence_number}"
        )
        if fail_on_tie:
            result.errors.append(ValidationError(ValidationPhase.SEQUENCE, message, owner=owner))
        else:
            result.warnings.append(f"[{owner}] {message}; the first declared wins")


def _check_mappings(container: AuthContainerConfig, fail_on_tie: bool, result: ValidationResult) -> None:
    owner = f"container '{container.name}'"
    if not container.mappings:
        result.warnings.append(f"[{owner}] has no permission-set mappings; every request will fail")
        return

    by_sequence: dict[int, list[PermissionSetMappingConfig]] = {}
    for mapping in container.mappings:
        by_sequence.setdefault(mapping.sequence_number, []).append(mapping)
    for sequence_number, tied in sorted(by_sequence.items()):
        if len(tied) < 2:
            continue
        message = f"Mappings {', '.join(m.name for m in tied)} share sequence number {sequence_number}"
        permission_sets = sorted({m.permission_set for m in tied})
        if not fail_on_tie:
            result.warnings.append(f"[{owner}] {message}; the first declared wins")
        elif len(permission_sets) < len(tied):
            # Every holder of the shared permission set hits the tie.
            result.errors.append(ValidationError(ValidationPhase.SEQUENCE, message, owner=owner))
        else:
            result.warnings.append(
                f"[{owner}] {message}; ambiguous for principals holding more than one of "
                f"{', '.join(permission_sets)}"
            )

    bound = {param for mapping in container.mappings for param in mapping.parameters}
    for name in container.parameter_names:
        if name not in bound:
            result.warnings.append(f"[{owner}] parameter '{name}' is not bound by any mapping")
