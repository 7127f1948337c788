"""Top-level credential configuration model."""

from dataclasses import dataclass, field

from .base import SequenceTieBreak
from .container import AuthContainerConfig
from .endpoint import EndpointConfig
from .hooks import HooksConfig
from .secrets import SecretsConfig


@dataclass
class CredentialConfig:
    """Top-level configuration for credential injection.

    Declares every auth container and endpoint. Loaded once and compiled
    into an immutable snapshot; it is never mutated at request time.
    """

    name: str
    """Configuration name (required)"""

    containers: list[AuthContainerConfig]
    """Auth containers (required)"""

    endpoints: list[EndpointConfig] = field(default_factory=list)
    """Endpoints referencing containers (default: [])"""

    sequence_tie_break: SequenceTieBreak = SequenceTieBreak.FAIL
    """Rule for equal sequence numbers (default: fail)"""

    secrets: SecretsConfig | None = None
    """Secret store configuration (optional)"""

    hooks: HooksConfig = field(default_factory=HooksConfig)
    """Observability hooks configuration (default: HooksConfig with defaults)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")

        if not self.containers:
            raise ValueError("At least one container is required")

        container_names = [c.name for c in self.containers]
        if len(container_names) != len(set(container_names)):
            raise ValueError("Container names must be unique")

        endpoint_names = [e.name for e in self.endpoints]
        if len(endpoint_names) != len(set(endpoint_names)):
            raise ValueError("Endpoint names must be unique")

        for endpoint in self.endpoints:
            if endpoint.container not in container_names:
                raise ValueError(f"Endpoint '{endpoint.name}' references unknown container '{endpoint.container}'")

    def get_container(self, name: str) -> AuthContainerConfig | None:
        """Get a container by name.

        Args:
            name: Container name to look up.

        Returns:
            AuthContainerConfig if found, None otherwise.
        """
        for container in self.containers:
            if container.name == name:
                return container
        return None

    def get_endpoint(self, name: str) -> EndpointConfig | None:
        """Get an endpoint by name.

        Args:
            name: Endpoint name to look up.

        Returns:
            EndpointConfig if found, None otherwise.
        """
        for endpoint in self.endpoints:
            if endpoint.name == name:
                return endpoint
        return None
