"""Endpoint configuration models."""

from dataclasses import dataclass, field

from credential_injection.core.config.container import HeaderTemplateConfig


@dataclass
class EndpointConfig:
    """An outbound call target bound to exactly one auth container."""

    name: str
    """Endpoint name (required)"""

    url: str
    """Target URL; carried for callers, never used by header building (required)"""

    container: str
    """Name of the auth container supplying credentials (required)"""

    headers: list[HeaderTemplateConfig] = field(default_factory=list)
    """Endpoint-specific header templates (default: [])"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")

        if not self.url:
            raise ValueError(f"Endpoint '{self.name}' requires a url")

        if not self.container:
            raise ValueError(f"Endpoint '{self.name}' requires a container")
