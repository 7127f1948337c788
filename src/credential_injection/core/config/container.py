"""Auth container configuration models."""

from dataclasses import dataclass, field


@dataclass
class ParameterConfig:
    """A named parameter declared on a container.

    Only the name is configured; values come from the secret store at
    request time.
    """

    name: str
    """Parameter name referenced by ``$Credential.<Container>.<name>`` (required)"""

    description: str = ""
    """Free-form description (default: "")"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if "." in self.name:
            raise ValueError(f"Parameter name '{self.name}' must not contain '.'")


@dataclass
class PermissionSetMappingConfig:
    """A candidate source of parameter values, granted by a permission set.

    Mappings are tried in ascending ``sequence_number`` order; the first
    whose permission set the acting principal holds supplies the values.
    """

    name: str
    """Mapping name, unique within the container (required)"""

    permission_set: str
    """Permission set that grants this mapping (required)"""

    sequence_number: int
    """Ordering value; lowest wins (required)"""

    parameters: dict[str, str] = field(default_factory=dict)
    """Parameter name -> secret store key within the container (default: {})"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")

        if not self.permission_set:
            raise ValueError(f"Mapping '{self.name}' requires a permission_set")

        for param, key in self.parameters.items():
            if not key:
                raise ValueError(f"Mapping '{self.name}' binds parameter '{param}' to an empty secret key")


@dataclass
class HeaderTemplateConfig:
    """An HTTP header whose value is computed from a template."""

    name: str
    """HTTP header name (required)"""

    template: str
    """Header value template; may embed one ``{!...}`` formula (required)"""

    sequence_number: int = 0
    """Ordering value used when several templates target the same header (default: 0)"""

    allow_formula: bool = True
    """Evaluate ``{!...}`` as a formula; when false the template is emitted verbatim (default: True)"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name or not self.name.strip():
            raise ValueError("name is required")
        if any(ch in self.name for ch in " \t\r\n:"):
            raise ValueError(f"Invalid header name '{self.name}'")


@dataclass
class AuthContainerConfig:
    """A named bundle of parameters, mappings, and headers for one auth scheme.

    Containers hold no URL; endpoints reference them by name.
    """

    name: str
    """Container name referenced by endpoints and merge fields (required)"""

    parameters: list[ParameterConfig] = field(default_factory=list)
    """Declared parameters (default: [])"""

    mappings: list[PermissionSetMappingConfig] = field(default_factory=list)
    """Permission-set mappings supplying parameter values (default: [])"""

    headers: list[HeaderTemplateConfig] = field(default_factory=list)
    """Header templates applied to every endpoint using this container (default: [])"""

    description: str = ""
    """Free-form description (default: "")"""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.name:
            raise ValueError("name is required")
        if "." in self.name:
            raise ValueError(f"Container name '{self.name}' must not contain '.'")

        param_names = [p.name for p in self.parameters]
        if len(param_names) != len(set(param_names)):
            raise ValueError(f"Parameter names in container '{self.name}' must be unique")

        mapping_names = [m.name for m in self.mappings]
        if len(mapping_names) != len(set(mapping_names)):
            raise ValueError(f"Mapping names in container '{self.name}' must be unique")

        declared = set(param_names)
        for mapping in self.mappings:
            for param in mapping.parameters:
                if param not in declared:
                    raise ValueError(
                        f"Mapping '{mapping.name}' binds undeclared parameter '{param}' "
                        f"in container '{self.name}'"
                    )

    @property
    def parameter_names(self) -> list[str]:
        """Return declared parameter names in declaration order."""
        return [p.name for p in self.parameters]

    def get_mapping(self, name: str) -> PermissionSetMappingConfig | None:
        """Get a mapping by name.

        Args:
            name: Mapping name to look up.

        Returns:
            PermissionSetMappingConfig if found, None otherwise.
        """
        for mapping in self.mappings:
            if mapping.name == name:
                return mapping
        return None
