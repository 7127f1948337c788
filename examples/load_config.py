"""Example of loading HOCON configuration using dataconf."""

from pathlib import Path

from credential_injection.core.config import CredentialConfig, load_from_file, validate_configuration


def main() -> None:
    """Load, summarize, and validate the credential configuration."""
    config_path = str(Path(__file__).parent / "credentials.conf")

    config = load_from_file(config_path, CredentialConfig)

    print(f"Configuration: {config.name}")
    print(f"Tie-break: {config.sequence_tie_break.value}")
    if config.secrets is not None:
        print(f"Secret store: {config.secrets.provider.value} (ttl {config.secrets.cache_ttl_seconds}s)")

    print(f"\nContainers ({len(config.containers)}):")
    for container in config.containers:
        print(f"  - {container.name}: {', '.join(container.parameter_names)}")
        for mapping in sorted(container.mappings, key=lambda m: m.sequence_number):
            print(f"    [{mapping.sequence_number}] {mapping.name} <- {mapping.permission_set}")

    print(f"\nEndpoints ({len(config.endpoints)}):")
    for endpoint in config.endpoints:
        print(f"  - {endpoint.name} -> {endpoint.container} ({endpoint.url})")

    result = validate_configuration(config)
    print(f"\nValid: {result.is_valid}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    for error in result.errors:
        print(f"  error [{error.phase.value}] {error.owner}: {error.message}")


if __name__ == "__main__":
    main()
