"""Command-line interface for building request headers."""

from __future__ import annotations

import argparse
import logging
import sys

from credential_injection.core.config.credential import CredentialConfig
from credential_injection.core.config.loader import load_from_file
from credential_injection.core.config.validator import validate_configuration
from credential_injection.core.exceptions import CredentialInjectionError
from credential_injection.core.resolution.principal import Principal
from credential_injection.core.utils import mask_value
from credential_injection.runner.factory import build_augmenter


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cie-headers",
        description="Build the credential headers for an endpoint from a HOCON configuration file.",
    )
    parser.add_argument(
        "config",
        help="Path to the HOCON credential configuration file.",
    )
    parser.add_argument(
        "--endpoint",
        help="Endpoint to build headers for.",
    )
    parser.add_argument(
        "--principal",
        default="cli",
        help="Name of the acting principal (default: cli).",
    )
    parser.add_argument(
        "--permission-set",
        dest="permission_sets",
        action="append",
        default=[],
        metavar="NAME",
        help="Permission set held by the principal. May be repeated.",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Validate the configuration without building headers.",
    )
    parser.add_argument(
        "--reveal",
        action="store_true",
        default=False,
        help="Print header values in clear text instead of masking them.",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set the logging level (default: WARNING).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for building headers.

    Args:
        argv: Command-line arguments. Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: 0 for success, 1 for configuration or header-building
        failure, 2 when ``--validate-only`` finds errors.
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    if not args.validate_only and not args.endpoint:
        parser.error("--endpoint is required unless --validate-only is given")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    log = logging.getLogger(__name__)

    try:
        config = load_from_file(args.config, CredentialConfig)
    except Exception as exc:
        log.error("Failed to load configuration: %s", exc)
        return 1

    if args.validate_only:
        result = validate_configuration(config)
        for warning in result.warnings:
            print(f"WARNING: {warning}", file=sys.stderr)
        for error in result.errors:
            where = f" {error.owner}:" if error.owner else ""
            print(f"ERROR [{error.phase.value}]{where} {error.message}", file=sys.stderr)
        if not result.is_valid:
            return 2
        print(f"Configuration '{config.name}' is valid.")
        return 0

    try:
        augmenter = build_augmenter(config)
        headers = augmenter.build_headers(
            args.endpoint,
            Principal(args.principal, frozenset(args.permission_sets)),
        )
    except (CredentialInjectionError, KeyError, ValueError, ImportError) as exc:
        log.error("Failed to build headers: %s", exc)
        return 1

    for header in headers:
        value = header.value if args.reveal else mask_value(header.value, visible_chars=2)
        print(f"{header.name}: {value}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
