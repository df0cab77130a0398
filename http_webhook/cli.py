"""Command-line interface for operators.

Checks routing files before they are dropped into a watched directory and
shows where a realm's events would go.
"""

import argparse
import sys
from pathlib import Path

import structlog

from http_webhook.errors import ConfigLoadError
from http_webhook.observability.logging import setup_logging
from http_webhook.webhooks.routing import RouteResolver
from http_webhook.webhooks.store import ConfigurationStore

logger = structlog.get_logger(__name__)


def validate_command(args: argparse.Namespace) -> int:
    """Load a routing file and report whether it is valid.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    try:
        with ConfigurationStore(Path(args.config)) as store:
            snapshot = store.current()
    except ConfigLoadError as e:
        print(f"INVALID: {e.message}", file=sys.stderr)
        return 1

    print(f"OK: {args.config}")
    print(f"  targets: {len(snapshot.targets)}")
    print(f"  default targets: {len(snapshot.default_targets)}")
    print(f"  routes: {len(snapshot.routes)}")
    return 0


def routes_command(args: argparse.Namespace) -> int:
    """Print the targets each given realm resolves to.

    Args:
        args: Parsed arguments.

    Returns:
        Exit code.
    """
    try:
        store = ConfigurationStore(Path(args.config))
    except ConfigLoadError as e:
        print(f"INVALID: {e.message}", file=sys.stderr)
        return 1

    with store:
        resolver = RouteResolver(store)
        for realm in args.realms:
            targets = resolver.targets_for(realm)
            print(f"{realm}:")
            if not targets:
                print("  (no targets)")
            for target in targets:
                print(f"  - {target.url}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Returns:
        Exit code.
    """
    parser = argparse.ArgumentParser(
        prog="http-webhook",
        description="Keycloak HTTP webhook routing tools",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Minimum log level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    validate_parser = subparsers.add_parser("validate", help="Validate a routing file")
    validate_parser.add_argument("config", help="Path to the JSON routing file")

    routes_parser = subparsers.add_parser("routes", help="Show targets for realms")
    routes_parser.add_argument("config", help="Path to the JSON routing file")
    routes_parser.add_argument("realms", nargs="+", help="Realm names")

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    setup_logging(level=args.log_level, format="console")

    if args.command == "validate":
        return validate_command(args)
    elif args.command == "routes":
        return routes_command(args)

    return 1


if __name__ == "__main__":
    sys.exit(main())
