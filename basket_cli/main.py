"""
Module 09C - CLI Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m basket_cli keygen [--out DIR] [--force]
    python -m basket_cli hash --token-id N --value N [--salt HEX]
    python -m basket_cli fingerprint FILE
    python -m basket_cli sign-reorg FILE [--evaluate] [--json]
    python -m basket_cli serve [--host HOST] [--port PORT]
    python -m basket_cli config --init

Environment Variables:
    BASKET_ORACLE_PRIVATE_KEY   Oracle Ed25519 private key (0x hex)
    BASKET_ORACLE_KEY_PATH      Oracle private key PEM file
    BASKET_MIN_ORACLES          Quorum threshold
    BASKET_ORACLES              Comma-separated authorized oracle public keys
    BASKET_LOG_LEVEL            Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from basket_cli.commands import commitments, keys, reorg, serve
from basket_cli.config import get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO") -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _uint256(raw: str) -> int:
    value = int(raw, 0)
    if value < 0:
        raise argparse.ArgumentTypeError("must be non-negative")
    return value


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="basket",
        description="Basket ledger tools - oracle keys, commitments and reorg signing.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help="Path to configuration file (default: ./basket.json or ~/.config/basket/config.json)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on error",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- keygen command ---
    keygen_parser = subparsers.add_parser(
        "keygen",
        help="Generate an oracle keypair",
    )
    keygen_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Directory to write PEM files to (default: print as JSON)",
    )
    keygen_parser.add_argument(
        "--force",
        action="store_true",
        default=False,
        help="Overwrite an existing key file",
    )
    keygen_parser.set_defaults(func=keys.keygen_cmd)

    # --- hash command ---
    hash_parser = subparsers.add_parser(
        "hash",
        help="Compute a basket hash",
    )
    hash_parser.add_argument("--token-id", type=_uint256, required=True)
    hash_parser.add_argument("--value", type=_uint256, required=True)
    hash_parser.add_argument(
        "--salt",
        type=str,
        default=None,
        help="32-byte salt as 0x hex (default: random)",
    )
    hash_parser.set_defaults(func=commitments.hash_cmd)

    # --- fingerprint command ---
    fingerprint_parser = subparsers.add_parser(
        "fingerprint",
        help="Compute the fingerprint of a master-data JSON file",
    )
    fingerprint_parser.add_argument("file", type=str, help="JSON file, or - for stdin")
    fingerprint_parser.set_defaults(func=commitments.fingerprint_cmd)

    # --- sign-reorg command ---
    sign_parser = subparsers.add_parser(
        "sign-reorg",
        help="Verify and sign a reorg proposal with the configured oracle key",
    )
    sign_parser.add_argument("file", type=str, help="Proposal JSON file, or - for stdin")
    sign_parser.add_argument(
        "--evaluate",
        action="store_true",
        default=False,
        help="Report every check without signing",
    )
    sign_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    sign_parser.set_defaults(func=reorg.sign_reorg_cmd)

    # --- serve command ---
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the oracle HTTP service",
    )
    serve_parser.add_argument("--host", type=str, default=None)
    serve_parser.add_argument("--port", type=int, default=None)
    serve_parser.set_defaults(func=serve.serve_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        help="Show current configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default="basket.json",
        help="Path for the config file (default: basket.json)",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (BASKET_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: basket config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show current configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(level=args.log_level or config.log_level)

    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
