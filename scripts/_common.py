"""Shared helpers for CLI scripts.

Provides consistent --base flag handling and client construction so each
script doesn't duplicate the .env -> settings -> client wiring.

Scripts talk to a live NocoDB instance. Without credentials in the
environment (or .env) they exit instead of guessing.
"""

from __future__ import annotations

import argparse
import sys

from dotenv import load_dotenv

from nocodb_mcp.api import NocoDBClient


def add_base_arg(parser: argparse.ArgumentParser) -> None:
    """Add a --base flag to an argparse parser."""
    parser.add_argument(
        "--base",
        default="",
        help="Base id to run against (defaults to NOCODB_DEFAULT_BASE)",
    )


def build_client(base: str = "") -> NocoDBClient:
    """Load .env, then build a client for the configured instance.

    Args:
        base: Base id overriding NOCODB_DEFAULT_BASE. Empty keeps the default.

    Raises:
        SystemExit: If no credentials are configured or no base is known.
    """
    load_dotenv()

    from nocodb_mcp.config import Settings

    settings = Settings()
    if not settings.has_credentials:
        print("ERROR: NOCODB_API_TOKEN or NOCODB_AUTH_TOKEN must be set. Check .env", file=sys.stderr)
        sys.exit(1)

    config = settings.connection()
    if base:
        config.default_base = base
    if not config.default_base:
        print("ERROR: No base given. Pass --base or set NOCODB_DEFAULT_BASE", file=sys.stderr)
        sys.exit(1)
    return NocoDBClient(config)
