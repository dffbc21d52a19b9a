"""NocoDB CLI - unified entry point for the server, tool calls and dev scripts.

Usage:
    nocodb-mcp                        # start MCP server (stdio)
    nocodb-mcp serve                  # same
    nocodb-mcp tools                  # list available tools
    nocodb-mcp call list_tables '{"base_id": "p_abc"}'
    nocodb-mcp smoke-test --base p_abc
"""

from __future__ import annotations

import asyncio
import json
import subprocess
import sys
from pathlib import Path
from typing import Any

# Commands: name → (script_filename, description)
# Scripts live in <repo>/scripts/ and are only available when running from source.
COMMANDS: dict[str, tuple[str, str]] = {
    "smoke-test": ("smoke_test.py", "End-to-end check against a live NocoDB instance"),
}

SCRIPTS_DIR = Path(__file__).resolve().parent.parent.parent / "scripts"


def _print_help() -> None:
    print("NocoDB CLI - MCP server, tool calls and dev scripts\n")
    print("Usage: nocodb-mcp <command> [options]\n")
    print("Commands:")

    print(f"  {'serve':<20} Start the MCP server (stdio, default)")
    print(f"  {'tools':<20} List available tools")
    print(f"  {'call':<20} Run one tool: call <tool> [json-arguments]")
    print()

    col = max(max(len(name) for name in COMMANDS) + 2, 20)
    for name, (_, desc) in sorted(COMMANDS.items()):
        print(f"  {name:<{col}} {desc}")

    print()
    print("Examples:")
    print("  nocodb-mcp serve")
    print("  nocodb-mcp call list_bases")
    print("  nocodb-mcp call list_records '{\"table_name\": \"Tasks\", \"limit\": 5}'")
    print("  nocodb-mcp smoke-test --base p_abc123")


def _print_tools() -> None:
    from nocodb_mcp.catalog import TOOLS

    col = max(len(name) for name in TOOLS) + 2
    for group in sorted({spec.group for spec in TOOLS.values()}):
        print(f"[{group}]")
        for spec in TOOLS.values():
            if spec.group == group:
                print(f"  {spec.name:<{col}} {spec.description}")
                print(f"  {'':<{col}} args: {', '.join(spec.parameters) or '-'}")
        print()


def _parse_arguments(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        arguments = json.loads(raw)
    except json.JSONDecodeError as e:
        print(f"ERROR: arguments are not valid JSON: {e}", file=sys.stderr)
        sys.exit(2)
    if not isinstance(arguments, dict):
        print("ERROR: arguments must be a JSON object", file=sys.stderr)
        sys.exit(2)
    return arguments


async def _call(name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    from nocodb_mcp.api import NocoDBClient
    from nocodb_mcp.catalog import call_tool
    from nocodb_mcp.config import settings

    client = NocoDBClient(settings.connection())
    try:
        return await call_tool(client, name, arguments)
    finally:
        await client.close()


def _run_call(rest: list[str]) -> None:
    from nocodb_mcp.errors import NocoDBError

    if not rest:
        print("Usage: nocodb-mcp call <tool> [json-arguments]", file=sys.stderr)
        sys.exit(2)
    arguments = _parse_arguments(rest[1] if len(rest) > 1 else None)
    try:
        result = asyncio.run(_call(rest[0], arguments))
    except NocoDBError as e:
        status = f" (HTTP {e.status_code})" if e.status_code else ""
        print(f"ERROR: {e.message}{status}", file=sys.stderr)
        sys.exit(1)
    print(json.dumps(result, indent=2, default=str))


def main() -> None:
    """Entry point for the nocodb-mcp CLI."""
    args = sys.argv[1:]

    if args and args[0] in ("--help", "-h"):
        _print_help()
        sys.exit(0)

    command = args[0] if args else "serve"
    rest = args[1:]

    # Built-in: serve
    if command == "serve":
        from nocodb_mcp.server import main as server_main

        server_main()
        return

    # Built-in: tools
    if command == "tools":
        _print_tools()
        return

    # Built-in: call
    if command == "call":
        _run_call(rest)
        return

    # Script dispatch
    if command not in COMMANDS:
        print(f"Unknown command: {command}\n", file=sys.stderr)
        _print_help()
        sys.exit(1)

    script_file, _ = COMMANDS[command]

    if not SCRIPTS_DIR.is_dir():
        print(
            "ERROR: scripts/ directory not found. "
            "CLI scripts are only available when running from the source repo.",
            file=sys.stderr,
        )
        sys.exit(1)

    script_path = SCRIPTS_DIR / script_file
    if not script_path.exists():
        print(f"ERROR: Script not found: {script_path}", file=sys.stderr)
        sys.exit(1)

    # Run with cwd=scripts/ so _common imports work
    result = subprocess.run(
        [sys.executable, str(script_path), *rest],
        cwd=str(SCRIPTS_DIR),
    )
    sys.exit(result.returncode)


if __name__ == "__main__":
    main()
