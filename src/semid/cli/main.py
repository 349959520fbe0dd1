# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""
Semid CLI - manage named identities on this host.

Commands:
  semid register [--name NAME] [--salt SALT]   Register an identity, print its commitment
  semid list                                    List registered names and commitments
  semid rpc                                     Answer one JSON-RPC request read from stdin
  semid clear --yes                             Remove every registered identity

The host seed comes from SEMID_ENTROPY_SEED and the registry lives in
SEMID_STATE_FILE (encrypted when SEMID_STATE_KEY is set).
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from ..core.exceptions import SemidException
from ..core.logging import configure_logging
from ..identity.identity import Identity
from ..identity.registry import FileStateStore, Registry
from ..server.rpc import REGISTER_IDENTITY, OperationHandler, handle_rpc_request

logger = logging.getLogger(__name__)


def output_result(data: Any, as_json: bool) -> None:
    if as_json:
        print(json.dumps(data, indent=2, default=str))
    elif isinstance(data, dict):
        for key, value in data.items():
            print(f"{key}\t{value}")
    else:
        print(data)


def output_error(message: str) -> None:
    """Print error message to stderr."""
    print(f"Error: {message}", file=sys.stderr)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


async def cmd_register(args: argparse.Namespace) -> int:
    handler = OperationHandler.from_config()
    params = {"name": args.name, "salt": args.salt}
    commitment = await handler.handle(REGISTER_IDENTITY, params)
    if args.json:
        output_result({"name": args.name or "default", "commitment": commitment}, as_json=True)
    else:
        print(commitment)
    return 0


async def cmd_list(args: argparse.Namespace) -> int:
    registry = Registry(FileStateStore.from_config())
    mapping = await registry.load()
    commitments = {
        name: Identity.from_serialized(serialized).commitment_hex
        for name, serialized in sorted(mapping.items())
    }
    if not commitments and not args.json:
        print("No identities registered")
        return 0
    output_result(commitments, as_json=args.json)
    return 0


async def cmd_rpc(args: argparse.Namespace) -> int:
    raw = sys.stdin.read()
    try:
        request = json.loads(raw)
    except json.JSONDecodeError as e:
        response: dict[str, Any] | None = {
            "jsonrpc": "2.0",
            "error": {"code": -32700, "message": f"Parse error: {e.msg}"},
            "id": None,
        }
    else:
        response = await handle_rpc_request(request, OperationHandler.from_config())

    if response is not None:
        print(json.dumps(response))
    return 0 if response is None or "error" not in response else 1


async def cmd_clear(args: argparse.Namespace) -> int:
    if not args.yes:
        output_error("Refusing to clear the registry without --yes")
        return 2
    await Registry(FileStateStore.from_config()).clear()
    print("Registry cleared")
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="semid",
        description="Deterministic named identities for zero-knowledge groups",
    )
    parser.add_argument("--json", action="store_true", help="Emit JSON output")
    parser.add_argument("--log-level", default=None, help="Override SEMID_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    register_p = sub.add_parser("register", help="Register an identity and print its commitment")
    register_p.add_argument("--name", default=None, help="Identity name (default: 'default')")
    register_p.add_argument("--salt", default=None, help="Salt mixed into entropy derivation")
    register_p.set_defaults(func=cmd_register)

    list_p = sub.add_parser("list", help="List registered identities")
    list_p.set_defaults(func=cmd_list)

    rpc_p = sub.add_parser("rpc", help="Answer one JSON-RPC request from stdin")
    rpc_p.set_defaults(func=cmd_rpc)

    clear_p = sub.add_parser("clear", help="Remove every registered identity")
    clear_p.add_argument("--yes", action="store_true", help="Confirm clearing")
    clear_p.set_defaults(func=cmd_clear)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(level=args.log_level)

    try:
        return asyncio.run(args.func(args))
    except SemidException as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        output_error(e.message)
        return 1


if __name__ == "__main__":
    sys.exit(main())
