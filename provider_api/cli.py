"""
Command line entry point for the Cloudways cache client.

Usage:
    python main.py varnish 123456 flush_all
    python main.py status 987654
    python main.py wait 987654 --max-attempts 10 --interval-ms 2000

Credentials are read from CLOUDWAYS_EMAIL and CLOUDWAYS_API_KEY (a local .env file works too).
Command output goes to stdout; logs go to stderr as JSON lines.

Exit codes: 0 on success, 1 when the provider call fails, 2 for missing credentials or bad
arguments.
"""

import argparse
import copy
import json
import logging
import sys
from typing import List, Optional

import config
from config.logging_config import setup_app_logging

from .base import ProviderClient
from .cloudways_client import CloudwaysClient
from .errors import ProviderAPIError
from .models import Credentials, VarnishAction

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argument parser with the `varnish`, `status` and `wait` subcommands.

    Returns:
        argparse.ArgumentParser: Parser whose namespace carries `command` plus the
        subcommand's arguments.
    """
    parser = argparse.ArgumentParser(
        description="Run Varnish cache actions on Cloudways servers and wait for operations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Known Varnish actions: {", ".join(a.value for a in VarnishAction)}

Examples:
  python main.py varnish 123456 flush_all
  python main.py wait 987654 --interval-ms 2000
        """,
    )
    parser.add_argument("--base-url", help="Override the API root URL")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ...)")

    subparsers = parser.add_subparsers(dest="command", required=True)

    varnish = subparsers.add_parser("varnish", help="Run a Varnish action on a server")
    varnish.add_argument("server_id", help="Numeric server id")
    varnish.add_argument("action", help="Varnish action, e.g. flush_all")
    _add_polling_arguments(varnish)

    status = subparsers.add_parser("status", help="Print the raw status of an operation")
    status.add_argument("operation_id")

    wait = subparsers.add_parser("wait", help="Poll an operation until it completes")
    wait.add_argument("operation_id")
    _add_polling_arguments(wait)

    return parser


def _add_polling_arguments(parser: argparse.ArgumentParser) -> None:
    """
    Add `--max-attempts` and `--interval-ms` to a subcommand parser.

    Both default to None so the values from CONFIG["polling"] apply when they are omitted.

    Args:
        parser (argparse.ArgumentParser): Subcommand parser to extend.
    """
    parser.add_argument("--max-attempts", type=int, help="Status reads before giving up")
    parser.add_argument("--interval-ms", type=int, help="Delay before each status read")


def main(argv: Optional[List[str]] = None, client: Optional[ProviderClient] = None) -> int:
    """
    Parse arguments, run the requested command, and return the process exit code.

    Args:
        argv (Optional[List[str]]): Arguments without the program name; defaults to sys.argv.
        client (Optional[ProviderClient]): Client to use instead of one built from CONFIG.
    """
    args = build_parser().parse_args(argv)

    cfg = copy.deepcopy(config.CONFIG)
    if args.base_url:
        cfg["cloudways"]["base_url"] = args.base_url
    if args.log_level:
        cfg["logging"]["level"] = args.log_level
    setup_app_logging(cfg["logging"])

    try:
        config.validate_config()
    except EnvironmentError as exc:
        print(f"❌ {exc}", file=sys.stderr)
        return 2

    if client is None:
        client = CloudwaysClient.from_config(cfg)
    credentials = Credentials(
        email=config.ENV["CLOUDWAYS_EMAIL"],
        api_key=config.ENV["CLOUDWAYS_API_KEY"],
    )

    max_attempts = getattr(args, "max_attempts", None)
    if max_attempts is None:
        max_attempts = cfg["polling"]["max_attempts"]
    interval_ms = getattr(args, "interval_ms", None)
    if interval_ms is None:
        interval_ms = cfg["polling"]["interval_ms"]

    try:
        if args.command == "varnish":
            result = client.run_action(
                credentials, args.server_id, args.action,
                max_attempts=max_attempts, interval_ms=interval_ms,
            )
            print(f"✅ Varnish {args.action} completed on server {args.server_id}")
            if getattr(result, "message", None):
                print(f"   {result.message}")
        else:
            token = client.obtain_access_token(
                credentials.email, credentials.api_key.get_secret_value()
            )
            if args.command == "status":
                print(json.dumps(client.get_operation_status(token, args.operation_id), indent=2))
            else:
                operation = client.wait_for_completion(
                    token, args.operation_id, max_attempts=max_attempts, interval_ms=interval_ms
                )
                print(f"✅ Operation {args.operation_id} completed")
                if operation.message:
                    print(f"   {operation.message}")
    except ProviderAPIError as exc:
        logger.error("%s failed: %s", args.command, exc)
        print(f"❌ {exc}", file=sys.stderr)
        return 1

    return 0
