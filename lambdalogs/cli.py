#!/usr/bin/env python3
# SPDX-License-Identifier: MIT
"""
Command-line entry point for lambdalogs.

Resolves AWS credentials, loads the function inventory once, then hands
control to the dashboard.

Usage:
    lambdalogs [--profile NAME] [--region REGION] [--debug LEVEL]
    python -m lambdalogs [...]
"""

import argparse
import os
import sys
import time
from typing import List, Optional

import boto3
from botocore.exceptions import BotoCoreError

from lambdalogs.debug_logger import DEBUG_ENV_VAR, get_logger, reset_logger
from lambdalogs.errors import RemoteError
from lambdalogs.gateway import FetchGateway, resolve_account_id


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lambdalogs",
        description="lambdalogs - browse Lambda functions and their CloudWatch logs",
    )
    parser.add_argument("--profile", help="AWS profile name (default: boto3 credential chain)")
    parser.add_argument("--region", help="AWS region (default: from profile/environment)")
    parser.add_argument(
        "--debug",
        type=int,
        metavar="LEVEL",
        help=f"Debug log level 0-3 (overrides {DEBUG_ENV_VAR})",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    if args.debug is not None:
        os.environ[DEBUG_ENV_VAR] = str(args.debug)
        reset_logger()
    logger = get_logger()

    start = time.perf_counter()
    try:
        session = boto3.Session(profile_name=args.profile, region_name=args.region)
        account_id = resolve_account_id(session)
        gateway = FetchGateway.from_session(session)
        functions = gateway.list_functions()
    except (RemoteError, BotoCoreError) as e:
        logger.error("startup", str(e))
        print(f"fatal: {e}", file=sys.stderr)
        return 1

    logger.startup(account_id, len(functions), (time.perf_counter() - start) * 1000)

    # Deferred so --help works without textual's import cost
    from lambdalogs.tui import run_app

    run_app(functions, gateway, account_id=account_id)
    return 0


if __name__ == "__main__":
    sys.exit(main())
