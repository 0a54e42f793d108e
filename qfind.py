#!/usr/bin/env python3

"""
Qumulo multi-root find

Usage:
    ./qfind.py --host <cluster> [OPTIONS] PATH [PATH ...]

"""

import argparse
import asyncio
import os
import sys
from typing import List, Optional

import aiohttp

from qfind_modules import (
    DEFAULT_PARALLEL,
    TYPE_CHOICES,
    AsyncQumuloClient,
    SearchCriteria,
    SearchOrchestrator,
    TreeWalker,
    compile_name_pattern,
    parse_size_to_bytes,
    resolve_bearer_token,
)

COMMAND_NAME = "qfind"
DEBUG_ENV_VAR = "QFIND_DEBUG"
HOST_ENV_VAR = "QFIND_HOST"
PORT_ENV_VAR = "QFIND_PORT"


def debug_enabled() -> bool:
    return bool(os.environ.get(DEBUG_ENV_VAR))


def build_criteria(args) -> SearchCriteria:
    """
    Build the immutable search configuration from parsed arguments.

    Raises:
        ValueError: If an option value is invalid
    """
    if args.limit is not None and args.limit <= 0:
        raise ValueError("--limit must be a positive integer")
    if args.parallel <= 0:
        raise ValueError("--parallel must be a positive integer")
    for flag, value in (("--mindepth", args.mindepth), ("--maxdepth", args.maxdepth)):
        if value is not None and value < 0:
            raise ValueError(f"{flag} must not be negative")
    if (
        args.mindepth is not None
        and args.maxdepth is not None
        and args.mindepth > args.maxdepth
    ):
        raise ValueError("--mindepth must not be greater than --maxdepth")

    return SearchCriteria(
        name_pattern=compile_name_pattern(args.name),
        min_size=parse_size_to_bytes(args.size) if args.size is not None else None,
        entry_type=args.type,
        mindepth=args.mindepth,
        maxdepth=args.maxdepth,
        limit=args.limit,
        json_output=args.json,
        parallel=args.parallel,
        verbose=args.verbose,
    )


async def main_async(args, criteria: SearchCriteria) -> int:
    """Main async function. Returns the process exit code."""
    if args.verbose:
        print("=" * 70, file=sys.stderr)
        print("qfind - Qumulo Multi-Root Search", file=sys.stderr)
        print("=" * 70, file=sys.stderr)
        print(f"Cluster:          {args.host}:{args.port}", file=sys.stderr)
        print(f"Roots:            {', '.join(args.paths)}", file=sys.stderr)
        print(f"Parallel:         {criteria.parallel}", file=sys.stderr)
        print(f"Connection pool:  {args.connector_limit}", file=sys.stderr)
        if criteria.limit:
            print(f"Limit:            {criteria.limit}", file=sys.stderr)
        print("=" * 70, file=sys.stderr)

    bearer_token = resolve_bearer_token(args.credentials_store)
    if not bearer_token:
        print(
            "[ERROR] No credentials found. Please run 'qq --host <cluster> login' first.",
            file=sys.stderr,
        )
        return 1

    client = AsyncQumuloClient(
        args.host,
        args.port,
        bearer_token,
        connector_limit=args.connector_limit,
        verbose=args.verbose,
    )

    try:
        await client.test_connection()
    except (asyncio.TimeoutError, OSError) as e:
        print(f"[ERROR] Cannot connect to cluster: {args.host}:{args.port}", file=sys.stderr)
        print("[HINT] Check that the cluster is reachable and the hostname/port are correct", file=sys.stderr)
        if args.verbose:
            print(f"[DEBUG] {e}", file=sys.stderr)
        return 1

    session = client.create_session()
    orchestrator = SearchOrchestrator(
        TreeWalker(client, session, criteria),
        criteria,
        command=COMMAND_NAME,
        debug=debug_enabled(),
        closer=session.close,
    )
    return await orchestrator.run(args.paths)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=COMMAND_NAME,
        description="Search one or more directory trees on a Qumulo cluster",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # List everything under two roots
  ./qfind.py --host cluster.example.com /home /projects

  # First 100 objects larger than 1GB
  ./qfind.py --host cluster.example.com --type o --size 1GB --limit 100 /data

  # Log files two or three levels deep, as JSON lines
  ./qfind.py --host cluster.example.com -n '\\.log$' --mindepth 2 --maxdepth 3 --json /var
        """,
    )

    parser.add_argument("paths", nargs="*", metavar="PATH", help="Root path(s) to search")

    # ============================================================================
    # FILTERS
    # ============================================================================
    filters = parser.add_argument_group('Filters',
        'Criteria an entry must meet to be printed')

    filters.add_argument("-n", "--name", help="Regular expression searched in entry names")
    filters.add_argument(
        "-s",
        "--size",
        help="Only entries larger than this size (bytes, or with a unit: 100MB, 1.5GiB)",
    )
    filters.add_argument(
        "-t",
        "--type",
        choices=TYPE_CHOICES,
        help="Only directories (d) or objects (o)",
    )
    filters.add_argument("--mindepth", type=int, help="Only entries at least N levels below the root")
    filters.add_argument("--maxdepth", type=int, help="Descend at most N levels below the root")

    # ============================================================================
    # OUTPUT
    # ============================================================================
    output = parser.add_argument_group('Output Options')

    output.add_argument("-l", "--limit", type=int, help="Stop after N results")
    output.add_argument(
        "-j",
        "--json",
        action="store_true",
        help="Print one JSON object per result",
    )
    output.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print progress information to stderr",
    )

    # ============================================================================
    # CONNECTION OPTIONS
    # ============================================================================
    connection = parser.add_argument_group('Connection Options',
        'Configure connection to Qumulo cluster')

    connection.add_argument(
        "--host",
        default=os.environ.get(HOST_ENV_VAR),
        help=f"Qumulo cluster hostname or IP (default: ${HOST_ENV_VAR})",
    )
    connection.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get(PORT_ENV_VAR, 8000)),
        help=f"Qumulo API port (default: ${PORT_ENV_VAR} or 8000)",
    )
    connection.add_argument(
        "--credentials-store",
        help="Path to credentials file (default: ~/.qfsd_cred)",
    )

    # ============================================================================
    # PERFORMANCE TUNING
    # ============================================================================
    performance = parser.add_argument_group('Performance Tuning',
        'Tune concurrency and connection pool settings')

    performance.add_argument(
        "-p",
        "--parallel",
        type=int,
        default=DEFAULT_PARALLEL,
        help=f"Maximum concurrent directory listings per root (default: {DEFAULT_PARALLEL})",
    )
    performance.add_argument(
        "--connector-limit",
        type=int,
        default=100,
        help="Maximum HTTP connections in pool (default: 100)",
    )

    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.paths:
        print("Error: at least one path is required", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    if not args.host:
        print(f"Error: --host is required (or set {HOST_ENV_VAR})", file=sys.stderr)
        sys.exit(1)

    try:
        criteria = build_criteria(args)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        exit_code = asyncio.run(main_async(args, criteria))
    except KeyboardInterrupt:
        print("\n[INFO] Interrupted by user", file=sys.stderr)
        sys.exit(130)
    except aiohttp.ClientConnectorError as e:
        print(f"\n[ERROR] Cannot connect to cluster: {args.host}:{args.port}", file=sys.stderr)
        print(f"[HINT] Check that the cluster is reachable and the hostname/port are correct", file=sys.stderr)
        if args.verbose:
            print(f"[DEBUG] {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
