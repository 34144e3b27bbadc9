#!/usr/bin/env python3
"""
Interactive Client for respool

A command-line client for trying commands against a server through a
connection pool.

Usage:
    respool                          # Connect to 127.0.0.1:6379, db 0
    respool --host 1.2.3.4 --db 2    # Connect to a specific host and database
    respool --max-conns 8            # Custom pool size
    respool --timeout 5              # Fail I/O that stalls for 5 seconds
    respool --debug                  # Enable debug logging

Environment Variables:
    RESPOOL_HOST        - Server host
    RESPOOL_PORT        - Server port
    RESPOOL_DB          - Database index
    RESPOOL_DEBUG       - Enable debug mode (true/false)
"""

import argparse
import asyncio
import logging
import shlex
import sys
from typing import List

from .config.settings import PoolConfig, settings
from .exceptions import RespoolError, ServerError
from .network.pool import ConnectionPool

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default


def parse_args(argv: List[str] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="respool: interactive client for RESP key-value stores",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument("--host", type=str, default=settings.HOST, help="Server host")
    parser.add_argument("--port", type=int, default=settings.PORT, help="Server port")
    parser.add_argument("--db", type=int, default=settings.DATABASE, help="Database index")
    parser.add_argument(
        "--min-conns",
        type=int,
        default=settings.MIN_CONN_NUM,
        help="Connections opened at startup",
    )
    parser.add_argument(
        "--idle-conns",
        type=int,
        default=settings.IDLE_CONN_NUM,
        help="Connections kept idle in the pool",
    )
    parser.add_argument(
        "--max-conns",
        type=int,
        default=settings.MAX_CONN_NUM,
        help="Maximum number of open connections",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.TIMEOUT,
        help="I/O deadline in seconds (0 = wait forever)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def format_reply(reply: List[str]) -> str:
    """
    Render a reply the way redis-cli does.

    Examples:
        >>> format_reply(["OK"])
        'OK'
        >>> format_reply(["5", "4"])
        '1) "5"\\n2) "4"'
    """
    if not reply:
        return "(empty list)"
    if len(reply) == 1:
        return reply[0] if reply[0] else "(nil)"
    return "\n".join(f'{i}) "{value}"' for i, value in enumerate(reply, start=1))


def print_help():
    """Print help message."""
    print("""
Any server command is sent as typed, for example:
  SET key3 34323523          Store a value
  SET greeting "hello world" Quote values that contain spaces
  GET key3                   Retrieve a value
  LPUSH list5 4 5            Push onto a list
  LRANGE list5 0 -1          Read a whole list
  SELECT 1                   Switch database for one command

Client Commands:
----------------
  help                       Show this help message
  status                     Show pool statistics
  exit                       Exit the client
""")


def main(argv: List[str] = None) -> None:
    """Main entry point for the interactive client."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)
    logger = logging.getLogger(__name__)

    try:
        config = PoolConfig(
            min_conn_num=args.min_conns,
            idle_conn_num=args.idle_conns,
            max_conn_num=args.max_conns,
            timeout=args.timeout,
        )
    except ValueError as exc:
        print(f"Invalid pool configuration: {exc}")
        sys.exit(2)

    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)

    print(f"Connecting to {args.host}:{args.port}/{args.db}...")
    try:
        pool = loop.run_until_complete(
            ConnectionPool.create(args.host, args.port, args.db, config)
        )
    except RespoolError as exc:
        print(f"Failed to connect: {exc}")
        loop.close()
        sys.exit(1)

    print("Connected! Type 'help' for commands.\n")

    try:
        while True:
            try:
                line = input(f"{args.host}:{args.port}[{args.db}]> ").strip()
            except EOFError:
                print("\nGoodbye!")
                break

            if not line:
                continue

            lower_cmd = line.lower()
            if lower_cmd == "help":
                print_help()
                continue
            if lower_cmd in ("exit", "quit"):
                print("Goodbye!")
                break
            if lower_cmd == "status":
                for name, value in pool.stats().items():
                    print(f"  {name}: {value}")
                continue

            try:
                words = shlex.split(line)
            except ValueError as exc:
                print(f"(error) {exc}")
                continue

            try:
                reply = loop.run_until_complete(pool.execute(*words))
            except ServerError as exc:
                print(f"(error) {exc.message}")
                continue
            except RespoolError as exc:
                logger.debug(f"Command failed: {exc!r}")
                print(f"(error) {exc}")
                continue
            print(format_reply(reply))

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        loop.run_until_complete(pool.close())
        loop.close()


if __name__ == "__main__":
    main()
