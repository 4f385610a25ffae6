#!/usr/bin/env python3
"""
Interactive Test Client for HTCache

A simple command-line client for manually testing the HTCache server.

Usage:
    python scripts/client.py                                  # http://localhost:3030
    python scripts/client.py --endpoint http://10.0.0.2:8080  # Specific server

Commands:
    PUT <key> <value> [ttl] [content-type]   - Store a value
    GET <key>                                - Retrieve a value
    help                                     - Show this help
    exit                                     - Exit client
"""

import argparse

import httpx

# Enable command history with arrow keys (works on Unix systems)
try:
    import readline  # noqa: F401
except ImportError:
    pass  # readline not available on Windows by default

from htcache.client import HTCacheClient, HTCacheError


def print_help():
    """Print help message."""
    print("""
HTCache Commands:
-----------------
  PUT <key> <value> [ttl] [content-type]   Store a value (optional TTL in seconds)
  GET <key>                                Retrieve the value for a key

Client Commands:
----------------
  help                      Show this help message
  exit                      Exit the client

Examples:
---------
  PUT mykey myvalue                         Store "myvalue" under "mykey"
  PUT tempkey tempval 60                    Store with 60 second TTL
  PUT doc {"a":1} 120 application/json      Store JSON for two minutes
  GET mykey                                 Get value for "mykey"
""")


def run_command(client: HTCacheClient, command: str) -> str:
    """Execute one shell command and return the line to print."""
    parts = command.split()
    verb = parts[0].upper()

    if verb == "GET" and len(parts) == 2:
        cached = client.get(parts[1])
        if cached is None:
            return "(not found)"
        return f"{cached.text}  [{cached.content_type}, age {cached.age}s]"

    if verb == "PUT" and 3 <= len(parts) <= 5:
        ttl = int(parts[3]) if len(parts) >= 4 else None
        content_type = parts[4] if len(parts) == 5 else None
        client.set(parts[1], parts[2], ttl=ttl, content_type=content_type)
        return "stored"

    return "ERROR: invalid command (type 'help')"


def main():
    parser = argparse.ArgumentParser(
        description="Interactive test client for HTCache"
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default="http://localhost:3030",
        help="Server base URL (default: http://localhost:3030)"
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=5.0,
        help="Request timeout in seconds (default: 5.0)"
    )

    args = parser.parse_args()

    print("HTCache Client")
    print("==============")
    print(f"Using {args.endpoint}. Type 'help' for commands.\n")

    client = HTCacheClient(args.endpoint, timeout=args.timeout)

    try:
        while True:
            try:
                command = input(">>> ").strip()

                if not command:
                    continue

                lower_cmd = command.lower()

                if lower_cmd == "help":
                    print_help()
                    continue

                if lower_cmd in ("exit", "quit"):
                    print("Goodbye!")
                    break

                try:
                    print(run_command(client, command))
                except ValueError as e:
                    print(f"ERROR: {e}")
                except HTCacheError as e:
                    print(f"ERROR: {e}")
                except httpx.HTTPError as e:
                    print(f"ERROR: {e}")
                    print("  Is the server running? Try: python -m htcache.server")

            except EOFError:
                print("\nGoodbye!")
                break

    except KeyboardInterrupt:
        print("\n\nInterrupted. Goodbye!")
    finally:
        client.close()


if __name__ == "__main__":
    main()
