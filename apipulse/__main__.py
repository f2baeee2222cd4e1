"""Main entry point for the apipulse package.

Usage:
    python -m apipulse load-test https://api.example.com/health 10 30
    python -m apipulse load-test https://api.example.com/items 5 60 --method POST --body '{"a": 1}'
    python -m apipulse history
"""

import sys


def main():
    """Main entry point that dispatches to subcommands."""
    if len(sys.argv) < 2:
        print_help()
        sys.exit(1)

    command = sys.argv[1]

    if command in ["-h", "--help", "help"]:
        print_help()
        sys.exit(0)

    # Remove the command from argv so subcommand parsers see correct args
    sys.argv = [sys.argv[0]] + sys.argv[2:]

    if command == "load-test":
        from .cli.load_test import main as load_test_main

        load_test_main()
    elif command == "history":
        from .cli.history import main as history_main

        history_main()
    else:
        print(f"Unknown command: {command}")
        print_help()
        sys.exit(1)


def print_help():
    """Print help message."""
    print(
        """API Pulse - HTTP load testing

Usage: python -m apipulse <command> [options]

Commands:
    load-test     Run a closed-loop load test against one URL
    history       Show recently tested URLs

Examples:
    # 10 concurrent workers for 30 seconds
    python -m apipulse load-test https://api.example.com/health 10 30

    # POST with a body, custom content type and query parameters
    python -m apipulse load-test https://api.example.com/items 5 60 \\
        --method POST --body "name=test" --content-type text/plain --query "page=1"

    # Show the last five tested URLs
    python -m apipulse history

For command-specific help:
    python -m apipulse <command> --help
"""
    )


if __name__ == "__main__":
    main()
