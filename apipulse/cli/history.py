"""CLI for the recent URL history."""

import argparse
import asyncio
from typing import List, Optional

from ..history import UrlHistory


def main(argv: Optional[List[str]] = None):
    """Print the most recently tested URLs, newest first."""
    parser = argparse.ArgumentParser(
        prog="apipulse history",
        description="Show recently tested URLs",
    )
    parser.add_argument(
        "--file",
        type=str,
        default=None,
        help="History file (default: $APIPULSE_HOME/url_history.json)",
    )
    args = parser.parse_args(argv)

    history = UrlHistory(args.file)
    urls = asyncio.run(history.load())

    if not urls:
        print("No URLs in history.")
        return

    print("Recent URLs:")
    for i, url in enumerate(urls, 1):
        print(f"  {i}. {url}")


if __name__ == "__main__":
    main()
