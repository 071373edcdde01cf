"""Command-line argument parsing for share-keeper."""

import argparse
from typing import Optional, Sequence

from share_keeper.__version__ import __version__


def parse_args(argv: Optional[Sequence[str]] = None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Keep every git repository in a shared folder in sync",
        epilog="Settings can also be stored as JSON in ~/.config/share-keeper/share-keeper.json",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument("--version", action="version", version=f"share-keeper {__version__}")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--root", metavar="PATH", help="Shared folder holding the repositories")
    parser.add_argument("--config-dir", metavar="PATH", help="Folder for settings and keys")
    parser.add_argument("--config", metavar="FILE", help="JSON settings file")
    parser.add_argument(
        "--status",
        action="store_true",
        help="Print the current state and folder size once, then exit",
    )
    parser.add_argument(
        "--toggle-notifications",
        action="store_true",
        help="Turn new-commit notifications on or off, then exit",
    )
    parser.add_argument("--set-name", metavar="NAME", help="Store the user name, then exit")
    parser.add_argument("--set-email", metavar="EMAIL", help="Store the user email, then exit")
    parser.add_argument(
        "--poll-interval",
        type=float,
        metavar="SECONDS",
        help="How often workers look for local changes (default: 5)",
    )
    parser.add_argument(
        "--fetch-interval",
        type=float,
        metavar="SECONDS",
        help="How often workers fetch from their remote (default: 60)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Threads used to open repositories at startup (default: auto-detect)",
    )
    parser.add_argument(
        "--sequential",
        action="store_true",
        help="Open repositories one at a time at startup",
    )

    return parser.parse_args(argv)
