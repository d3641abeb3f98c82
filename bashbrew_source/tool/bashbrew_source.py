"""Command line tool for resolving Dockerfiles from a bashbrew library."""

import argparse
import asyncio
import logging
import sys
import traceback

from bashbrew_source.exceptions import BashbrewException
from . import get

_LOGGER = logging.getLogger(__name__)


def _make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Command line utility for resolving Dockerfiles of images.",
    )
    parser.add_argument(
        "--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    )

    subparsers = parser.add_subparsers(dest="command", help="Command", required=True)

    get.GetAction.register(subparsers)
    get.ListAction.register(subparsers)
    return parser


def main() -> None:
    """bashbrew-source command line tool main entry point."""
    parser = _make_parser()
    args = parser.parse_args()

    if args.log_level:
        logging.basicConfig(level=args.log_level)

    action = args.cls()
    try:
        asyncio.run(action.run(**vars(args)))
    except BashbrewException as err:
        if args.log_level == "DEBUG":
            traceback.print_exc(file=sys.stderr)
        print("bashbrew-source error: ", err, file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
