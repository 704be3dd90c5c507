# cli.py
import argparse
import os
import sys
from typing import List, Optional

from . import __version__, operations
from .config import Config
from .logger import set_level
from .operations import RunOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="clib-search",
        usage="%(prog)s [options] [query ...]",
        description="Search the clib package registry",
    )
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-n", "--no-color", dest="no_color", action="store_true", help="don't colorize output")
    parser.add_argument("-c", "--skip-cache", dest="skip_cache", action="store_true", help="skip the search cache")
    parser.add_argument("-j", "--json", action="store_true", help="generate a serialized JSON output")
    parser.add_argument("-v", "--verbose", action="store_true", help="print debug messages to stderr")
    parser.add_argument("query", nargs="*", help="terms matched against name, description, repo and url")
    return parser


def options_from_args(args: argparse.Namespace, isatty: bool) -> RunOptions:
    return RunOptions(
        color=not args.no_color and isatty,
        use_cache=not args.skip_cache,
        json=args.json,
        verbose=args.verbose,
    )


def _discard_stdout() -> None:
    # stdout is flushed again at interpreter exit
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    config = Config()
    options = options_from_args(args, sys.stdout.isatty())
    set_level("DEBUG" if options.verbose else config.log_level)

    try:
        rc = operations.search(options, args.query, config)
    except BrokenPipeError:
        # reader went away (e.g. piped into head)
        _discard_stdout()
        rc = 1
    sys.exit(rc)


if __name__ == "__main__":
    main()
