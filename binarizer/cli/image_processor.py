#!/usr/bin/env python3
"""
Command-line entry point of the image binarizer.

Examples:
    image-binarizer -P picture.bmp
    image-binarizer -P scans/ -M 8 -T 100 -F
    image-binarizer help
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from ..exceptions import InvalidConfig
from ..models.configuration import Configuration
from ..pipeline.batch_dispatcher import dispatch
from ..settings import (
    DEFAULT_POOL_SIZE,
    DEFAULT_THRESHOLD,
    LOG_LEVEL,
    LOG_FORMAT,
    LOG_DATEFMT,
    POOL_SIZE_MIN,
    POOL_SIZE_MAX,
    THRESHOLD_MIN,
    THRESHOLD_MAX,
)

logger = logging.getLogger(__name__)

HELP_TEXT = f"""usage:
   [-M [<numberOfThreads>]] - if present, the application will use numberOfThreads only if the given path is a directory.
       If only the [-M] argument is present, the default number of threads is {DEFAULT_POOL_SIZE}.
       If [-M] is not specified, the application will use only the main thread.
   [-T <staticThreshold>] - if present, the binarization algorithm will use the given static threshold.
       The [-T] argument must be followed by the static threshold.
       If [-T] is not specified, the default static threshold will be set to {DEFAULT_THRESHOLD}.
   -P <path> - mandatory argument, the path can be either an image file or a directory containing image files.
       The path can be relative or absolute. If containing spaces, it must be enclosed in double quotes.
       !!! The files must have the extension bmp and contain 24bit images!
   [-F] - if present, the input images will also be converted to grayscale first (if needed).
       If the input image (or any image from the directory) is not grayscale and this flag is not present,
       processing of that image fails.

   If the first argument is 'help', the application will only print CLI usage info."""


class _StrictParser(argparse.ArgumentParser):
    """Raises instead of printing usage and exiting, so main() owns all diagnostics."""

    def error(self, message):
        raise InvalidConfig(message)


class _StoreOnce(argparse.Action):
    """Store the flag's value and reject a second occurrence of the same flag."""

    def __call__(self, parser, namespace, values, option_string=None):
        seen = f"_seen_{self.dest}"
        if getattr(namespace, seen, False):
            raise argparse.ArgumentError(self, "argument given more than once")
        setattr(namespace, seen, True)
        # argparse takes "-5" as a value; a value must never start with "-".
        if isinstance(values, str) and values.startswith("-"):
            raise argparse.ArgumentError(self, f"expected a value, got the flag-like token {values!r}")
        setattr(namespace, self.dest, True if self.nargs == 0 else values)


def build_parser() -> argparse.ArgumentParser:
    parser = _StrictParser(prog="image-binarizer", add_help=False, allow_abbrev=False)
    parser.add_argument("-P", dest="path", action=_StoreOnce, metavar="<path>")
    # const "" marks "-M given without a value"
    parser.add_argument("-M", dest="threads", action=_StoreOnce, nargs="?", const="", metavar="<n>")
    parser.add_argument("-T", dest="threshold", action=_StoreOnce, metavar="<n>")
    parser.add_argument("-F", dest="force", action=_StoreOnce, nargs=0, default=False)
    return parser


def _bounded_int(raw: str, low: int, high: int, fallback: int, what: str) -> int:
    """
    Parse *raw* as an integer. Non-numeric input is a hard error; an
    out-of-range value falls back to *fallback* with a warning.
    """
    try:
        value = int(raw)
    except ValueError:
        raise InvalidConfig(f"The {what} must be a number between {low} and {high}!") from None
    if not low <= value <= high:
        logger.warning(
            f"The {what} must be between {low} and {high}. Rolling back to the default {what} of {fallback}."
        )
        return fallback
    return value


def parse_args(argv: Sequence[str]) -> Configuration:
    """
    Turn CLI tokens into a validated Configuration.

    Raises:
        InvalidConfig: on any unknown, duplicated, missing or malformed argument.
    """
    if not argv:
        raise InvalidConfig("No arguments given!")

    args = build_parser().parse_args(list(argv))

    if args.path is None:
        raise InvalidConfig("Mandatory parameter [-P] is not present!")
    path = Path(args.path)
    if not path.exists():
        raise InvalidConfig("The given path doesn't exist! Make sure to escape special characters!")

    multithreaded = args.threads is not None
    pool_size = DEFAULT_POOL_SIZE
    if args.threads:
        pool_size = _bounded_int(args.threads, POOL_SIZE_MIN, POOL_SIZE_MAX, DEFAULT_POOL_SIZE, "number of threads")

    threshold = DEFAULT_THRESHOLD
    if args.threshold is not None:
        threshold = _bounded_int(args.threshold, THRESHOLD_MIN, THRESHOLD_MAX, DEFAULT_THRESHOLD, "static threshold")

    return Configuration(
        input_path=path,
        multithreaded=multithreaded,
        pool_size=pool_size,
        threshold=threshold,
        force_grayscale=args.force,
    )


def print_error(argv: Sequence[str]) -> None:
    logger.error(f"Wrong input arguments: '{list(argv)}' !")
    logger.error("Type 'help' for more information.")


def _configure_logging() -> None:
    level = getattr(logging, LOG_LEVEL, logging.INFO)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)


def main(argv: Optional[List[str]] = None) -> int:
    argv = sys.argv[1:] if argv is None else list(argv)
    _configure_logging()

    if argv and argv[0] == "help":
        print(HELP_TEXT)
        return 0

    try:
        config = parse_args(argv)
        dispatch(config)
    except InvalidConfig as err:
        logger.error(str(err))
        print_error(argv)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
