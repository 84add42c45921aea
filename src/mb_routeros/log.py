"""Logging configuration for mb-routeros."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_path: Path, *, verbose: bool = False) -> None:
    """Configure package logger with a rotating file handler.

    With ``verbose`` the protocol traffic is also echoed to stderr.
    Idempotent: skips if a handler is already attached.
    """
    root = logging.getLogger("mb_routeros")
    if root.handlers:
        return

    handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT))
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    if verbose:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter(fmt="%(message)s"))
        root.addHandler(console)


def mask_word(word: str) -> str:
    """Hide the value of a password attribute word before it is logged."""
    if word.startswith("=password="):
        return "=password=***"
    return word
