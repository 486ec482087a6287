"""Logging configuration for the tgo CLI."""

import logging
import os
import sys
from typing import Optional

from .models import DEFAULT_LOG_DIR

LOG_DIR_ENV = "TGO_LOG_DIR"

_console_handler: Optional[logging.Handler] = None


def setup_logging(
    *,
    log_dir: Optional[str] = None,
    console_level: int = logging.WARNING,
    file_level: int = logging.DEBUG,
) -> None:
    """
    Configure logging with:
    - Console handler on stderr, quiet by default (WARNING+)
    - File handler with full DEBUG logs

    Call this once, before the first command runs. If the log directory
    cannot be created, only the console handler is installed.
    """
    global _console_handler

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(fmt)
    root.addHandler(ch)
    _console_handler = ch

    log_dir = log_dir or os.environ.get(LOG_DIR_ENV) or DEFAULT_LOG_DIR
    try:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, "tgo.log"), encoding="utf-8")
    except OSError as exc:
        logging.getLogger(__name__).warning("File logging disabled (%s): %s", log_dir, exc)
        return
    fh.setLevel(file_level)
    fh.setFormatter(fmt)
    root.addHandler(fh)


def mute_console() -> None:
    """Stop console logging, e.g. while curses owns the screen."""
    if _console_handler is not None:
        logging.getLogger().removeHandler(_console_handler)


def unmute_console() -> None:
    if _console_handler is not None and _console_handler not in logging.getLogger().handlers:
        logging.getLogger().addHandler(_console_handler)
