"""Logging setup.

Diagnostics (skipped taxids, load timings) go to stderr so that the
listing on stdout stays clean for pipes and JSON consumers.
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

# Handlers installed by configure_logging, removed on reconfiguration
_handlers: list[logging.Handler] = []


def reset_logging() -> None:
    """Remove the handlers installed by configure_logging."""
    root = logging.getLogger()
    for handler in _handlers:
        root.removeHandler(handler)
        handler.close()
    _handlers.clear()


def configure_logging(
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    max_bytes: int = 10_000_000,  # 10MB
    backup_count: int = 3,
) -> None:
    """Configure the root logger.

    Args:
        verbose: Show DEBUG messages on the console.
        quiet: Only show errors on the console.
        log_file: Optional path of a rotating log file (always DEBUG).
        max_bytes: Max log file size before rotation.
        backup_count: Number of rotated files to keep.
    """
    if quiet:
        console_level = logging.ERROR
    elif verbose:
        console_level = logging.DEBUG
    else:
        console_level = logging.WARNING

    reset_logging()
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)  # handlers enforce levels

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(console_level)
    ch.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root.addHandler(ch)
    _handlers.append(ch)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root.addHandler(fh)
        _handlers.append(fh)

    # requests logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
