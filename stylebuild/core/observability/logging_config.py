"""
Logging configuration — one-time setup for the build entrypoint.

main.py calls ``resolve_level`` with the CLI flags and then
``setup_logging``. Modules only ever do
``logger = logging.getLogger(__name__)``.

Level precedence:
    --debug  >  --verbose  >  --quiet  >  STYLEBUILD_LOG_LEVEL  >  WARNING

A log file (STYLEBUILD_LOG_FILE) always gets the full format, at
STYLEBUILD_LOG_FILE_LEVEL or the console level.
"""

from __future__ import annotations

import logging
import os
import sys

LEVEL_ENV = "STYLEBUILD_LOG_LEVEL"
FILE_ENV = "STYLEBUILD_LOG_FILE"
FILE_LEVEL_ENV = "STYLEBUILD_LOG_FILE_LEVEL"

# ── Formats ─────────────────────────────────────────────────────

# (format, datefmt) per console level; WARNING and above print bare messages
_CONSOLE_FORMATS = {
    logging.DEBUG: ("%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s", "%H:%M:%S"),
    logging.INFO: ("%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
}
_FMT_PLAIN = "%(message)s"

_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

# Chatty below WARNING: template loading, executor worker shutdown
_NOISY_LOGGERS = ("jinja2", "concurrent.futures")


def resolve_level(debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level name from CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(LEVEL_ENV, "WARNING")


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
    quiet_third_party: bool = True,
) -> None:
    """Configure the root logger for the whole process.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional log file path; defaults to $STYLEBUILD_LOG_FILE.
        log_file_level: Level for the file; defaults to
            $STYLEBUILD_LOG_FILE_LEVEL, then to ``level``.
        quiet_third_party: Hold library loggers at WARNING unless the
            console is at DEBUG.
    """
    console_level = _parse_level(level)
    log_file = log_file or os.environ.get(FILE_ENV)
    log_file_level = log_file_level or os.environ.get(FILE_LEVEL_ENV)

    root = logging.getLogger()
    root.handlers.clear()

    fmt, datefmt = _console_format(console_level)
    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
    root.addHandler(console)

    root_level = console_level
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(handler)
        root_level = min(root_level, file_level)
    root.setLevel(root_level)

    if quiet_third_party and console_level > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    # warnings.warn() output from libraries goes through the handlers above
    logging.captureWarnings(True)
    logging.raiseExceptions = False


def _console_format(level: int) -> tuple[str, str | None]:
    for threshold in sorted(_CONSOLE_FORMATS):
        if level <= threshold:
            return _CONSOLE_FORMATS[threshold]
    return _FMT_PLAIN, None


def _parse_level(level: str | None) -> int:
    """Level name to its numeric value; unknown names mean WARNING."""
    numeric = getattr(logging, (level or "").upper(), None)
    return numeric if isinstance(numeric, int) else logging.WARNING
