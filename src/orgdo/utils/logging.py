"""Structured logging for orgdo.

Every command appends JSON lines to ``~/.cache/orgdo/logs/orgdo.log``; the
terminal only ever shows status and error messages. Event names are
snake_case verbs (``document_loaded``, ``atomic_write_failed``) with the
file path and counts as key-value context.

``ORGDO_LOG_LEVEL`` picks the threshold:

- DEBUG: config resolution, every file parsed and every edit
- INFO: documents loaded and saved, commands run (default)
- WARNING: skipped files, defaults that could not be written
- ERROR: read and write failures

To follow a session::

    ORGDO_LOG_LEVEL=DEBUG orgdo show --multi ~/org
    tail -f ~/.cache/orgdo/logs/orgdo.log | jq .
"""

import os
from pathlib import Path
from typing import Any

import structlog

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def log_file_path() -> Path:
    """Log file location, creating its directory."""
    log_dir = Path.home() / ".cache" / "orgdo" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / "orgdo.log"


def resolve_log_level(verbose: bool = False) -> str:
    """Threshold from ``ORGDO_LOG_LEVEL``; ``--verbose`` lowers the default to DEBUG.

    Unknown names fall back to the default.
    """
    default = "DEBUG" if verbose else "INFO"
    level = os.environ.get("ORGDO_LOG_LEVEL", default).upper()
    return level if level in LEVELS else default


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to the JSON log file."""
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(resolve_log_level(verbose)),
        context_class=dict,
        logger_factory=structlog.WriteLoggerFactory(file=open(log_file_path(), "a")),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Named structured logger, e.g. ``get_logger(__name__).info("document_saved", path=p)``."""
    return structlog.get_logger(name)
