"""Logging setup for the shopscan CLI.

Records go to stderr and optionally to a file. Stdout carries only command
output, so ``--json`` documents can be piped without log lines mixed in.
"""

import logging
import sys
from pathlib import Path
from typing import List, Optional, Union

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# HTTP client loggers; every provider call logs here at DEBUG
HTTP_LOGGERS = ("urllib3", "requests", "charset_normalizer")


def resolve_level(level: Union[str, int, None]) -> int:
    """Turn a level name or number into a logging level.

    Unknown names fall back to INFO.
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName((level or "INFO").strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    level: Union[str, int, None] = "INFO",
    log_file: Optional[str] = None,
    log_http: bool = False,
) -> logging.Logger:
    """Configure the root logger for a CLI run.

    Args:
        level: Level name (DEBUG, INFO, ...) or number
        log_file: Also append records to this file; parent directories are created
        log_http: Let HTTP client loggers through at ``level`` (WARNING otherwise)

    Returns:
        The ``shopscan`` package logger
    """
    numeric_level = resolve_level(level)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    logging.basicConfig(
        level=numeric_level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,  # Replace handlers from earlier runs in the same process
    )

    http_level = numeric_level if log_http else max(numeric_level, logging.WARNING)
    for name in HTTP_LOGGERS:
        logging.getLogger(name).setLevel(http_level)

    return logging.getLogger("shopscan")
