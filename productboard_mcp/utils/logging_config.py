"""Logging setup for the MCP server.

The stdio transport speaks JSON-RPC over stdout, so any log line written there
would corrupt the protocol stream. All handlers therefore target stderr or a
file.
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Third-party loggers that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    name: str = "productboard_mcp",
    level: str | None = None,
    log_file: Path | None = None,
) -> logging.Logger:
    """Route all logging to stderr and, optionally, a log file.

    Replaces any handlers installed earlier (including by imported libraries)
    so nothing is left writing to stdout.

    Args:
        name: Name of the logger to return
        level: Level name such as "DEBUG" (falls back to LOG_LEVEL, then INFO)
        log_file: File that also receives every record; parent dirs are created

    Returns:
        The named logger
    """
    level_name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level_name),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    # One line per probe request would drown the discovery summary
    for noisy in NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger(name)
