"""Central logging setup for the project."""
from __future__ import annotations
import logging
import os
import sys

FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def setup_logging(level: int | str | None = None) -> None:
    """
    Configure root logger with sane defaults.

    Args:
        level: Logging level, as a number or a name such as "DEBUG".
            Defaults to REPLY_AGENT_LOG_LEVEL, then INFO.
    """
    if level is None:
        level = os.getenv("REPLY_AGENT_LOG_LEVEL", "INFO")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(FORMAT))
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)
