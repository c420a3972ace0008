import logging
import sys
from logging import Logger, StreamHandler
from typing import Final


LOG_FORMAT: Final[str] = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logger(name: str = "finflow", level: str = "INFO") -> Logger:
    """Configure root logging to stdout and return a named logger.

    Unknown level names fall back to INFO.
    """
    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[StreamHandler(sys.stdout)],
        force=True,  # streamlit reruns the script, replace previous handlers
    )

    return logging.getLogger(name)
