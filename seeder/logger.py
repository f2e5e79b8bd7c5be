"""Console logging for the seeder CLI.

Every module logs through ``logging.getLogger(__name__)``; this module owns
the single handler attached to the ``seeder`` logger, the mapping from the
config's ``log_level`` names to ``logging`` levels, and ``step()`` which
reports the progress of one phase of a run.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

ROOT_LOGGER = "seeder"

# One above CRITICAL: nothing gets through
SILENT = logging.CRITICAL + 10

LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "silent": SILENT,
}

# Custom level between INFO and WARNING for completed steps
SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_SYMBOLS = {
    logging.DEBUG: "🛠",
    logging.INFO: "ℹ",
    SUCCESS: "✔",
    logging.WARNING: "⚠",
    logging.ERROR: "⨯",
    logging.CRITICAL: "⨯",
}

_COLORS = {
    logging.DEBUG: "\033[35m",  # magenta
    logging.INFO: "\033[34m",  # blue
    SUCCESS: "\033[32m",  # green
    logging.WARNING: "\033[33m",  # yellow
    logging.ERROR: "\033[31m",  # red
    logging.CRITICAL: "\033[31m",
}
_RESET = "\033[0m"

logger = logging.getLogger(__name__)


def parse_log_level(name: Optional[str]) -> int:
    """Map a config level name to a ``logging`` level, defaulting to INFO."""
    if not name:
        return logging.INFO
    return LOG_LEVELS.get(name.strip().lower(), logging.INFO)


class ConsoleFormatter(logging.Formatter):
    def __init__(self, use_color: bool = False):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = f"{_SYMBOLS.get(record.levelno, '')} {super().format(record)}"
        if self.use_color:
            return f"{_COLORS.get(record.levelno, '')}{message}{_RESET}"
        return message


def configure_logging(level: int, stream=None) -> logging.Logger:
    """Attach (or replace) the console handler and set the level.

    Safe to call more than once: the CLI configures INFO before the config
    file is read, then reconfigures with the level the config asks for.
    """
    stream = stream or sys.stderr
    root = logging.getLogger(ROOT_LOGGER)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(stream)
    handler.setFormatter(ConsoleFormatter(use_color=hasattr(stream, "isatty") and stream.isatty()))
    root.addHandler(handler)
    root.setLevel(level)
    return root


@contextmanager
def step(text: str, success_text: str, fail_text: str) -> Iterator[None]:
    """Report one phase of a run: started, succeeded, or failed.

    The exception is logged at debug level only and always re-raised;
    the caller decides what a failure means.
    """
    logger.info("%s...", text)
    try:
        yield
    except Exception as exc:
        logger.error(fail_text)
        logger.debug("%s: %r", fail_text, exc, exc_info=True)
        raise
    logger.log(SUCCESS, success_text)
