"""
Logging setup for seeding runs.

Every module logs through `logging.getLogger(__name__)`; this module only
decides where the `apicseed` records go, based on the `options` config:

- console output unless `silent`, debug records only with `debug`,
  request/response dumps (VERBOSE level) only with `verbose`;
- a `[HH:MM:SS:mmm] ` prefix unless `no_ts`;
- a log file when `log_to_file` is set, receiving every record.

Example:
    >>> from apicseed import SEED, configure_logging
    >>> SEED.configure(options={"debug": True, "log_to_file": "output/run.log"})
    >>> configure_logging()
"""

from __future__ import annotations

import logging
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from apicseed._config import OptionsConfig

# Request/response dumps, below DEBUG
VERBOSE = 5
logging.addLevelName(VERBOSE, "VERBOSE")

ROOT_LOGGER_NAME = "apicseed"
DEFAULT_LOG_DIR = Path("output")

_LABELS = {
    VERBOSE: "Verbose",
    logging.DEBUG: "Debug",
    logging.INFO: "Info",
    logging.WARNING: "Warning",
    logging.ERROR: "Error",
    logging.CRITICAL: "Error",
}
_LABEL_WIDTH = len("Warning: ")


class SeedFormatter(logging.Formatter):
    """
    Formats records as `[HH:MM:SS:mmm]    Info: message`.

    Args:
        timestamps: If False, the timestamp prefix is omitted.
    """

    def __init__(self, timestamps: bool = True):
        super().__init__()
        self.timestamps = timestamps

    def format(self, record: logging.LogRecord) -> str:
        label = f"{_LABELS.get(record.levelno, record.levelname.title())}: ".rjust(_LABEL_WIDTH)
        message = f"{label}{record.getMessage()}"
        if self.timestamps:
            created = datetime.fromtimestamp(record.created)
            message = f"[{created:%H:%M:%S}:{int(record.msecs):03d}] {message}"
        if record.exc_info:
            message = f"{message}\n{self.formatException(record.exc_info)}"
        return message


class _ConsoleGate(logging.Filter):
    """Drops DEBUG records unless debug is on, and VERBOSE records unless verbose is on."""

    def __init__(self, debug: bool, verbose: bool):
        super().__init__()
        self.debug = debug
        self.verbose = verbose

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno == VERBOSE:
            return self.verbose
        if record.levelno == logging.DEBUG:
            return self.debug
        return True


def default_log_file() -> Path:
    return DEFAULT_LOG_DIR / f"seed_{int(time.time() * 1000)}.log"


def configure_logging(options: OptionsConfig | None = None) -> logging.Logger:
    """
    (Re)configure handlers of the `apicseed` logger from the options config.

    Safe to call more than once: handlers installed by a previous call are
    replaced.

    Args:
        options: Options to apply. Defaults to `SEED.config.options`.

    Returns:
        The configured `apicseed` logger.
    """
    if options is None:
        from apicseed._config import SEED
        options = SEED.config.options

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root.handlers):
        if getattr(handler, "_apicseed", False):
            root.removeHandler(handler)
            handler.close()

    root.setLevel(VERBOSE)
    root.propagate = False

    if not options.silent:
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(VERBOSE)
        console.addFilter(_ConsoleGate(debug=options.debug, verbose=options.verbose))
        console.setFormatter(SeedFormatter(timestamps=not options.no_ts))
        console._apicseed = True  # type: ignore[attr-defined]
        root.addHandler(console)

    if options.log_to_file:
        log_path = Path(options.log_to_file) if isinstance(options.log_to_file, str) else default_log_file()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setLevel(VERBOSE)
        file_handler.setFormatter(SeedFormatter(timestamps=True))
        file_handler._apicseed = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)

    return root
