"""
Logging setup shared by every StickerGuard module.

Each named logger gets two handlers: a prompt_toolkit console handler, so log
lines print cleanly above the operator prompt, and a rotating file handler
writing one file per session under ``logs/``.

Environment:
    STICKERGUARD_LOG_DIR: Directory for session log files.
    STICKERGUARD_CONSOLE_LEVEL: Minimum level printed to the console (default DEBUG).
"""

import logging
from logging.handlers import RotatingFileHandler
import os
import sys
from pathlib import Path
from datetime import datetime
from prompt_toolkit import print_formatted_text
from prompt_toolkit.formatted_text import ANSI

# -------------------- Configuration --------------------
LOGS_DIR: Path = Path(
    os.getenv("STICKERGUARD_LOG_DIR") or (Path(__file__).parents[3] / "logs")
).resolve()
LOGS_DIR.mkdir(parents=True, exist_ok=True)

LOG_FORMAT = "[%(asctime)s] [%(levelname)s] [%(name)s:%(funcName)s:%(lineno)d] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H-%M-%S"

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUPS = 3

# A log file touched this recently belongs to the current session (quick restarts append)
SESSION_REUSE_SECONDS = 60

LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[38;5;88m",
}
RESET_COLOR = "\033[0m"

NOISY_LOGGERS = (
    "urllib3", "PIL", "PIL.PngImagePlugin",
    "discord", "discord.gateway", "discord.client", "discord.http",
    "websockets", "aiohttp", "asyncio",
)

_session_log_file: Path | None = None


# -------------------- Formatting --------------------
class ColorFormatter(logging.Formatter):
    """Formatter that colours the whole line by record level."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        color = LEVEL_COLORS.get(record.levelno)
        return f"{color}{line}{RESET_COLOR}" if color else line


class PromptToolkitHandler(logging.Handler):
    """Handler that prints records with ``print_formatted_text``.

    Args:
        formatter: Formatter applied to each record, if given.
    """

    def __init__(self, formatter: logging.Formatter | None = None):
        super().__init__()
        if formatter is not None:
            self.setFormatter(formatter)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            print_formatted_text(ANSI(self.format(record)))
        except Exception:
            self.handleError(record)


def should_use_color() -> bool:
    """Return True when stderr is an interactive terminal."""
    try:
        return sys.stderr.isatty()
    except Exception:
        return False


def console_level() -> int:
    """Resolve ``STICKERGUARD_CONSOLE_LEVEL`` to a logging level, DEBUG if unset or unknown."""
    level = logging.getLevelName(os.getenv("STICKERGUARD_CONSOLE_LEVEL", "DEBUG").strip().upper())
    return level if isinstance(level, int) else logging.DEBUG


# -------------------- Session log file --------------------
def get_log_filepath() -> Path:
    """
    Return the log file shared by all loggers in this process.

    Today's most recently modified log is reused when it was written within
    ``SESSION_REUSE_SECONDS``; otherwise a new timestamped file is chosen.
    The choice is made once and cached.
    """
    global _session_log_file

    if _session_log_file is None:
        now = datetime.now()
        todays_logs = sorted(
            LOGS_DIR.glob(f"{now:%Y-%m-%d}*.log"),
            key=lambda p: p.stat().st_mtime,
        )
        if todays_logs and now.timestamp() - todays_logs[-1].stat().st_mtime < SESSION_REUSE_SECONDS:
            _session_log_file = todays_logs[-1]
        else:
            _session_log_file = LOGS_DIR / f"{now.strftime(DATE_FORMAT)}.log"

    return _session_log_file


# -------------------- Logger setup --------------------
def _console_handler() -> logging.Handler:
    formatter_class = ColorFormatter if should_use_color() else logging.Formatter
    handler = PromptToolkitHandler(formatter_class(LOG_FORMAT, datefmt=DATE_FORMAT))
    handler.setLevel(console_level())
    return handler


def _file_handler() -> logging.Handler:
    handler = RotatingFileHandler(
        get_log_filepath(),
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


def setup_logger(logger_name: str) -> logging.Logger:
    """Attach the console and file handlers to ``logger_name`` once and return it.

    Parameters
    ----------
    logger_name:
        Name of the logger to configure.

    Returns
    -------
    logging.Logger
        The configured logger; repeated calls return it unchanged.
    """
    logger = logging.getLogger(logger_name)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(_console_handler())
    logger.addHandler(_file_handler())
    return logger


def get_logger(logger_name: str) -> logging.Logger:
    """Return the StickerGuard logger called ``logger_name``."""
    return setup_logger(logger_name)


def quiet_noisy_loggers(names=NOISY_LOGGERS) -> None:
    """Limit chatty third-party loggers to errors and detach them from the root."""
    for name in names:
        noisy = logging.getLogger(name)
        noisy.setLevel(logging.ERROR)
        noisy.propagate = False
        noisy.handlers = []


# -------------------- Uncaught exceptions --------------------
def handle_exception(exception_type, exception_instance, exception_traceback) -> None:
    """
    ``sys.excepthook`` that logs uncaught exceptions.

    KeyboardInterrupt goes to the default hook so Ctrl+C still exits quietly.
    """
    if issubclass(exception_type, KeyboardInterrupt):
        sys.__excepthook__(exception_type, exception_instance, exception_traceback)
        return
    logging.error("Uncaught exception", exc_info=(exception_type, exception_instance, exception_traceback))


quiet_noisy_loggers()
sys.excepthook = handle_exception
