"""
Logging for the setup wizard engine.

Everything logs under the ``setupwiz`` namespace. Console output goes to
stderr so the CLI can write configuration text to stdout.
"""

import logging
import sys
from typing import Optional, TextIO

RESET = "\033[0m"

DEBUG_CONSOLE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"
FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s:%(lineno)d - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name per log level."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[2m\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[1m\033[41m\033[37m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno)
        if color is None:
            return super().format(record)
        # other handlers share the record
        colored = logging.makeLogRecord(record.__dict__)
        colored.levelname = f"{color}{record.levelname}{RESET}"
        return super().format(colored)


def _console_formatter(numeric_level: int, stream: TextIO) -> logging.Formatter:
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = DEBUG_CONSOLE_FORMAT, "%H:%M:%S"
    else:
        fmt, datefmt = CONSOLE_FORMAT, None
    if getattr(stream, "isatty", lambda: False)():
        return ColoredFormatter(fmt, datefmt)
    return logging.Formatter(fmt, datefmt)


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """
    Configure the ``setupwiz`` logger.

    Args:
        level: Log level name; unknown names mean WARNING
        log_file: Optional file that receives the same records, uncolored
        stream: Console stream, stderr by default. Colors are used only when
            the stream is a terminal.
    """
    numeric_level = getattr(logging, level.upper(), logging.WARNING)
    stream = stream or sys.stderr

    root_logger = logging.getLogger("setupwiz")
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(stream)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(_console_formatter(numeric_level, stream))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        root_logger.addHandler(file_handler)


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` under the ``setupwiz`` namespace."""
    if not name.startswith("setupwiz"):
        name = f"setupwiz.{name}"
    return logging.getLogger(name)


def format_exception_summary(error: BaseException, *, max_length: int = 180) -> str:
    """
    One-line exception summary used as the wizard's parse error message.

    Whitespace in the message (YAML errors span several lines) is collapsed,
    and the result is cut to ``max_length`` with a trailing ellipsis.
    """
    exception_name = error.__class__.__name__
    detail = " ".join(str(error or "").split())
    summary = exception_name if not detail else f"{exception_name}: {detail}"
    if max_length > 3 and len(summary) > max_length:
        return summary[: max_length - 3].rstrip() + "..."
    return summary


def configure_logging_from_args(
    verbose: bool = False,
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    default_level: str = "WARNING",
) -> None:
    """
    Configure logging from CLI flags.

    ``--log-level`` wins over ``--verbose``; with neither, ``default_level``
    (normally the settings file's ``log_level``) applies.
    """
    if log_level:
        level = log_level.upper()
    elif verbose:
        level = "DEBUG"
    else:
        level = default_level.upper()

    setup_logging(level=level, log_file=log_file)
