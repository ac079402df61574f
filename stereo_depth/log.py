"""Logging setup with colored console output.

The library only creates module loggers; applications that want console
output call setup_logger() once.
"""

from __future__ import annotations

import logging
import sys

from colorama import Back, Fore, Style, just_fix_windows_console


__all__ = [
    "ColoredFormatter",
    "setup_logger",
]

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class ColoredFormatter(logging.Formatter):
    """Formatter with color coding for different log levels."""

    COLORS = {
        "DEBUG": Fore.CYAN,
        "INFO": Fore.GREEN,
        "WARNING": Fore.YELLOW,
        "ERROR": Fore.RED,
        "CRITICAL": Fore.RED + Back.WHITE + Style.BRIGHT,
    }

    def __init__(self, fmt: str | None = None, use_colors: bool = True) -> None:
        super().__init__(fmt or DEFAULT_FORMAT)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record with colors.

        The record is copied so other handlers still see plain text.
        """
        if not self.use_colors:
            return super().format(record)

        record = logging.makeLogRecord(record.__dict__)
        color = self.COLORS.get(record.levelname, "")
        record.levelname = f"{color}{record.levelname}{Style.RESET_ALL}"

        if record.levelno >= logging.ERROR:
            record.msg = f"{Fore.RED}{record.msg}{Style.RESET_ALL}"
        elif record.levelno == logging.WARNING:
            record.msg = f"{Fore.YELLOW}{record.msg}{Style.RESET_ALL}"

        return super().format(record)


def setup_logger(
    name: str = "stereo_depth",
    level: str = "INFO",
    fmt: str | None = None,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Set up a logger with colored console output.

    Args:
        name: Logger name (the package logger by default)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        fmt: Custom format string. If None, uses default format.
        use_colors: Whether to use colored output

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent duplicate handlers
    if logger.handlers:
        return logger

    if use_colors:
        just_fix_windows_console()
        formatter: logging.Formatter = ColoredFormatter(fmt, use_colors=True)
    else:
        formatter = logging.Formatter(fmt or DEFAULT_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(getattr(logging, level.upper()))
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    return logger

