"""Logging setup for maildirbox commands."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .config import ConfigError, LoggingConfig

FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
MAIN_LOG_NAME = "maildirbox.log"
DEBUG_LOG_NAME = "debug.log"
LEVEL_NAMES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConsoleFormatter(logging.Formatter):
    """Prefix console lines with a one-letter level marker, coloured on a TTY."""

    MARKERS: dict[int, tuple[str, str]] = {
        logging.DEBUG: ("D", "\x1b[36m"),
        logging.INFO: ("I", "\x1b[32m"),
        logging.WARNING: ("!", "\x1b[33m"),
        logging.ERROR: ("X", "\x1b[31m"),
        logging.CRITICAL: ("X", "\x1b[35m"),
    }
    RESET = "\x1b[0m"

    def __init__(self, use_color: bool) -> None:
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        marker, color = self.MARKERS.get(record.levelno, ("?", "\x1b[37m"))
        text = super().format(record)
        if self.use_color:
            marker = f"{color}{marker}{self.RESET}"
        return f"{marker} {text}"


def configure_logging(
    logging_config: LoggingConfig,
    root_dir: Path,
    *,
    debug: bool = False,
) -> None:
    """Install console and rotating file handlers on the root logger.

    ``debug`` forces DEBUG level regardless of the configured one.
    """

    level = logging.DEBUG if debug else parse_level(logging_config.level)
    log_dir = (root_dir / "logs").expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(ConsoleFormatter(_is_tty(console)))
    handlers: list[logging.Handler] = [
        console,
        _file_handler(log_dir / MAIN_LOG_NAME, logging.INFO),
    ]
    if logging_config.debug_file:
        handlers.append(_file_handler(log_dir / DEBUG_LOG_NAME, logging.DEBUG))

    logging.basicConfig(level=level, handlers=handlers, force=True)


def parse_level(level: str) -> int:
    """Translate a configured level name into a logging constant."""

    normalized = level.strip().upper()
    if normalized == "WARN":
        normalized = "WARNING"
    if normalized not in LEVEL_NAMES:
        raise ConfigError(f"Unknown log level: {level}")
    return getattr(logging, normalized)


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = RotatingFileHandler(path, maxBytes=1_000_000, backupCount=3)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(FILE_FORMAT))
    return handler


def _is_tty(handler: logging.StreamHandler) -> bool:
    isatty = getattr(handler.stream, "isatty", None)
    return bool(isatty and isatty())


__all__ = ["ConsoleFormatter", "configure_logging", "parse_level"]
