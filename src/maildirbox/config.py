"""Configuration loading and validation."""

from __future__ import annotations

import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .fs import DEFAULT_BUFSIZE

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.config/maildirbox/config.yaml")
DEFAULT_ROOT_DIR = Path("~/.local/lib/maildirbox")
DEFAULT_LOG_LEVEL = "info"
CONFIG_ENV_VAR = "MAILDIRBOX_CONFIG"


class ConfigError(ValueError):
    """Raised when configuration is invalid or missing."""


@dataclass(frozen=True)
class MailboxOptions:
    """Options accepted when constructing a mailbox.

    ``bufsize`` is the advisory read chunk size. ``tmppath`` is recorded but
    not used by the mailbox itself. ``debug`` promotes per-operation trace
    logging from DEBUG to INFO.
    """

    bufsize: int = DEFAULT_BUFSIZE
    tmppath: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    debug: bool = False


@dataclass(frozen=True)
class LoggingConfig:
    """Logging-related configuration."""

    level: str = DEFAULT_LOG_LEVEL
    debug_file: bool = False


@dataclass(frozen=True)
class Config:
    """Fully parsed configuration."""

    root_dir: Path = field(default_factory=lambda: DEFAULT_ROOT_DIR.expanduser())
    maildir: Path | None = None
    mailbox: MailboxOptions = field(default_factory=MailboxOptions)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: Path | str | None = None) -> Config:
    """Load and validate configuration from YAML.

    An explicitly requested file must exist. When falling back to the default
    location a missing file yields the built-in defaults.
    """

    config_path, explicit = _resolve_config_path(path)
    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Config file not found: {config_path}")
        LOGGER.debug("No config file at %s; using defaults", config_path)
        return Config()

    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}

    if not isinstance(raw, dict):
        raise ConfigError("Configuration root must be a mapping.")

    return _parse_config(raw)


def _resolve_config_path(explicit: Path | str | None) -> tuple[Path, bool]:
    if explicit:
        return Path(explicit).expanduser(), True
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser(), True
    return DEFAULT_CONFIG_PATH.expanduser(), False


def _parse_config(raw: dict[str, Any]) -> Config:
    root_dir = Path(raw.get("rootdir") or raw.get("root_dir") or DEFAULT_ROOT_DIR).expanduser()
    return Config(
        root_dir=root_dir,
        maildir=_parse_maildir(raw.get("maildir")),
        mailbox=_parse_mailbox(raw.get("mailbox")),
        logging=_parse_logging(raw.get("logging")),
    )


def _parse_maildir(value: Any) -> Path | None:
    if value is None:
        return None
    if not isinstance(value, str) or not value.strip():
        raise ConfigError("maildir must be a non-empty string path.")
    return Path(value).expanduser()


def _parse_mailbox(value: Any) -> MailboxOptions:
    if value is None:
        return MailboxOptions()
    if not isinstance(value, dict):
        raise ConfigError("mailbox must be a mapping.")

    bufsize = value.get("bufsize", DEFAULT_BUFSIZE)
    if isinstance(bufsize, bool) or not isinstance(bufsize, int) or bufsize <= 0:
        raise ConfigError("mailbox.bufsize must be a positive integer.")

    tmppath = value.get("tmppath")
    if tmppath is None:
        tmp_dir = Path(tempfile.gettempdir())
    elif isinstance(tmppath, str) and tmppath.strip():
        tmp_dir = Path(tmppath).expanduser()
    else:
        raise ConfigError("mailbox.tmppath must be a string path.")

    debug = bool(value.get("debug", False))
    return MailboxOptions(bufsize=bufsize, tmppath=tmp_dir, debug=debug)


def _parse_logging(value: Any) -> LoggingConfig:
    if value is None:
        return LoggingConfig()
    if not isinstance(value, dict):
        raise ConfigError("logging must be a mapping.")
    level = str(value.get("level", DEFAULT_LOG_LEVEL)).lower()
    debug_file = bool(value.get("debug_file", False))
    return LoggingConfig(level=level, debug_file=debug_file)


__all__ = [
    "Config",
    "ConfigError",
    "LoggingConfig",
    "MailboxOptions",
    "load_config",
]
