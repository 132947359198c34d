"""Maildir naming helpers and the mailbox error hierarchy."""

from __future__ import annotations

from pathlib import Path

CUR_DIR = "cur"
NEW_DIR = "new"
SEEN_INFO_SUFFIX = ":2,"


class MaildirError(RuntimeError):
    """Raised when maildir operations fail."""


class NotAMaildir(MaildirError):
    """The target directory has neither cur/ nor new/."""

    def __init__(self, path: Path) -> None:
        super().__init__(f"Cannot find cur/ and new/ in {path}. Is this a maildir?")
        self.path = path


class ScanFailed(MaildirError):
    """A filesystem call failed while scanning the maildir."""


class NotInitialized(MaildirError):
    """The mailbox was used before a successful scan."""

    def __init__(self, state: str) -> None:
        super().__init__(
            f"Mailbox is not ready (state={state}); wait for open() to succeed."
        )
        self.state = state


class MessageNotFound(MaildirError):
    """Message number is out of range or already deleted."""

    def __init__(self, number: int) -> None:
        super().__init__(f"No such message: {number}")
        self.number = number


def inbox_new_dir(maildir: Path) -> Path:
    """Return the path to the new/ directory."""

    return maildir / NEW_DIR


def inbox_cur_dir(maildir: Path) -> Path:
    """Return the path to the cur/ directory."""

    return maildir / CUR_DIR


def seen_filename(filename: str) -> str:
    """Return the cur/ name for a message delivered to new/ as ``filename``."""

    return f"{filename}{SEEN_INFO_SUFFIX}"


def parse_maildir_info(filename: str) -> tuple[str, str]:
    """Return (base, flags) parsed from a maildir filename."""

    if SEEN_INFO_SUFFIX not in filename:
        return filename, ""
    base, flags = filename.rsplit(SEEN_INFO_SUFFIX, 1)
    return base, flags


__all__ = [
    "CUR_DIR",
    "NEW_DIR",
    "SEEN_INFO_SUFFIX",
    "MaildirError",
    "NotAMaildir",
    "ScanFailed",
    "NotInitialized",
    "MessageNotFound",
    "inbox_new_dir",
    "inbox_cur_dir",
    "seen_filename",
    "parse_maildir_info",
]
