"""Core data structures used throughout maildirbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class MailboxState(str, Enum):
    """Lifecycle of a single mailbox instance."""

    CREATED = "created"
    SCANNING = "scanning"
    READY = "ready"
    FAILED = "failed"


@dataclass
class MessageCatalog:
    """Chronologically ordered snapshot of mailbox contents.

    Message numbers are the indices into ``filenames``. They are assigned once
    at scan time and never reused: deleting a message removes its entry from
    ``sizes`` and records the number in ``deleted`` but leaves ``filenames``
    and ``count`` untouched.
    """

    count: int = 0
    total_size: int = 0
    sizes: dict[int, int] = field(default_factory=dict)
    filenames: list[Path] = field(default_factory=list)
    deleted: set[int] = field(default_factory=set)

    @classmethod
    def from_entries(cls, entries: list[tuple[Path, int]]) -> MessageCatalog:
        """Build a catalog from ``(path, size)`` pairs already in message order."""

        catalog = cls()
        for number, (path, size) in enumerate(entries):
            catalog.filenames.append(path)
            catalog.sizes[number] = size
            catalog.total_size += size
        catalog.count = len(catalog.filenames)
        return catalog

    def copy(self) -> MessageCatalog:
        """Return an independent copy; mutating it never touches ``self``."""

        return MessageCatalog(
            count=self.count,
            total_size=self.total_size,
            sizes=dict(self.sizes),
            filenames=list(self.filenames),
            deleted=set(self.deleted),
        )

    def is_live(self, number: int) -> bool:
        return 0 <= number < self.count and number not in self.deleted

    def tombstone(self, number: int) -> int:
        """Mark ``number`` deleted and return the size it contributed."""

        size = self.sizes.pop(number)
        self.total_size -= size
        self.deleted.add(number)
        return size


@dataclass(frozen=True)
class MessageInfo:
    """Live message as seen through the working catalog."""

    number: int
    size: int
    path: Path


@dataclass(frozen=True)
class InitResult:
    ok: bool
    reason: str | None = None
    error: BaseException | None = None


@dataclass(frozen=True)
class GetResult:
    ok: bool
    number: int
    data: bytes | None = None
    reason: str | None = None
    error: BaseException | None = None

    @property
    def content(self) -> str | None:
        """Message body decoded as text."""

        if self.data is None:
            return None
        return self.data.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class DeleteResult:
    ok: bool
    number: int
    reason: str | None = None


@dataclass(frozen=True)
class ResetResult:
    ok: bool = True


@dataclass(frozen=True)
class FlushResult:
    ok: bool
    deleted: tuple[Path, ...] = ()
    reason: str | None = None
    error: BaseException | None = None


OperationResult = InitResult | GetResult | DeleteResult | ResetResult | FlushResult


@dataclass(frozen=True)
class MailboxEvent:
    """Notification delivered to mailbox subscribers.

    ``name`` is one of ``init``, ``get``, ``delete``, ``reset``, ``flush`` or
    ``error``. Error events carry the exception instead of a result.
    """

    name: str
    result: OperationResult | None = None
    error: BaseException | None = None


__all__ = [
    "MailboxState",
    "MessageCatalog",
    "MessageInfo",
    "InitResult",
    "GetResult",
    "DeleteResult",
    "ResetResult",
    "FlushResult",
    "OperationResult",
    "MailboxEvent",
]
