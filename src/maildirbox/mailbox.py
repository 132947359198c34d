"""Mailbox state: original and working catalogs over a scanned maildir."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from pathlib import Path

from .config import MailboxOptions
from .export import export_mbox
from .fs import AiofilesFilesystem, Filesystem
from .maildir import MaildirError, MessageNotFound, NotInitialized
from .scanner import scan_maildir
from .types import (
    DeleteResult,
    FlushResult,
    GetResult,
    InitResult,
    MailboxEvent,
    MailboxState,
    MessageCatalog,
    MessageInfo,
    ResetResult,
)

LOGGER = logging.getLogger(__name__)

Subscriber = Callable[[MailboxEvent], None]


class Mailbox:
    """A single maildir opened for reading and deferred deletion.

    ``open()`` scans the directory exactly once. On success the scanned
    catalog becomes ``original`` and an independent copy becomes ``working``.
    ``delete`` only tombstones entries in ``working``; files are removed from
    disk by ``flush``. ``reset`` discards pending tombstones.

    Every operation returns a typed result and also delivers it to the
    callbacks registered with ``subscribe``. Calling anything but ``open``
    before the scan succeeded raises ``NotInitialized``.
    """

    def __init__(
        self,
        path: Path | str,
        options: MailboxOptions | None = None,
        *,
        filesystem: Filesystem | None = None,
    ) -> None:
        self._path = Path(path).expanduser()
        self._options = options or MailboxOptions()
        self._fs = filesystem or AiofilesFilesystem(bufsize=self._options.bufsize)
        self._state = MailboxState.CREATED
        self._original: MessageCatalog | None = None
        self._working: MessageCatalog | None = None
        self._init_result: InitResult | None = None
        self._flushed: set[int] = set()
        self._subscribers: list[Subscriber] = []
        self._trace_level = logging.INFO if self._options.debug else logging.DEBUG

    @classmethod
    async def create(
        cls,
        path: Path | str,
        options: MailboxOptions | None = None,
        *,
        filesystem: Filesystem | None = None,
    ) -> Mailbox:
        """Construct and open a mailbox; inspect ``init_result`` for the outcome."""

        mailbox = cls(path, options, filesystem=filesystem)
        await mailbox.open()
        return mailbox

    @property
    def path(self) -> Path:
        return self._path

    @property
    def options(self) -> MailboxOptions:
        return self._options

    @property
    def state(self) -> MailboxState:
        return self._state

    @property
    def init_result(self) -> InitResult | None:
        return self._init_result

    @property
    def original(self) -> MessageCatalog:
        original, _ = self._ready_catalogs()
        return original

    @property
    def working(self) -> MessageCatalog:
        _, working = self._ready_catalogs()
        return working

    def subscribe(self, callback: Subscriber) -> None:
        """Register a callback receiving one event per operation."""

        self._subscribers.append(callback)

    async def open(self) -> InitResult:
        """Scan the maildir and move to READY or FAILED."""

        if self._state is not MailboxState.CREATED:
            raise MaildirError(f"Mailbox {self._path} has already been opened.")

        self._state = MailboxState.SCANNING
        try:
            catalog = await scan_maildir(self._path, self._fs)
        except MaildirError as exc:
            self._state = MailboxState.FAILED
            LOGGER.error("Unable to open maildir %s: %s", self._path, exc)
            result = InitResult(ok=False, reason=str(exc), error=exc)
        else:
            self._original = catalog
            self._working = catalog.copy()
            self._state = MailboxState.READY
            result = InitResult(ok=True)

        self._init_result = result
        self._emit(MailboxEvent("init", result))
        return result

    def count(self) -> int:
        """Number of messages ever scanned, tombstoned ones included."""

        return self.working.count

    def total_size(self) -> int:
        """Combined size in bytes of messages not marked deleted."""

        return self.working.total_size

    def messages(self) -> list[MessageInfo]:
        """Live messages in message-number order."""

        working = self.working
        return [
            MessageInfo(number=number, size=working.sizes[number], path=working.filenames[number])
            for number in range(working.count)
            if number not in working.deleted
        ]

    async def get(self, number: int) -> GetResult:
        """Read a message from disk. Nothing is cached between calls."""

        working = self.working
        if not self._is_valid(number):
            result = GetResult(ok=False, number=number, reason=str(MessageNotFound(number)))
            LOGGER.warning("Cannot get message %s from %s: not found", number, self._path)
            self._emit(MailboxEvent("get", result))
            return result

        path = working.filenames[number]
        size = working.sizes[number]
        try:
            data = await self._fs.open_and_read(path, 0, size)
        except OSError as exc:
            LOGGER.warning("Failed to read message %s from %s: %s", number, path, exc)
            result = GetResult(ok=False, number=number, reason=str(exc), error=exc)
        else:
            self._trace("Read message %s (%s bytes) from %s", number, len(data), path)
            result = GetResult(ok=True, number=number, data=data)
        self._emit(MailboxEvent("get", result))
        return result

    def delete(self, number: int) -> DeleteResult:
        """Tombstone a message. No filesystem I/O happens until ``flush``."""

        working = self.working
        if not self._is_valid(number):
            LOGGER.warning("Cannot delete message %s from %s: not found", number, self._path)
            result = DeleteResult(ok=False, number=number, reason=str(MessageNotFound(number)))
        else:
            size = working.tombstone(number)
            self._trace("Marked message %s (%s bytes) deleted", number, size)
            result = DeleteResult(ok=True, number=number)
        self._emit(MailboxEvent("delete", result))
        return result

    def reset(self) -> ResetResult:
        """Drop pending tombstones by copying ``original`` over ``working``."""

        self._working = self.original.copy()
        self._trace("Reset working catalog of %s", self._path)
        result = ResetResult()
        self._emit(MailboxEvent("reset", result))
        return result

    async def flush(self, target: Path | str | None = None) -> FlushResult:
        """Unlink tombstoned message files, then optionally export survivors.

        Stops at the first unlink failure; unprocessed tombstones remain
        pending and a later ``flush`` retries them. When ``target`` is given
        a fresh mbox snapshot of the surviving messages replaces any file there.
        """

        working = self.working
        pending = sorted(working.deleted - self._flushed)
        removed: list[Path] = []
        for number in pending:
            path = working.filenames[number]
            try:
                await self._fs.unlink_entry(path)
            except OSError as exc:
                LOGGER.error("Failed to delete message %s at %s: %s", number, path, exc)
                result = FlushResult(
                    ok=False, deleted=tuple(removed), reason=str(exc), error=exc
                )
                self._emit(MailboxEvent("flush", result))
                return result
            self._flushed.add(number)
            removed.append(path)
            self._trace("Deleted message %s at %s", number, path)

        if target is not None:
            try:
                await self._export(Path(target))
            except (OSError, MaildirError) as exc:
                LOGGER.error("Failed to export %s to %s: %s", self._path, target, exc)
                result = FlushResult(
                    ok=False, deleted=tuple(removed), reason=str(exc), error=exc
                )
                self._emit(MailboxEvent("flush", result))
                return result

        LOGGER.info("Flushed %s: %s message file(s) deleted", self._path, len(removed))
        result = FlushResult(ok=True, deleted=tuple(removed))
        self._emit(MailboxEvent("flush", result))
        return result

    async def _export(self, target: Path) -> None:
        payloads = [
            await self._fs.open_and_read(info.path, 0, info.size) for info in self.messages()
        ]
        await asyncio.to_thread(export_mbox, target, payloads)

    def _is_valid(self, number: int) -> bool:
        original, working = self._ready_catalogs()
        return number < original.count and working.is_live(number)

    def _ready_catalogs(self) -> tuple[MessageCatalog, MessageCatalog]:
        original, working = self._original, self._working
        if self._state is MailboxState.READY and original is not None and working is not None:
            return original, working
        exc = NotInitialized(self._state.value)
        self._emit(MailboxEvent("error", error=exc))
        raise exc

    def _trace(self, message: str, *args: object) -> None:
        LOGGER.log(self._trace_level, message, *args)

    def _emit(self, event: MailboxEvent) -> None:
        for callback in list(self._subscribers):
            try:
                callback(event)
            except Exception:
                LOGGER.exception("Mailbox subscriber failed for %s event", event.name)


__all__ = ["Mailbox", "Subscriber"]
