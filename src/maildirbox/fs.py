"""Asynchronous filesystem access used by the scanner and mailbox."""

from __future__ import annotations

import stat as stat_module
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import aiofiles
import aiofiles.os

DEFAULT_BUFSIZE = 4096


@dataclass(frozen=True)
class EntryStat:
    """Subset of stat(2) the mailbox cares about."""

    is_dir: bool
    is_file: bool
    size: int
    creation_time: int


class Filesystem(Protocol):
    """Filesystem calls the mailbox awaits. Every method raises OSError on failure."""

    async def list_directory(self, path: Path) -> list[str]: ...

    async def stat_entry(self, path: Path) -> EntryStat: ...

    async def rename_entry(self, old: Path, new: Path) -> None: ...

    async def unlink_entry(self, path: Path) -> None: ...

    async def open_and_read(self, path: Path, offset: int, length: int) -> bytes: ...


class AiofilesFilesystem:
    """Filesystem backed by aiofiles' thread-pool wrappers."""

    def __init__(self, *, bufsize: int = DEFAULT_BUFSIZE) -> None:
        self._bufsize = max(1, bufsize)

    async def list_directory(self, path: Path) -> list[str]:
        return list(await aiofiles.os.listdir(path))

    async def stat_entry(self, path: Path) -> EntryStat:
        info = await aiofiles.os.stat(path)
        return EntryStat(
            is_dir=stat_module.S_ISDIR(info.st_mode),
            is_file=stat_module.S_ISREG(info.st_mode),
            size=info.st_size,
            creation_time=info.st_ctime_ns,
        )

    async def rename_entry(self, old: Path, new: Path) -> None:
        await aiofiles.os.rename(old, new)

    async def unlink_entry(self, path: Path) -> None:
        await aiofiles.os.remove(path)

    async def open_and_read(self, path: Path, offset: int, length: int) -> bytes:
        """Read up to ``length`` bytes from ``offset`` in ``bufsize`` chunks."""

        chunks: list[bytes] = []
        remaining = length
        async with aiofiles.open(path, "rb") as handle:
            await handle.seek(offset)
            while remaining > 0:
                chunk = await handle.read(min(self._bufsize, remaining))
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
        return b"".join(chunks)


__all__ = ["DEFAULT_BUFSIZE", "EntryStat", "Filesystem", "AiofilesFilesystem"]
