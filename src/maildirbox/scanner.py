"""Turn a maildir directory into an ordered message catalog."""

from __future__ import annotations

import logging
from pathlib import Path

from .fs import Filesystem
from .maildir import (
    CUR_DIR,
    NEW_DIR,
    NotAMaildir,
    ScanFailed,
    inbox_cur_dir,
    inbox_new_dir,
    seen_filename,
)
from .types import MessageCatalog

LOGGER = logging.getLogger(__name__)


async def scan_maildir(path: Path, filesystem: Filesystem) -> MessageCatalog:
    """Validate ``path``, migrate new/ into cur/ and catalog cur/ by creation time.

    Every filesystem call is awaited in order: list the root, migrate new/,
    list and stat cur/, then sort. Renames already performed stay on disk if
    a later step fails.

    Raises NotAMaildir when neither cur/ nor new/ exists and ScanFailed for
    any filesystem error, including paths the OS rejects outright.
    """

    try:
        has_cur, has_new = await _detect_layout(path, filesystem)
        if not has_cur and not has_new:
            raise NotAMaildir(path)
        if has_new:
            await _migrate_new(path, filesystem)
        entries = await _collect_cur(path, filesystem)
    except (OSError, ValueError) as exc:
        raise ScanFailed(f"Failed to scan maildir {path}: {exc}") from exc

    catalog = MessageCatalog.from_entries(entries)
    LOGGER.info(
        "Scanned maildir %s: %s message(s), %s byte(s)",
        path,
        catalog.count,
        catalog.total_size,
    )
    return catalog


async def _detect_layout(path: Path, filesystem: Filesystem) -> tuple[bool, bool]:
    names = set(await filesystem.list_directory(path))
    has_cur = CUR_DIR in names and (await filesystem.stat_entry(path / CUR_DIR)).is_dir
    has_new = NEW_DIR in names and (await filesystem.stat_entry(path / NEW_DIR)).is_dir
    return has_cur, has_new


async def _migrate_new(path: Path, filesystem: Filesystem) -> None:
    new_dir = inbox_new_dir(path)
    cur_dir = inbox_cur_dir(path)
    for name in await filesystem.list_directory(new_dir):
        source = new_dir / name
        if not (await filesystem.stat_entry(source)).is_file:
            continue
        destination = cur_dir / seen_filename(name)
        await filesystem.rename_entry(source, destination)
        LOGGER.debug("Moved %s to %s", source, destination)


async def _collect_cur(path: Path, filesystem: Filesystem) -> list[tuple[Path, int]]:
    cur_dir = inbox_cur_dir(path)
    found: list[tuple[int, Path, int]] = []
    for name in await filesystem.list_directory(cur_dir):
        candidate = cur_dir / name
        info = await filesystem.stat_entry(candidate)
        if info.is_file:
            found.append((info.creation_time, candidate, info.size))
    found.sort(key=lambda item: (item[0], str(item[1])))
    return [(candidate, size) for _, candidate, size in found]


__all__ = ["scan_maildir"]
