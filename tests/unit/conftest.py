from __future__ import annotations

from pathlib import Path

import pytest

from maildirbox.fs import EntryStat

ROOT = Path("/mail")


class FakeFilesystem:
    """In-memory filesystem with controllable creation times and failures."""

    def __init__(self) -> None:
        self.dirs: dict[Path, None] = {}
        self.files: dict[Path, tuple[bytes, int]] = {}
        self.failures: dict[tuple[str, Path], Exception] = {}
        self.calls: list[tuple[str, Path]] = []
        self._clock = 0

    def add_dir(self, path: Path) -> Path:
        self.dirs[path] = None
        return path

    def add_file(self, path: Path, data: bytes, *, ctime: int | None = None) -> Path:
        if ctime is None:
            self._clock += 1
            ctime = self._clock
        self.files[path] = (data, ctime)
        return path

    def fail(self, operation: str, path: Path, error: Exception | None = None) -> None:
        self.failures[(operation, path)] = error or OSError(f"{operation} failed: {path}")

    def _record(self, operation: str, path: Path) -> None:
        self.calls.append((operation, path))
        error = self.failures.get((operation, path))
        if error is not None:
            raise error

    async def list_directory(self, path: Path) -> list[str]:
        self._record("list", path)
        if path not in self.dirs:
            raise FileNotFoundError(str(path))
        children = [*self.dirs, *self.files]
        return [child.name for child in children if child.parent == path]

    async def stat_entry(self, path: Path) -> EntryStat:
        self._record("stat", path)
        if path in self.dirs:
            return EntryStat(is_dir=True, is_file=False, size=0, creation_time=0)
        if path in self.files:
            data, ctime = self.files[path]
            return EntryStat(is_dir=False, is_file=True, size=len(data), creation_time=ctime)
        raise FileNotFoundError(str(path))

    async def rename_entry(self, old: Path, new: Path) -> None:
        self._record("rename", old)
        if old not in self.files or new.parent not in self.dirs:
            raise FileNotFoundError(str(old))
        self.files[new] = self.files.pop(old)

    async def unlink_entry(self, path: Path) -> None:
        self._record("unlink", path)
        if path not in self.files:
            raise FileNotFoundError(str(path))
        del self.files[path]

    async def open_and_read(self, path: Path, offset: int, length: int) -> bytes:
        self._record("read", path)
        if path not in self.files:
            raise FileNotFoundError(str(path))
        data, _ = self.files[path]
        return data[offset : offset + length]


@pytest.fixture
def fake_fs() -> FakeFilesystem:
    fs = FakeFilesystem()
    fs.add_dir(ROOT)
    fs.add_dir(ROOT / "cur")
    fs.add_dir(ROOT / "new")
    fs.add_dir(ROOT / "tmp")
    return fs
