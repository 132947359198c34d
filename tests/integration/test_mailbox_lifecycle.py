from __future__ import annotations

import mailbox as stdlib_mailbox
from pathlib import Path

import pytest

from maildirbox.config import MailboxOptions
from maildirbox.mailbox import Mailbox
from maildirbox.maildir import NotAMaildir, NotInitialized
from maildirbox.types import MailboxState
from tests.integration.conftest import deliver


@pytest.mark.asyncio
async def test_new_message_is_migrated_and_readable(maildir: Path) -> None:
    (maildir / "new" / "1.msg").write_bytes(b"0123456789")

    box = await Mailbox.create(maildir)

    assert box.init_result is not None and box.init_result.ok
    assert box.count() == 1
    result = await box.get(0)
    assert result.ok
    assert result.data == b"0123456789"
    assert list((maildir / "new").iterdir()) == []
    assert [path.name for path in (maildir / "cur").iterdir()] == ["1.msg:2,"]


@pytest.mark.asyncio
async def test_directory_without_maildir_layout_fails(tmp_path: Path) -> None:
    (tmp_path / "plain").mkdir()

    box = await Mailbox.create(tmp_path / "plain")

    assert box.state is MailboxState.FAILED
    assert box.init_result is not None
    assert isinstance(box.init_result.error, NotAMaildir)
    with pytest.raises(NotInitialized):
        box.count()


@pytest.mark.asyncio
async def test_messages_are_numbered_by_creation_time(maildir: Path) -> None:
    cur = maildir / "cur"
    oldest = deliver(cur, "zulu:2,", b"oldest")
    middle = deliver(cur, "alpha:2,", b"middle")
    newest = deliver(cur, "mike:2,", b"newest")

    first = await Mailbox.create(maildir)
    second = await Mailbox.create(maildir)

    assert first.original.filenames == [oldest, middle, newest]
    assert first.original.filenames == second.original.filenames


@pytest.mark.asyncio
async def test_flush_removes_exactly_the_deleted_files(maildir: Path) -> None:
    cur = maildir / "cur"
    keep = deliver(cur, "keep:2,", b"keep me")
    drop = deliver(cur, "drop:2,", b"drop me")
    box = await Mailbox.create(maildir, MailboxOptions(bufsize=2))

    assert box.delete(1).ok
    assert not (await box.get(1)).ok
    result = await box.flush()

    assert result.ok
    assert result.deleted == (drop,)
    assert not drop.exists()
    assert keep.exists()
    assert (await box.get(0)).data == b"keep me"


@pytest.mark.asyncio
async def test_reset_before_flush_keeps_everything(maildir: Path) -> None:
    cur = maildir / "cur"
    paths = [deliver(cur, f"{index}:2,", b"x" * (index + 1)) for index in range(3)]
    box = await Mailbox.create(maildir)

    box.delete(0)
    box.delete(2)
    box.reset()
    result = await box.flush()

    assert result.ok and result.deleted == ()
    assert all(path.exists() for path in paths)
    assert box.total_size() == 6


@pytest.mark.asyncio
async def test_flush_failure_leaves_remaining_files(maildir: Path) -> None:
    cur = maildir / "cur"
    first = deliver(cur, "first:2,", b"1")
    second = deliver(cur, "second:2,", b"2")
    box = await Mailbox.create(maildir)
    box.delete(0)
    box.delete(1)
    first.unlink()

    result = await box.flush()

    assert not result.ok
    assert isinstance(result.error, FileNotFoundError)
    assert second.exists()
    assert box.working.deleted == {0, 1}


@pytest.mark.asyncio
async def test_flush_exports_surviving_messages(maildir: Path, tmp_path: Path) -> None:
    cur = maildir / "cur"
    deliver(cur, "a:2,", b"Subject: kept\n\nbody\n")
    deliver(cur, "b:2,", b"Subject: gone\n\nbody\n")
    target = tmp_path / "export.mbox"
    box = await Mailbox.create(maildir)

    box.delete(1)
    result = await box.flush(target)

    assert result.ok
    exported = stdlib_mailbox.mbox(str(target))
    try:
        assert [message["Subject"] for message in exported] == ["kept"]
    finally:
        exported.close()


@pytest.mark.asyncio
async def test_repeated_export_holds_one_copy_per_message(maildir: Path, tmp_path: Path) -> None:
    deliver(maildir / "cur", "only:2,", b"Subject: single\n\nbody\n")
    target = tmp_path / "export.mbox"
    box = await Mailbox.create(maildir)

    assert (await box.flush(target)).ok
    assert (await box.flush(target)).ok

    exported = stdlib_mailbox.mbox(str(target))
    try:
        assert len(exported) == 1
    finally:
        exported.close()
