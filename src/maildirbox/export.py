"""Write surviving messages to an mbox file."""

from __future__ import annotations

import logging
import mailbox
import uuid
from collections.abc import Iterable
from pathlib import Path

from .maildir import MaildirError

LOGGER = logging.getLogger(__name__)


def export_mbox(target: Path, messages: Iterable[bytes]) -> int:
    """Replace ``target`` with an mbox holding ``messages`` and return how many were written.

    The mbox is built next to ``target`` and moved into place, so readers see
    either the previous snapshot or the new one.
    """

    target = target.expanduser()
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = target.with_name(f".{target.name}.{uuid.uuid4().hex}.tmp")
    written = 0
    try:
        box = mailbox.mbox(str(tmp_path), create=True)
        try:
            for raw in messages:
                box.add(mailbox.mboxMessage(raw))
                written += 1
        finally:
            box.close()
        tmp_path.replace(target)
    except mailbox.Error as exc:
        raise MaildirError(f"Failed to export messages to {target}: {exc}") from exc
    finally:
        tmp_path.unlink(missing_ok=True)
    LOGGER.info("Exported %s message(s) to %s", written, target)
    return written


__all__ = ["export_mbox"]
