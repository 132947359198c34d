from __future__ import annotations

import time
from pathlib import Path

import pytest

CTIME_STEP_SECONDS = 0.05


def make_maildir(root: Path) -> Path:
    """Create an empty maildir tree under ``root``."""

    for subdir in ("cur", "new", "tmp"):
        (root / subdir).mkdir(parents=True, exist_ok=True)
    return root


def deliver(directory: Path, name: str, body: bytes) -> Path:
    """Write a message file and wait so the next one gets a later ctime."""

    path = directory / name
    path.write_bytes(body)
    time.sleep(CTIME_STEP_SECONDS)
    return path


@pytest.fixture
def maildir(tmp_path: Path) -> Path:
    return make_maildir(tmp_path / "Maildir")


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Automatically mark tests in this package as integration."""

    package_root = Path(__file__).resolve().parent
    integration_mark = pytest.mark.integration
    for item in items:
        try:
            path = Path(item.fspath).resolve()
        except OSError:
            continue
        if package_root in path.parents:
            item.add_marker(integration_mark)
