# tests/conftest.py

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterator

import pytest

from tgo.models import TaskList

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone(timedelta(hours=1)))


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep config and log files inside tmp_path and restore root logging afterwards."""
    monkeypatch.setenv("TGO_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("TGO_LOG_DIR", str(tmp_path / "logs"))
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for h in list(root.handlers):
        if h not in handlers:
            root.removeHandler(h)
            h.close()
    for h in handlers:
        if h not in root.handlers:
            root.addHandler(h)
    root.setLevel(level)


@pytest.fixture()
def t0() -> datetime:
    return T0


@pytest.fixture()
def task_dir(tmp_path: Path) -> Path:
    d = tmp_path / "tasks"
    d.mkdir()
    return d


@pytest.fixture()
def empty_list(t0: datetime) -> TaskList:
    return TaskList(title="Work", created_at=t0, updated_at=t0)
