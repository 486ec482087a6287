# tests/test_storage.py

from __future__ import annotations

import json
import os
import stat
from datetime import datetime, timedelta
from pathlib import Path

import pytest

from tgo.core import add_task, mark_complete, set_comment, toggle_timer
from tgo.errors import CorruptData, NotFound, TaskIOError
from tgo.models import TaskList
from tgo.storage import list_to_dict, load_list, save_list


def _busy_list(t0: datetime) -> TaskList:
    tl = TaskList(title="Sprint Planning!", created_at=t0, updated_at=t0)
    for title in ("plan", "build", "ship"):
        add_task(tl, title, now=t0)
    toggle_timer(tl, 1, now=t0)
    toggle_timer(tl, 2, now=t0 + timedelta(minutes=5, microseconds=123))
    mark_complete(tl, 1, now=t0 + timedelta(minutes=6))
    set_comment(tl, 3, "after review")
    return tl


def test_save_then_load_round_trip(tmp_path: Path, t0: datetime) -> None:
    path = str(tmp_path / "work.json")
    tl = _busy_list(t0)
    saved_at = t0 + timedelta(minutes=7)

    save_list(path, tl, now=saved_at)
    loaded = load_list(path)

    assert tl.updated_at == saved_at
    assert loaded == tl
    assert [t.status for t in loaded.items] == ["done", "active", "pending"]
    assert loaded.items[0].sessions[0].duration == 5 * 60 * 1_000_000_000 + 123_000


def test_document_layout(tmp_path: Path, t0: datetime) -> None:
    path = tmp_path / "work.json"
    save_list(str(path), _busy_list(t0), now=t0)
    text = path.read_text(encoding="utf-8")
    doc = json.loads(text)

    assert list(doc) == ["title", "items", "created_at", "updated_at"]
    done, active, pending = doc["items"]
    assert list(done) == [
        "id",
        "title",
        "status",
        "comment",
        "sessions",
        "total_duration",
        "completed_at",
        "created_at",
    ]
    assert "active_start_time" in active and "completed_at" not in active
    assert "active_start_time" not in pending and "completed_at" not in pending
    assert null_free(doc)
    assert list(done["sessions"][0]) == ["start_time", "end_time", "duration"]
    assert text.startswith('{\n  "title": "Sprint Planning!"')
    assert text.endswith("\n")


def null_free(value) -> bool:
    if value is None:
        return False
    if isinstance(value, dict):
        return all(null_free(v) for v in value.values())
    if isinstance(value, list):
        return all(null_free(v) for v in value)
    return True


def test_save_is_deterministic(tmp_path: Path, t0: datetime) -> None:
    a, b = tmp_path / "a.json", tmp_path / "b.json"
    tl = _busy_list(t0)
    save_list(str(a), tl, now=t0)
    save_list(str(b), tl, now=t0)
    assert a.read_bytes() == b.read_bytes()


def test_load_missing_file(tmp_path: Path) -> None:
    with pytest.raises(NotFound):
        load_list(str(tmp_path / "nope.json"))


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        '{"title": "x", "created_at": "2026-01-01T00:00:00Z", "updated_at": "2026-01-01T00:00:00Z"}',
        '{"title": 3, "items": [], "created_at": "2026-01-01T00:00:00Z", "updated_at": "2026-01-01T00:00:00Z"}',
        '{"title": "x", "items": [], "created_at": "yesterday", "updated_at": "2026-01-01T00:00:00Z"}',
    ],
)
def test_load_malformed_document(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(CorruptData):
        load_list(str(path))


def _doc_with_task(**overrides) -> dict:
    task = {
        "id": 1,
        "title": "a",
        "status": "pending",
        "comment": "",
        "sessions": [],
        "total_duration": 0,
        "created_at": "2026-01-01T09:00:00+01:00",
    }
    task.update(overrides)
    return {
        "title": "x",
        "items": [task],
        "created_at": "2026-01-01T09:00:00+01:00",
        "updated_at": "2026-01-01T09:00:00+01:00",
    }


@pytest.mark.parametrize(
    "overrides",
    [
        {"status": "running"},
        {"status": "active"},
        {"status": "done"},
        {"active_start_time": "2026-01-01T09:00:00+01:00"},
        {"total_duration": 5},
        {"id": "1"},
        {
            "sessions": [
                {
                    "start_time": "2026-01-01T10:00:00+01:00",
                    "end_time": "2026-01-01T09:00:00+01:00",
                    "duration": 0,
                }
            ]
        },
    ],
)
def test_load_rejects_invalid_task(tmp_path: Path, overrides: dict) -> None:
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(_doc_with_task(**overrides)), encoding="utf-8")
    with pytest.raises(CorruptData):
        load_list(str(path))


def test_load_rejects_two_active_tasks(tmp_path: Path) -> None:
    doc = _doc_with_task(status="active", active_start_time="2026-01-01T09:00:00+01:00")
    second = dict(doc["items"][0], id=2)
    doc["items"].append(second)
    path = tmp_path / "bad.json"
    path.write_text(json.dumps(doc), encoding="utf-8")
    with pytest.raises(CorruptData, match="2 active"):
        load_list(str(path))


def test_load_accepts_files_written_by_older_versions(tmp_path: Path) -> None:
    """Nanosecond timestamps, 'Z' offsets and null arrays are all accepted."""
    doc = {
        "title": "Legacy",
        "items": [
            {
                "id": 1735689600000000001,
                "title": "old",
                "status": "paused",
                "comment": "",
                "sessions": [
                    {
                        "start_time": "2025-01-01T10:00:00.123456789+02:00",
                        "end_time": "2025-01-01T10:00:01.123456789+02:00",
                        "duration": 1000000000,
                    }
                ],
                "total_duration": 1000000000,
                "created_at": "2025-01-01T08:00:00Z",
            },
            {
                "id": 1735689600000000002,
                "title": "new",
                "status": "pending",
                "comment": "",
                "sessions": None,
                "total_duration": 0,
                "created_at": "2025-01-01T08:00:00Z",
            },
        ],
        "created_at": "2025-01-01T08:00:00Z",
        "updated_at": "2025-01-01T08:00:00Z",
    }
    path = tmp_path / "legacy.json"
    path.write_text(json.dumps(doc), encoding="utf-8")

    tl = load_list(str(path))

    assert tl.items[0].sessions[0].start_time.microsecond == 123456
    assert tl.items[1].sessions == []
    assert tl.created_at.utcoffset() == timedelta(0)


def test_failed_save_keeps_old_file_and_memory(
    tmp_path: Path, t0: datetime, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "work.json"
    tl = _busy_list(t0)
    save_list(str(path), tl, now=t0)
    before = path.read_bytes()

    add_task(tl, "unsaved", now=t0)

    def broken_replace(src, dst):
        raise PermissionError("read-only filesystem")

    monkeypatch.setattr(os, "replace", broken_replace)
    with pytest.raises(TaskIOError, match="read-only"):
        save_list(str(path), tl, now=t0 + timedelta(hours=1))

    assert path.read_bytes() == before
    assert tl.updated_at == t0
    assert tl.items[-1].title == "unsaved"
    assert [p.name for p in tmp_path.iterdir()] == ["work.json"]


@pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
def test_save_keeps_file_permissions(tmp_path: Path, t0: datetime) -> None:
    path = tmp_path / "work.json"
    tl = _busy_list(t0)
    save_list(str(path), tl, now=t0)
    assert stat.S_IMODE(path.stat().st_mode) == 0o644

    path.chmod(0o640)
    save_list(str(path), tl, now=t0 + timedelta(seconds=1))
    assert stat.S_IMODE(path.stat().st_mode) == 0o640


def test_save_into_missing_directory(tmp_path: Path, t0: datetime) -> None:
    tl = TaskList(title="x", created_at=t0, updated_at=t0)
    with pytest.raises(TaskIOError):
        save_list(str(tmp_path / "missing" / "x.json"), tl, now=t0 + timedelta(seconds=1))
    assert tl.updated_at == t0


def test_list_to_dict_uses_current_updated_at(t0: datetime) -> None:
    tl = TaskList(title="x", created_at=t0, updated_at=t0)
    assert list_to_dict(tl) == {
        "title": "x",
        "items": [],
        "created_at": t0.isoformat(),
        "updated_at": t0.isoformat(),
    }
