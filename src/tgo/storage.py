"""File I/O for tgo task lists (one JSON document per list)."""

import json
import logging
import os
import stat
import tempfile
from datetime import datetime
from typing import Any, Dict, Optional

from .errors import CorruptData, NotFound, TaskIOError
from .models import STATUSES, Session, Task, TaskList, now_local

logger = logging.getLogger(__name__)

DEFAULT_FILE_MODE = 0o644


def format_time(value: datetime) -> str:
    """RFC 3339 timestamp."""
    return value.isoformat()


def parse_time(raw: Any, field_name: str) -> datetime:
    if not isinstance(raw, str):
        raise CorruptData(f"{field_name}: expected a timestamp string, got {raw!r}")
    try:
        value = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise CorruptData(f"{field_name}: invalid timestamp {raw!r}") from exc
    if value.tzinfo is None:
        value = value.astimezone()
    return value


def _int(raw: Any, field_name: str) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        raise CorruptData(f"{field_name}: expected an integer, got {raw!r}")
    return raw


def _str(raw: Any, field_name: str) -> str:
    if not isinstance(raw, str):
        raise CorruptData(f"{field_name}: expected a string, got {raw!r}")
    return raw


def _array(raw: Any, field_name: str) -> list:
    # Older list files store null for empty arrays.
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise CorruptData(f"{field_name}: expected an array, got {type(raw).__name__}")
    return raw


def _object(raw: Any, field_name: str) -> Dict[str, Any]:
    if not isinstance(raw, dict):
        raise CorruptData(f"{field_name}: expected an object, got {type(raw).__name__}")
    return raw


def _field(doc: Dict[str, Any], key: str, where: str) -> Any:
    try:
        return doc[key]
    except KeyError:
        raise CorruptData(f"{where}: missing field '{key}'") from None


def session_to_dict(session: Session) -> Dict[str, Any]:
    return {
        "start_time": format_time(session.start_time),
        "end_time": format_time(session.end_time),
        "duration": session.duration,
    }


def session_from_dict(doc: Any, where: str) -> Session:
    doc = _object(doc, where)
    start = parse_time(_field(doc, "start_time", where), f"{where}.start_time")
    end = parse_time(_field(doc, "end_time", where), f"{where}.end_time")
    duration = _int(_field(doc, "duration", where), f"{where}.duration")
    if end < start or duration < 0:
        raise CorruptData(f"{where}: session ends before it starts")
    return Session(start_time=start, end_time=end, duration=duration)


def task_to_dict(task: Task) -> Dict[str, Any]:
    """Serialize a task; optional timestamps are omitted, never null."""
    out: Dict[str, Any] = {
        "id": task.id,
        "title": task.title,
        "status": task.status,
        "comment": task.comment,
        "sessions": [session_to_dict(s) for s in task.sessions],
        "total_duration": task.total_duration,
    }
    if task.active_start_time is not None:
        out["active_start_time"] = format_time(task.active_start_time)
    if task.completed_at is not None:
        out["completed_at"] = format_time(task.completed_at)
    out["created_at"] = format_time(task.created_at)
    return out


def task_from_dict(doc: Any, where: str) -> Task:
    doc = _object(doc, where)
    status = _field(doc, "status", where)
    if status not in STATUSES:
        raise CorruptData(f"{where}: unknown status {status!r}")

    sessions = [
        session_from_dict(s, f"{where}.sessions[{i}]")
        for i, s in enumerate(_array(doc.get("sessions"), f"{where}.sessions"))
    ]
    active_raw = doc.get("active_start_time")
    completed_raw = doc.get("completed_at")
    task = Task(
        id=_int(_field(doc, "id", where), f"{where}.id"),
        title=_str(_field(doc, "title", where), f"{where}.title"),
        status=status,
        comment=_str(doc.get("comment", ""), f"{where}.comment"),
        sessions=sessions,
        total_duration=_int(doc.get("total_duration", 0), f"{where}.total_duration"),
        active_start_time=(
            parse_time(active_raw, f"{where}.active_start_time") if active_raw is not None else None
        ),
        completed_at=(
            parse_time(completed_raw, f"{where}.completed_at") if completed_raw is not None else None
        ),
        created_at=parse_time(_field(doc, "created_at", where), f"{where}.created_at"),
    )

    if (task.active_start_time is not None) != task.is_active:
        raise CorruptData(f"{where}: active_start_time must be set exactly when status is active")
    if (task.completed_at is not None) != task.is_done:
        raise CorruptData(f"{where}: completed_at must be set exactly when status is done")
    if task.total_duration != sum(s.duration for s in sessions):
        raise CorruptData(f"{where}: total_duration does not match its sessions")
    return task


def list_to_dict(task_list: TaskList) -> Dict[str, Any]:
    return {
        "title": task_list.title,
        "items": [task_to_dict(t) for t in task_list.items],
        "created_at": format_time(task_list.created_at),
        "updated_at": format_time(task_list.updated_at),
    }


def list_from_dict(doc: Any) -> TaskList:
    doc = _object(doc, "list")
    items = [
        task_from_dict(t, f"items[{i}]")
        for i, t in enumerate(_array(_field(doc, "items", "list"), "items"))
    ]
    active = [i for i, t in enumerate(items, start=1) if t.is_active]
    if len(active) > 1:
        raise CorruptData(f"list has {len(active)} active tasks: {active}")
    return TaskList(
        title=_str(_field(doc, "title", "list"), "title"),
        items=items,
        created_at=parse_time(_field(doc, "created_at", "list"), "created_at"),
        updated_at=parse_time(_field(doc, "updated_at", "list"), "updated_at"),
    )


def load_list(path: str) -> TaskList:
    """Load a list file.

    Raises NotFound if the file is absent, CorruptData if it does not hold a
    valid list document and TaskIOError for any other read failure.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = f.read()
    except FileNotFoundError:
        raise NotFound(f"List file not found: {path}") from None
    except OSError as exc:
        raise TaskIOError(f"Cannot read {path}: {exc}") from exc

    try:
        doc = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CorruptData(f"{os.path.basename(path)}: invalid JSON ({exc})") from exc

    try:
        task_list = list_from_dict(doc)
    except CorruptData as exc:
        raise CorruptData(f"{os.path.basename(path)}: {exc}") from exc
    logger.debug("Loaded %s (%d tasks)", path, len(task_list.items))
    return task_list


def _file_mode(path: str) -> int:
    """Permission bits to give a rewritten file: the old file's, or 0644 for a new one."""
    try:
        return stat.S_IMODE(os.stat(path).st_mode)
    except FileNotFoundError:
        return DEFAULT_FILE_MODE


def write_json(path: str, doc: Dict[str, Any]) -> None:
    """Write JSON via a temp file and rename, so a failed write leaves the old file intact."""
    directory = os.path.dirname(os.path.abspath(path))
    text = json.dumps(doc, indent=2, ensure_ascii=False) + "\n"
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=directory, prefix=".", suffix=".tmp", delete=False
        ) as tmp:
            tmp_path = tmp.name
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_path, _file_mode(path))
        os.replace(tmp_path, path)
    except OSError as exc:
        if tmp_path is not None and os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                logger.warning("Could not remove temp file %s", tmp_path)
        raise TaskIOError(f"Cannot write {path}: {exc}") from exc


def save_list(path: str, task_list: TaskList, now: Optional[datetime] = None) -> None:
    """Persist a list, stamping updated_at only once the write succeeded."""
    now = now or now_local()
    doc = list_to_dict(task_list)
    doc["updated_at"] = format_time(now)
    write_json(path, doc)
    task_list.updated_at = now
    logger.debug("Saved %s (%d tasks)", path, len(task_list.items))
