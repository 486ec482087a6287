"""Task/timer engine (pure functions, no I/O).

Every operation takes a TaskList and a 1-based position, mutates the list
in memory and leaves persistence to the caller. ``now`` is captured once per
operation so that related transitions share one instant.
"""

import logging
import time
from datetime import datetime
from typing import Optional

from .errors import CorruptData, EmptyName, InvalidTransition, OutOfRange
from .models import Session, Task, TaskList, now_local, to_ns

logger = logging.getLogger(__name__)

_last_id = 0


def new_task_id(task_list: TaskList) -> int:
    """Return a time-derived id above every id issued so far and every id in the list."""
    global _last_id
    candidate = time.time_ns()
    floor = max([_last_id] + [t.id for t in task_list.items])
    if candidate <= floor:
        candidate = floor + 1
    _last_id = candidate
    return candidate


def get_task(task_list: TaskList, position: int) -> Task:
    """Bounds-checked lookup by 1-based position."""
    if position < 1 or position > len(task_list.items):
        if not task_list.items:
            raise OutOfRange("No tasks in this list.")
        raise OutOfRange(f"Invalid task number {position}. Use 1-{len(task_list.items)}.")
    return task_list.items[position - 1]


def active_position(task_list: TaskList) -> Optional[int]:
    """Return the 1-based position of the active task, or None.

    Raises CorruptData when more than one task is active.
    """
    active = [i for i, t in enumerate(task_list.items, start=1) if t.is_active]
    if len(active) > 1:
        raise CorruptData(f"List has {len(active)} active tasks: {active}")
    return active[0] if active else None


def add_task(task_list: TaskList, title: str, now: Optional[datetime] = None) -> Task:
    title = (title or "").strip()
    if not title:
        raise EmptyName("Task title cannot be empty.")
    now = now or now_local()
    task = Task(id=new_task_id(task_list), title=title, created_at=now)
    task_list.items.append(task)
    logger.debug("Added task id=%s title=%r", task.id, title)
    return task


def remove_task(task_list: TaskList, position: int) -> Task:
    get_task(task_list, position)
    task = task_list.items.pop(position - 1)
    logger.debug("Removed task id=%s at %s", task.id, position)
    return task


def stop_timer(task: Task, now: datetime) -> Session:
    """Close the running session of an active task and pause it.

    This is the only place a session is recorded.
    """
    if not task.is_active or task.active_start_time is None:
        raise InvalidTransition(f"Task '{task.title}' is not running.")
    start = task.active_start_time
    end = max(now, start)
    session = Session(start_time=start, end_time=end, duration=to_ns(end - start))
    task.sessions.append(session)
    task.total_duration += session.duration
    task.active_start_time = None
    task.status = "paused"
    logger.debug("Stopped task id=%s session=%sns", task.id, session.duration)
    return session


def toggle_timer(task_list: TaskList, position: int, now: Optional[datetime] = None) -> Task:
    """Start a pending/paused task or stop the active one.

    Starting a task first stops whichever other task is active, at the same
    instant, so the list never has two running timers.
    """
    task = get_task(task_list, position)
    if task.is_done:
        raise InvalidTransition(f"Cannot start timer for completed task '{task.title}'.")
    now = now or now_local()
    running = active_position(task_list)

    if task.is_active:
        stop_timer(task, now)
        return task

    if running is not None:
        stop_timer(task_list.items[running - 1], now)
    task.status = "active"
    task.active_start_time = now
    logger.debug("Started task id=%s", task.id)
    return task


def mark_complete(task_list: TaskList, position: int, now: Optional[datetime] = None) -> Task:
    task = get_task(task_list, position)
    if task.is_done:
        raise InvalidTransition(f"Task '{task.title}' is already done.")
    now = now or now_local()
    if task.is_active:
        stop_timer(task, now)
    task.status = "done"
    task.completed_at = now
    logger.debug("Completed task id=%s total=%sns", task.id, task.total_duration)
    return task


def set_comment(task_list: TaskList, position: int, text: str) -> Task:
    task = get_task(task_list, position)
    task.comment = (text or "").strip()
    return task


def elapsed_ns(task: Task, now: Optional[datetime] = None) -> int:
    """Recorded time plus the running session, for live display."""
    if task.is_active and task.active_start_time is not None:
        now = now or now_local()
        return task.total_duration + max(0, to_ns(now - task.active_start_time))
    return task.total_duration
