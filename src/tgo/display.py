"""Text rendering shared by the CLI and the curses screen."""

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from .core import elapsed_ns
from .models import Task, TaskList, TaskStatus

FOOTER = " <num> start/stop | add <task> | remove <num> | done <num> | note <num> <text> | r back | q quit "

ICONS: Dict[str, str] = {"active": ">>>", "pending": "[ ]", "paused": "[-]", "done": "[x]"}


def format_duration(nanoseconds: int) -> str:
    """Format a duration as '0s', '42s', '3m 5s' or '1h 2m 3s'."""
    if nanoseconds <= 0:
        return "0s"
    total = nanoseconds // 1_000_000_000
    hours, rem = divmod(total, 3600)
    minutes, seconds = divmod(rem, 60)
    if hours > 0:
        return f"{hours}h {minutes}m {seconds}s"
    if minutes > 0:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def status_counts(task_list: TaskList) -> Dict[str, int]:
    """Counts for the summary line; paused tasks count as pending."""
    counts = {"active": 0, "pending": 0, "done": 0}
    for t in task_list.items:
        counts["pending" if t.status == "paused" else t.status] += 1
    return counts


def session_summary(task: Task) -> str:
    durations = [format_duration(s.duration) for s in task.sessions]
    if len(durations) <= 3:
        shown = ", ".join(durations)
    else:
        shown = ", ".join(durations[:2]) + f", ... +{len(durations) - 2} more"
    return f"Sessions: {len(durations)} | {shown}"


def task_line(position: int, task: Task, now: Optional[datetime] = None) -> str:
    """One line for a task: number, icon, title and time info."""
    info = ""
    if task.status == "active":
        info = f" [Running: {format_duration(elapsed_ns(task, now))}]"
    elif task.status == "paused":
        info = f" [Paused: {format_duration(task.total_duration)}]"
    elif task.total_duration > 0:
        info = f" [Total: {format_duration(task.total_duration)}]"
    if task.status == "done" and task.completed_at is not None:
        info += f" @ {task.completed_at.astimezone().strftime('%H:%M')}"
    return f"{position}. {ICONS[task.status]} {task.title}{info}"


def task_lines(
    task_list: TaskList, statuses: Sequence[TaskStatus], now: Optional[datetime] = None
) -> List[str]:
    lines: List[str] = []
    for i, t in enumerate(task_list.items, start=1):
        if t.status not in statuses:
            continue
        lines.append("  " + task_line(i, t, now))
        if t.sessions and t.status in ("paused", "done"):
            lines.append("     " + session_summary(t))
        if t.comment:
            lines.append(f"     # {t.comment}")
    return lines


def render_list(task_list: TaskList, list_name: str, now: Optional[datetime] = None) -> List[str]:
    """Full-screen body: header box, counts and one section per state."""
    name = list_name.upper()
    border = "  +" + "-" * (len(name) + 4) + "+"
    lines = ["", border, f"  |  {name}  |", border]

    counts = status_counts(task_list)
    lines.append(
        f"  Active: {counts['active']} | Pending: {counts['pending']} | Done: {counts['done']}"
    )
    lines.append("  " + "-" * 40)
    lines.append("")

    sections = (
        ("ACTIVE", ("active",), counts["active"]),
        ("PENDING", ("pending", "paused"), counts["pending"]),
        ("DONE", ("done",), counts["done"]),
    )
    for heading, statuses, count in sections:
        if not count:
            continue
        lines.append(f"  {heading}")
        lines.append("  " + "-" * len(heading))
        lines.extend(task_lines(task_list, statuses, now))
        lines.append("")

    if not task_list.items:
        lines.append("  No tasks yet. Type 'add <task>' to create one.")
    return lines
