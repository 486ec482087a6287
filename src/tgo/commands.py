"""Interactive command dispatch (no curses, so it can be tested directly)."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .core import add_task, mark_complete, remove_task, set_comment, toggle_timer
from .display import format_duration
from .errors import TaskError, TaskIOError
from .models import TaskList, now_local
from .storage import save_list

logger = logging.getLogger(__name__)

HELP_LINE = (
    "Type a number, 'add / a <task>', 'remove / r <number>', 'done / d <number>', "
    "'note / c <number> <text>', 'r' to return, or 'q' to quit"
)

QUIT_WORDS = ("q", "quit", "exit")
BACK_WORDS = ("r", "return")


@dataclass
class CommandResult:
    message: str = ""
    quit: bool = False
    back: bool = False
    error: bool = False


def _parse_number(raw: str) -> int:
    try:
        return int(raw.strip())
    except ValueError:
        raise TaskError(f"'{raw.strip()}' is not a valid number") from None


def _is_number(text: str) -> bool:
    return re.fullmatch(r"[+-]?[0-9]+", text) is not None


def start_stop(task_list: TaskList, number: int, now: datetime) -> str:
    """Toggle the timer of task `number` and describe what happened."""
    task = toggle_timer(task_list, number, now)
    if task.is_active:
        return f"[>] Started: {task.title}"
    last = task.sessions[-1]
    return (
        f"[|] Paused: {task.title} [Session: {format_duration(last.duration)}] "
        f"[Total: {format_duration(task.total_duration)}]"
    )


def complete(task_list: TaskList, number: int, now: datetime) -> str:
    """Mark task `number` done and describe it."""
    task = mark_complete(task_list, number, now)
    total = ""
    if task.total_duration > 0:
        total = f" [Total time: {format_duration(task.total_duration)}]"
    return f"[x] Completed: {task.title}{total}"


def _note(task_list: TaskList, rest: str) -> str:
    number, _, text = rest.strip().partition(" ")
    task = set_comment(task_list, _parse_number(number), text)
    return f"[#] Note saved: {task.title}" if task.comment else f"[#] Note cleared: {task.title}"


def run_command(
    task_list: TaskList, path: str, line: str, now: Optional[datetime] = None
) -> CommandResult:
    """Apply one interactive command to task_list and save it on success."""
    text = line.strip()
    if not text:
        return CommandResult()
    if text in QUIT_WORDS:
        return CommandResult(quit=True)
    if text in BACK_WORDS:
        return CommandResult(back=True)

    verb, _, rest = text.partition(" ")
    now = now or now_local()
    try:
        if verb in ("add", "a"):
            message = f"[+] Added: {add_task(task_list, rest, now).title}"
        elif verb in ("remove", "r"):
            message = f"[-] Removed: {remove_task(task_list, _parse_number(rest)).title}"
        elif verb in ("done", "d"):
            message = complete(task_list, _parse_number(rest), now)
        elif verb in ("note", "c"):
            message = _note(task_list, rest)
        elif not rest and _is_number(text):
            message = start_stop(task_list, _parse_number(text), now)
        else:
            return CommandResult(message=f"[!] Invalid command. {HELP_LINE}", error=True)
    except TaskError as exc:
        return CommandResult(message=f"[!] {exc}", error=True)

    try:
        save_list(path, task_list, now)
    except TaskIOError as exc:
        logger.error("Save failed for %s: %s", path, exc)
        return CommandResult(message=f"{message} -- [!] Save error: {exc}", error=True)
    return CommandResult(message=message)
