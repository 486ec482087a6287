"""Data models and constants for tgo."""

import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import List, Literal, Optional

DEFAULT_CONFIG_PATH = os.path.expanduser("~/.task-cli-config.json")
DEFAULT_LOG_DIR = os.path.expanduser("~/.local/state/tgo")
LIST_EXT = ".json"

TaskStatus = Literal["pending", "active", "paused", "done"]
STATUSES = ("pending", "active", "paused", "done")


def now_local() -> datetime:
    """Current time as a timezone-aware local datetime."""
    return datetime.now().astimezone()


def to_ns(delta: timedelta) -> int:
    """Convert a timedelta to integer nanoseconds."""
    return (delta.days * 86400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1000


@dataclass(frozen=True)
class Session:
    """One closed timer run. Never mutated after creation."""

    start_time: datetime
    end_time: datetime
    duration: int  # nanoseconds


@dataclass
class Task:
    """A single task with its timer ledger."""

    id: int
    title: str
    status: TaskStatus = "pending"
    comment: str = ""
    sessions: List[Session] = field(default_factory=list)
    total_duration: int = 0  # nanoseconds
    active_start_time: Optional[datetime] = None  # set iff status == "active"
    completed_at: Optional[datetime] = None  # set iff status == "done"
    created_at: datetime = field(default_factory=now_local)

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @property
    def is_done(self) -> bool:
        return self.status == "done"


@dataclass
class TaskList:
    """A named, ordered collection of tasks persisted as one file."""

    title: str
    items: List[Task] = field(default_factory=list)
    created_at: datetime = field(default_factory=now_local)
    updated_at: datetime = field(default_factory=now_local)


@dataclass
class Config:
    """Per-user settings: where list files live."""

    task_folder: str = ""
