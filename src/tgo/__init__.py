"""tgo - task lists with per-task timers."""

__version__ = "1.0.0"

from .models import Task, Session, TaskList, Config, LIST_EXT
from .errors import (
    TaskError,
    OutOfRange,
    InvalidTransition,
    EmptyName,
    AlreadyExists,
    NotFound,
    NoDirectory,
    NoLists,
    CorruptData,
    TaskIOError,
)
from .storage import load_list, save_list
from .core import (
    add_task,
    remove_task,
    toggle_timer,
    mark_complete,
    set_comment,
)
from .lists import list_files, create_list, remove_list, sanitize_name
from .config import ConfigStore

__all__ = [
    "Task",
    "Session",
    "TaskList",
    "Config",
    "LIST_EXT",
    "TaskError",
    "OutOfRange",
    "InvalidTransition",
    "EmptyName",
    "AlreadyExists",
    "NotFound",
    "NoDirectory",
    "NoLists",
    "CorruptData",
    "TaskIOError",
    "load_list",
    "save_list",
    "add_task",
    "remove_task",
    "toggle_timer",
    "mark_complete",
    "set_comment",
    "list_files",
    "create_list",
    "remove_list",
    "sanitize_name",
    "ConfigStore",
]
