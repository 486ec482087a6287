"""Errors raised by the tgo core.

Core modules raise these and never print or exit; the CLI and the
interactive screen decide how to present them.
"""


class TaskError(Exception):
    """Base class for every error tgo reports to the user."""


class OutOfRange(TaskError, IndexError):
    """A task number is outside 1..len(list)."""


class InvalidTransition(TaskError):
    """A timer or completion operation was attempted on a done task."""


class EmptyName(TaskError, ValueError):
    """A task title or list name is blank."""


class AlreadyExists(TaskError):
    """A list file with the same sanitized name already exists."""


class NotFound(TaskError):
    """A list or config file does not exist."""


class NoDirectory(TaskError):
    """The task directory is unset, missing or unreadable."""


class NoLists(TaskError):
    """The task directory contains no list files."""


class CorruptData(TaskError, ValueError):
    """A persisted document is malformed or violates a list invariant."""


class TaskIOError(TaskError, OSError):
    """Reading or writing a file failed."""
