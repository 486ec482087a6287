"""List directory service: enumerate, create and remove list files."""

import logging
import os
import re
from datetime import datetime
from typing import List, Optional

from .errors import AlreadyExists, EmptyName, NoDirectory, NoLists, NotFound, TaskIOError
from .models import LIST_EXT, TaskList, now_local
from .storage import save_list

logger = logging.getLogger(__name__)

_UNSAFE_RE = re.compile(r"[^a-z0-9_-]")


def sanitize_name(name: str) -> str:
    """Lowercase, spaces to hyphens, drop anything outside [a-z0-9_-]."""
    return _UNSAFE_RE.sub("", name.lower().replace(" ", "-"))


def display_name(filename: str) -> str:
    """File name without the list extension."""
    if filename.endswith(LIST_EXT):
        return filename[: -len(LIST_EXT)]
    return filename


def list_path(directory: str, filename: str) -> str:
    return os.path.join(directory, filename)


def list_files(directory: str) -> List[str]:
    """Return sorted list file names in directory.

    Raises NoDirectory if the directory is unset or unreadable and NoLists if
    it holds no list files.
    """
    if not directory:
        raise NoDirectory("No task directory configured. Use: tgo set-dir <path>")
    try:
        with os.scandir(directory) as it:
            names = sorted(
                entry.name
                for entry in it
                if entry.name.endswith(LIST_EXT) and entry.is_file()
            )
    except OSError as exc:
        raise NoDirectory(f"Cannot read folder {directory}: {exc}") from exc
    if not names:
        raise NoLists(f"No task lists found in {directory}")
    return names


def create_list(directory: str, name: str, now: Optional[datetime] = None) -> str:
    """Create an empty list file and return its file name.

    The file name is the sanitized name; the list title keeps the name as
    typed. A name that sanitizes to nothing is rejected like a blank one.
    """
    title = (name or "").strip()
    if not title:
        raise EmptyName("List name cannot be empty.")
    safe = sanitize_name(title)
    if not safe:
        raise EmptyName(f"List name '{title}' has no usable characters (use a-z, 0-9, - or _).")
    if not directory or not os.path.isdir(directory):
        raise NoDirectory(f"Directory not found: {directory or '(not set)'}")

    filename = safe + LIST_EXT
    path = list_path(directory, filename)
    if os.path.exists(path):
        raise AlreadyExists(f"List '{title}' already exists ({filename}).")

    now = now or now_local()
    save_list(path, TaskList(title=title, created_at=now, updated_at=now), now=now)
    logger.info("Created list %s in %s", filename, directory)
    return filename


def remove_list(directory: str, filename: str) -> None:
    """Delete a list file. There is no recovery."""
    if not filename or os.path.basename(filename) != filename:
        raise NotFound(f"Not a list file name: {filename!r}")
    path = list_path(directory, filename)
    try:
        os.remove(path)
    except FileNotFoundError:
        raise NotFound(f"List not found: {filename}") from None
    except OSError as exc:
        raise TaskIOError(f"Failed to remove {filename}: {exc}") from exc
    logger.info("Removed list %s from %s", filename, directory)
