"""tgo command-line interface."""

import argparse
import logging
import sys
from datetime import datetime
from typing import Callable, List, Optional

from .commands import complete, start_stop
from .config import ConfigStore
from .errors import NoDirectory, NoLists, NotFound, TaskError
from .lists import create_list, display_name, list_files, list_path, remove_list, sanitize_name
from .logging_setup import mute_console, setup_logging, unmute_console
from .models import LIST_EXT, Config, TaskList, now_local
from .storage import load_list, save_list

logger = logging.getLogger(__name__)

USAGE = """
  TGO - Task CLI Manager
  ----------------------

Usage:
  tgo                      - Interactive task management
  tgo start <number>       - Start/stop task timer
  tgo done <number>        - Mark task complete
  tgo set-dir <path>       - Configure task directory
  tgo create-list <name>   - Create new task list
  tgo remove-list          - Remove task list
  tgo help                 - Show this help

Options:
  -l, --list NAME          - Use this list instead of asking
  --config PATH            - Config file (default: ~/.task-cli-config.json)
  -v, --verbose            - Debug logging on stderr

Interactive Commands:
  <number>                 - Start/stop task timer
  add <task>               - Add new task
  remove <number>          - Remove task
  done <number>            - Mark task complete
  note <number> <text>     - Set or clear a task note
  r | return               - Return to list selection
  q | quit                 - Exit program

Examples:
  tgo set-dir ~/Tasks
  tgo create-list "Sprint Planning"
  tgo
  tgo start 3
"""


def prompt_yes_no(question: str) -> bool:
    """Simple y/N terminal prompt."""
    try:
        ans = input(f"{question} (y/N): ").strip().lower()
    except EOFError:
        return False
    return ans in ("y", "yes")


def print_lists(files: List[str]) -> None:
    print(f"\n[i] Available task lists ({len(files)}):\n")
    for i, filename in enumerate(files, start=1):
        print(f"  {i}. {display_name(filename)}")


def show_dir_contents(directory: str) -> None:
    try:
        print_lists(list_files(directory))
    except TaskError as exc:
        print(f"[i] {exc}")


def require_task_dir(config: Config) -> str:
    if not config.task_folder:
        raise NoDirectory("No task directory configured. Use: tgo set-dir <path>")
    return config.task_folder


def find_named_list(files: List[str], name: str) -> str:
    """Match --list against file names, by file name or sanitized list name."""
    candidates = [name, name + LIST_EXT, sanitize_name(name) + LIST_EXT]
    for candidate in candidates:
        if candidate in files:
            return candidate
    raise NotFound(f"No list named '{name}'.")


def select_list(directory: str, wanted: Optional[str] = None) -> str:
    """Return the file name of the list to work on.

    Uses --list when given, the only list when there is one, and otherwise
    asks. The prompt also accepts 'c <name>' to create and 'r <number>' to
    remove a list.
    """
    files = list_files(directory)
    if wanted:
        return find_named_list(files, wanted)
    if len(files) == 1:
        return files[0]

    print_lists(files)
    while True:
        try:
            answer = input(
                f"\nSelect list (1-{len(files)}), create 'c <name>', or remove 'r <number>': "
            ).strip()
        except EOFError:
            raise TaskError("No list selected.") from None

        if answer.startswith("c "):
            name = answer[2:].strip()
            try:
                create_list(directory, name)
            except TaskError as exc:
                print(f"[!] {exc}")
                continue
            print(f"[+] Created: {name}")
            files = list_files(directory)
            print_lists(files)
            continue

        if answer.startswith("r "):
            choice = _choice(answer[2:], len(files))
            if choice is None:
                print("[!] Invalid selection")
                continue
            filename = files[choice - 1]
            if prompt_yes_no(f"Remove '{filename}'?"):
                try:
                    remove_list(directory, filename)
                except TaskError as exc:
                    print(f"[!] Failed to remove: {exc}")
                    continue
                print(f"[-] Removed: {filename}")
                files = list_files(directory)
                print_lists(files)
            continue

        choice = _choice(answer, len(files))
        if choice is None:
            print("[!] Invalid selection")
            continue
        return files[choice - 1]


def _choice(raw: str, count: int) -> Optional[int]:
    try:
        choice = int(raw.strip())
    except ValueError:
        return None
    return choice if 1 <= choice <= count else None


def cmd_set_dir(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    abs_dir = store.set_task_dir(config, args.path)
    print(f"[+] Task directory set: {abs_dir}")
    show_dir_contents(abs_dir)
    return 0


def cmd_create_list(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    directory = require_task_dir(config)
    name = " ".join(args.name).strip()
    if not name:
        try:
            name = input("Enter list name: ").strip()
        except EOFError:
            name = ""
    create_list(directory, name)
    print(f"[+] Created list: {name}")
    show_dir_contents(directory)
    return 0


def cmd_remove_list(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    directory = require_task_dir(config)
    files = list_files(directory)
    if args.list:
        filename = find_named_list(files, args.list)
    elif len(files) == 1:
        filename = files[0]
    else:
        print_lists(files)
        try:
            answer = input(f"\nSelect list to remove (1-{len(files)}): ")
        except EOFError:
            answer = ""
        choice = _choice(answer, len(files))
        if choice is None:
            print("[!] Invalid selection")
            return 1
        filename = files[choice - 1]

    if not prompt_yes_no(f"Remove '{filename}'?"):
        print("Cancelled.")
        return 0
    remove_list(directory, filename)
    print(f"[-] Removed: {filename}")
    return 0


def _apply(
    args: argparse.Namespace,
    config: Config,
    action: Callable[[TaskList, int, datetime], str],
) -> int:
    """Load the selected list, apply one engine action and save it."""
    directory = require_task_dir(config)
    path = list_path(directory, select_list(directory, args.list))
    task_list = load_list(path)
    now = now_local()
    message = action(task_list, args.number, now)
    save_list(path, task_list, now)
    print(message)
    return 0


def cmd_start(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    return _apply(args, config, start_stop)


def cmd_done(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    return _apply(args, config, complete)


def cmd_help(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    print(USAGE)
    return 0


def cmd_interactive(args: argparse.Namespace, store: ConfigStore, config: Config) -> int:
    directory = require_task_dir(config)
    try:
        list_files(directory)
    except NoLists:
        pass  # the picker offers to create the first list

    from .tui import start_interactive

    mute_console()
    try:
        start_interactive(directory)
    finally:
        unmute_console()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    p = argparse.ArgumentParser(
        prog="tgo", description="Task lists with per-task timers."
    )
    p.add_argument("--config", default=None, help="Path to the config file")
    p.add_argument("-l", "--list", default=None, help="List to use (name or file name)")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")
    p.set_defaults(func=cmd_interactive)
    sub = p.add_subparsers(dest="cmd")

    s_dir = sub.add_parser("set-dir", help="Configure the task directory")
    s_dir.add_argument("path", help="Existing directory that holds the list files")
    s_dir.set_defaults(func=cmd_set_dir)

    s_create = sub.add_parser("create-list", help="Create a new task list")
    s_create.add_argument("name", nargs="*", help="List name (asked for when omitted)")
    s_create.set_defaults(func=cmd_create_list)

    s_remove = sub.add_parser("remove-list", help="Remove a task list")
    s_remove.set_defaults(func=cmd_remove_list)

    s_start = sub.add_parser("start", help="Start/stop a task timer")
    s_start.add_argument("number", type=int, help="Task number as shown in the list")
    s_start.set_defaults(func=cmd_start)

    s_done = sub.add_parser("done", help="Mark a task complete")
    s_done.add_argument("number", type=int, help="Task number as shown in the list")
    s_done.set_defaults(func=cmd_done)

    s_help = sub.add_parser("help", help="Show usage")
    s_help.set_defaults(func=cmd_help)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point. Runs the interactive screens if no subcommand is given."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(console_level=logging.DEBUG if args.verbose else logging.WARNING)

    store = ConfigStore(args.config)
    try:
        config = store.load()
    except TaskError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    try:
        return args.func(args, store, config)
    except TaskError as exc:
        logger.debug("Command %s failed: %s", args.cmd, exc)
        print(f"[!] {exc}")
        return 1
    except KeyboardInterrupt:
        print()
        return 130


if __name__ == "__main__":
    sys.exit(main())
