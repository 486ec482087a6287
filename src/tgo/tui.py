"""tgo curses-based terminal user interface."""

import curses
import curses.textpad
import curses.ascii as ascii
import logging
from typing import List, Optional

from .commands import run_command
from .display import FOOTER, render_list
from .errors import NoLists, TaskError
from .lists import create_list, display_name, list_files, list_path, remove_list
from .models import TaskList
from .storage import load_list

logger = logging.getLogger(__name__)

REFRESH_MS = 1000


def _line_attrs(line: str) -> int:
    """Bold for the running task, dim for done ones."""
    parts = line.split()
    if len(parts) > 1 and parts[0].endswith(".") and parts[0][:-1].isdigit():
        if parts[1] == ">>>":
            return curses.A_BOLD
        if parts[1] == "[x]":
            return curses.A_DIM
    return curses.A_NORMAL


def prompt_line(stdscr, title: str, label: str) -> Optional[str]:
    """Boxed one-line input (Enter submits, ESC cancels)."""
    curses.curs_set(1)
    height, width = stdscr.getmaxyx()
    box_w = min(60, width - 4)
    x0 = max(2, (width - box_w) // 2)

    win = curses.newwin(3, box_w, height // 2 - 1, x0)
    win.erase()
    win.border()
    win.addnstr(0, 2, f" {title} ", box_w - 4, curses.A_BOLD)
    win.addnstr(1, 2, label, box_w - 4)
    win.refresh()

    edit = curses.newwin(1, max(1, box_w - len(label) - 5), height // 2, x0 + len(label) + 3)
    edit.keypad(True)
    tb = curses.textpad.Textbox(edit, insert_mode=True)

    cancelled = {"value": False}

    def validator(ch: int) -> int:
        if ch in (10, 13):
            return ascii.BEL
        if ch == 27:
            cancelled["value"] = True
            return ascii.BEL
        if ch in (curses.KEY_BACKSPACE, 127, 8):
            return ascii.BS
        return ch

    s = tb.edit(validator)
    curses.curs_set(0)
    if cancelled["value"]:
        return None
    s = (s or "").strip()
    return s or None


def confirm(stdscr, prompt: str) -> bool:
    """One-line y/N prompt on the bottom row."""
    height, width = stdscr.getmaxyx()
    msg = f"{prompt} (y/N): "
    curses.curs_set(1)
    stdscr.addnstr(height - 1, 0, msg.ljust(width - 1), width - 1)
    stdscr.refresh()
    ch = stdscr.getch()
    curses.curs_set(0)
    return 0 <= ch < 256 and chr(ch).lower() == "y"


def pick_list(stdscr, directory: str, status: str = "") -> Optional[str]:
    """Curses list picker. Returns the chosen file name, or None to quit."""
    curses.curs_set(0)
    stdscr.keypad(True)
    cursor = 0

    while True:
        try:
            files = list_files(directory)
        except NoLists:
            files = []
        cursor = max(0, min(cursor, len(files) - 1))

        stdscr.erase()
        height, width = stdscr.getmaxyx()
        stdscr.addnstr(0, 0, f"Available task lists ({len(files)})", width - 1, curses.A_BOLD)
        stdscr.addnstr(1, 0, f"in {directory}", width - 1, curses.A_DIM)

        top = 3
        body_h = height - top - 3
        scroll = max(0, cursor - body_h + 1)
        if not files:
            stdscr.addnstr(top, 2, "No task lists yet. Press 'n' to create your first list.", width - 3)
        for i, filename in enumerate(files[scroll : scroll + max(body_h, 0)]):
            idx = scroll + i
            attrs = curses.A_REVERSE if idx == cursor else curses.A_NORMAL
            stdscr.addnstr(top + i, 0, f"  {idx + 1}. {display_name(filename)}", width - 1, attrs)

        stdscr.hline(height - 3, 0, curses.ACS_HLINE, width)
        stdscr.addnstr(height - 2, 0, status, width - 1)
        help_line = "up/down: select | Enter: open | n: new list | x: remove | q/ESC: quit"
        stdscr.addnstr(height - 1, 0, help_line, width - 1, curses.A_DIM)
        stdscr.refresh()

        ch = stdscr.getch()
        if ch in (ord("q"), 27):
            return None
        elif ch in (curses.KEY_UP, ord("k")):
            cursor = max(0, cursor - 1)
        elif ch in (curses.KEY_DOWN, ord("j")):
            cursor = min(len(files) - 1, cursor + 1)
        elif ch in (10, 13, curses.KEY_ENTER):
            if files:
                return files[cursor]
        elif ch == ord("n"):
            name = prompt_line(stdscr, "New list", "Name: ")
            if name is None:
                status = "Create cancelled."
                continue
            try:
                created = create_list(directory, name)
            except TaskError as exc:
                status = f"[!] {exc}"
                continue
            status = f"[+] Created: {name}"
            cursor = list_files(directory).index(created)
        elif ch == ord("x") and files:
            filename = files[cursor]
            if not confirm(stdscr, f"Remove '{filename}'?"):
                status = "Remove cancelled."
                continue
            try:
                remove_list(directory, filename)
            except TaskError as exc:
                status = f"[!] {exc}"
                continue
            status = f"[-] Removed: {filename}"


class TUI:
    """Full-screen view of one list with a command prompt at the bottom."""

    def __init__(self, stdscr, path: str, list_name: str, task_list: TaskList):
        self.stdscr = stdscr
        self.path = path
        self.list_name = list_name
        self.task_list = task_list
        self.status = ""
        self.scroll = 0
        self.stdscr.keypad(True)
        self.height, self.width = self.stdscr.getmaxyx()

    def draw(self, buffer: str = ""):
        """Render the list body, footer, status line and prompt."""
        self.stdscr.erase()
        self.height, self.width = self.stdscr.getmaxyx()
        body_h = self.height - 4
        if body_h < 1:
            self.stdscr.addnstr(0, 0, "Terminal too small", self.width - 1)
            self.stdscr.refresh()
            return

        lines: List[str] = render_list(self.task_list, self.list_name)
        self.scroll = max(0, min(self.scroll, len(lines) - body_h))
        for y, line in enumerate(lines[self.scroll : self.scroll + body_h]):
            self.stdscr.addnstr(y, 0, line, self.width - 1, _line_attrs(line))

        self.stdscr.hline(self.height - 4, 0, curses.ACS_HLINE, self.width)
        self.stdscr.addnstr(self.height - 3, 0, FOOTER, self.width - 1, curses.A_DIM)
        self.stdscr.addnstr(self.height - 2, 0, self.status, self.width - 1)
        prompt = f"> {buffer}"
        self.stdscr.addnstr(self.height - 1, 0, prompt, self.width - 1)
        self.stdscr.move(self.height - 1, min(len(prompt), self.width - 2))
        self.stdscr.refresh()

    def read_command(self) -> Optional[str]:
        """Read one command line, redrawing every second so running timers tick.

        Returns None when ESC is pressed.
        """
        buffer = ""
        curses.curs_set(1)
        self.stdscr.timeout(REFRESH_MS)
        try:
            while True:
                self.draw(buffer)
                try:
                    ch = self.stdscr.get_wch()
                except curses.error:
                    continue  # timeout: redraw
                if isinstance(ch, int):
                    if ch == curses.KEY_ENTER:
                        return buffer
                    if ch == curses.KEY_BACKSPACE:
                        buffer = buffer[:-1]
                    elif ch == curses.KEY_PPAGE:
                        self.scroll -= max(1, self.height - 5)
                    elif ch == curses.KEY_NPAGE:
                        self.scroll += max(1, self.height - 5)
                    continue
                if ch in ("\n", "\r"):
                    return buffer
                if ch == "\x1b":
                    return None
                if ch in ("\x7f", "\b"):
                    buffer = buffer[:-1]
                elif ch.isprintable():
                    buffer += ch
        finally:
            self.stdscr.timeout(-1)
            curses.curs_set(0)

    def run(self) -> str:
        """Main event loop. Returns 'back' or 'quit'."""
        while True:
            line = self.read_command()
            if line is None:
                self.status = ""
                continue
            result = run_command(self.task_list, self.path, line)
            if result.quit:
                return "quit"
            if result.back:
                return "back"
            self.status = result.message


def start_interactive(directory: str) -> None:
    """Run the picker and list screens until the user quits."""

    def _main(stdscr):
        status = ""
        while True:
            filename = pick_list(stdscr, directory, status)
            if filename is None:
                return
            try:
                task_list = load_list(list_path(directory, filename))
            except TaskError as exc:
                logger.error("Cannot open %s: %s", filename, exc)
                status = f"[!] Error loading tasks: {exc}"
                continue
            status = ""
            tui = TUI(stdscr, list_path(directory, filename), display_name(filename), task_list)
            if tui.run() == "quit":
                return

    curses.wrapper(_main)
