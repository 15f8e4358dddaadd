"""Curses editor for a window configuration document."""

from __future__ import annotations

import curses
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Union

from ..errors import ConfigError
from ..models import SessionizerConfig, WindowConfig

Key = Union[int, str]

_ENTER_KEYS = ("\n", "\r", curses.KEY_ENTER)
_QUIT_KEYS = ("q", "\x1b", "\x03")
_BACKSPACE_KEYS = ("\x7f", "\b", curses.KEY_BACKSPACE)

NAME_FIELD = 0
COMMAND_FIELD = 1


class EditorMode(Enum):
    LIST = "list"
    EDIT = "edit"
    ADD = "add"


@dataclass
class ConfigEditorState:
    """Editor state. `config` is a private copy until saved."""

    config: SessionizerConfig
    save: Callable[[SessionizerConfig], None]
    mode: EditorMode = EditorMode.LIST
    cursor: int = 0
    editing_index: int = -1
    edit_field: int = NAME_FIELD
    name_input: str = ""
    command_input: str = ""
    message: str = ""
    error: str = ""
    saved: bool = False
    done: bool = False
    windows: list = field(init=False)

    def __post_init__(self):
        self.config = self.config.copy()
        self.windows = self.config.windows
        if not 0 <= self.config.initial_active_window < len(self.windows):
            self.config.initial_active_window = 0

    def handle_key(self, key: Key) -> None:
        if self.done:
            return
        if self.mode is EditorMode.LIST:
            self._handle_list_key(key)
        else:
            self._handle_edit_key(key)

    def _clear_status(self):
        self.message = ""
        self.error = ""

    def _handle_list_key(self, key: Key) -> None:
        if key in _QUIT_KEYS:
            self.done = True
        elif key in ("k", curses.KEY_UP):
            if self.cursor > 0:
                self.cursor -= 1
        elif key in ("j", curses.KEY_DOWN):
            if self.cursor < len(self.windows) - 1:
                self.cursor += 1
        elif key == "a":
            self.mode = EditorMode.ADD
            self.name_input = ""
            self.command_input = ""
            self.edit_field = NAME_FIELD
            self._clear_status()
        elif key in ("e", " ") or key in _ENTER_KEYS:
            if self.cursor < len(self.windows):
                window = self.windows[self.cursor]
                self.mode = EditorMode.EDIT
                self.editing_index = self.cursor
                self.name_input = window.name
                self.command_input = window.command
                self.edit_field = NAME_FIELD
                self._clear_status()
        elif key == "d":
            self._delete_window()
        elif key in ("K", curses.KEY_SR):
            self._move_window(-1)
        elif key in ("J", curses.KEY_SF):
            self._move_window(1)
        elif key == "i":
            if self.cursor < len(self.windows):
                self.config.initial_active_window = self.cursor
                self._clear_status()
                self.message = f"Window {self.cursor} opens first"
        elif key == "s":
            self._save()

    def _delete_window(self) -> None:
        self._clear_status()
        if len(self.windows) <= 1:
            self.error = "Cannot delete the last window"
            return
        idx = self.cursor
        del self.windows[idx]
        initial = self.config.initial_active_window
        if initial == idx:
            self.config.initial_active_window = 0
        elif initial > idx:
            self.config.initial_active_window = initial - 1
        if self.cursor >= len(self.windows):
            self.cursor = len(self.windows) - 1
        self.message = "Window deleted"

    def _move_window(self, step: int) -> None:
        src = self.cursor
        dst = src + step
        if not (0 <= src < len(self.windows) and 0 <= dst < len(self.windows)):
            return
        self.windows[src], self.windows[dst] = self.windows[dst], self.windows[src]
        initial = self.config.initial_active_window
        if initial == src:
            self.config.initial_active_window = dst
        elif initial == dst:
            self.config.initial_active_window = src
        self.cursor = dst
        self._clear_status()
        self.message = "Window moved up" if step < 0 else "Window moved down"

    def _save(self) -> None:
        self._clear_status()
        try:
            self.save(self.config)
        except ConfigError as e:
            self.error = f"Error saving config: {e}"
            return
        self.saved = True
        self.message = "Configuration saved!"
        self.done = True

    def _handle_edit_key(self, key: Key) -> None:
        if key == "\x1b":
            self.mode = EditorMode.LIST
            self.editing_index = -1
            self._clear_status()
        elif key == "\t":
            self.edit_field = (self.edit_field + 1) % 2
        elif key in _ENTER_KEYS:
            self._commit_edit()
        elif key in _BACKSPACE_KEYS:
            if self.edit_field == NAME_FIELD:
                self.name_input = self.name_input[:-1]
            else:
                self.command_input = self.command_input[:-1]
        elif isinstance(key, str) and len(key) == 1 and key.isprintable():
            if self.edit_field == NAME_FIELD:
                self.name_input += key
            else:
                self.command_input += key

    def _commit_edit(self) -> None:
        name = self.name_input.strip()
        if not name:
            self.error = "Window name cannot be empty"
            return

        command = self.command_input.strip()
        if self.mode is EditorMode.EDIT:
            self.windows[self.editing_index] = WindowConfig(name=name, command=command)
            self.message = "Window updated"
        else:
            self.windows.append(WindowConfig(name=name, command=command))
            self.cursor = len(self.windows) - 1
            self.message = "Window added"

        self.error = ""
        self.mode = EditorMode.LIST
        self.editing_index = -1


def render_lines(state: ConfigEditorState, scope: str) -> list[str]:
    """Plain-text view of the editor."""
    lines: list[str] = []
    if state.mode is EditorMode.LIST:
        lines.append(f"Configure tmux-sessionizer windows ({scope})")
        lines.append("")
        for idx, window in enumerate(state.windows):
            marker = ">" if idx == state.cursor else " "
            command = window.command or "<none>"
            suffix = " [opens first]" if idx == state.config.initial_active_window else ""
            lines.append(f"{marker} Window {idx}: {window.name} (command: {command}){suffix}")
        lines.append("")
        lines.append(
            "[a] Add  [e/Enter] Edit  [d] Delete  [K/J] Move  [i] Open first  [s] Save & Exit  [q] Cancel"
        )
    else:
        if state.mode is EditorMode.EDIT:
            lines.append(f"Editing Window {state.editing_index}")
        else:
            lines.append("Add New Window")
        lines.append("")
        name_cursor = "_" if state.edit_field == NAME_FIELD else " "
        command_cursor = "_" if state.edit_field == COMMAND_FIELD else " "
        lines.append(f"Name:    {state.name_input}{name_cursor}")
        lines.append(f"Command: {state.command_input}{command_cursor}")
        lines.append("")
        lines.append("[Tab] Switch field  [Enter] Save  [Esc] Cancel")

    if state.message:
        lines.extend(["", state.message])
    if state.error:
        lines.extend(["", f"Error: {state.error}"])
    return lines


def _render(stdscr, state: ConfigEditorState, scope: str) -> None:
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    for y, line in enumerate(render_lines(state, scope)[:height]):
        attr = curses.A_NORMAL
        if y == 0:
            attr = curses.A_BOLD
        elif line.startswith("> "):
            attr = curses.A_REVERSE | curses.A_BOLD
        elif line.startswith("Error:"):
            attr = curses.A_BOLD
        stdscr.addnstr(y, 0, line, max(0, width - 1), attr)
    stdscr.refresh()


def run_config_editor(
    config: SessionizerConfig,
    save: Callable[[SessionizerConfig], None],
    scope: str,
) -> bool:
    """Edit `config` interactively; `save` persists it. Returns True if saved."""
    os.environ.setdefault("ESCDELAY", "25")

    def _loop(stdscr) -> bool:
        curses.curs_set(0)
        stdscr.keypad(True)
        state = ConfigEditorState(config=config, save=save)

        while not state.done:
            _render(stdscr, state, scope)
            try:
                key = stdscr.get_wch()
            except KeyboardInterrupt:
                break
            except curses.error:
                continue
            if key == curses.KEY_RESIZE:
                continue
            state.handle_key(key)

        return state.saved

    return curses.wrapper(_loop)


def scope_label(repo_dir: Optional[str]) -> str:
    if not repo_dir:
        return "global"
    return f"repo: {os.path.basename(os.path.normpath(repo_dir))}"
