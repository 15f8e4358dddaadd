"""Curses single-select picker with substring search."""

from __future__ import annotations

import curses
import os
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Union

from ..models import Option

# Search box shows up once there are more options than this.
SEARCH_THRESHOLD = 3

# blank line + footer below the list
_FOOTER_ROWS = 2

DEFAULT_EMPTY_TEXT = "No matching repositories found."


class EventKind(Enum):
    UP = "up"
    DOWN = "down"
    CONFIRM = "confirm"
    CANCEL = "cancel"
    BACKSPACE = "backspace"
    CHAR = "char"


@dataclass(frozen=True)
class SelectorEvent:
    kind: EventKind
    char: str = ""


@dataclass(frozen=True)
class SelectorState:
    """Everything one pick needs. `options` never changes during a pick."""

    options: tuple[Option, ...]
    filtered: tuple[Option, ...]
    query: str = ""
    cursor: int = 0
    confirmed: Optional[Option] = None
    cancelled: bool = False
    search_enabled: bool = False

    @property
    def done(self) -> bool:
        return self.confirmed is not None or self.cancelled


def filter_options(options: Sequence[Option], query: str) -> tuple[Option, ...]:
    """Options whose label contains `query`, ignoring case, in original order."""
    if not query:
        return tuple(options)
    needle = query.lower()
    return tuple(opt for opt in options if needle in opt.label.lower())


def new_selector_state(
    options: Sequence[Option],
    allow_search: bool = True,
) -> SelectorState:
    items = tuple(options)
    return SelectorState(
        options=items,
        filtered=items,
        search_enabled=allow_search and len(items) > SEARCH_THRESHOLD,
    )


def refilter(state: SelectorState, query: str, reset_cursor: bool) -> SelectorState:
    """Recompute the filtered view.

    A query edit starts again at the top; any other refresh keeps the cursor
    where it was, clamped to the last row if the list shrank.
    """
    filtered = filter_options(state.options, query)
    if not filtered or reset_cursor:
        cursor = 0
    else:
        cursor = min(state.cursor, len(filtered) - 1)
    return replace(state, query=query, filtered=filtered, cursor=cursor)


def apply_event(state: SelectorState, event: SelectorEvent) -> SelectorState:
    """Pure reducer: (state, event) -> state."""
    if state.done:
        return state

    kind = event.kind
    if kind is EventKind.UP:
        return replace(state, cursor=max(state.cursor - 1, 0))

    if kind is EventKind.DOWN:
        if not state.filtered:
            return state
        return replace(state, cursor=min(state.cursor + 1, len(state.filtered) - 1))

    if kind is EventKind.CONFIRM:
        if not state.filtered:
            return state
        highlighted = state.filtered[state.cursor]
        chosen = next(opt for opt in state.options if opt == highlighted)
        return replace(state, confirmed=chosen)

    if kind is EventKind.CANCEL:
        return replace(state, cancelled=True)

    if not state.search_enabled:
        return state

    if kind is EventKind.BACKSPACE:
        if not state.query:
            return state
        return refilter(state, state.query[:-1], reset_cursor=True)

    if kind is EventKind.CHAR and len(event.char) == 1 and event.char.isprintable():
        return refilter(state, state.query + event.char, reset_cursor=True)

    return state


_CONFIRM_CHARS = ("\n", "\r")
_CANCEL_CHARS = ("\x1b", "\x03")
_BACKSPACE_CHARS = ("\x7f", "\b")
_BROWSE_KEYS = {
    "k": EventKind.UP,
    "j": EventKind.DOWN,
    " ": EventKind.CONFIRM,
    "q": EventKind.CANCEL,
}


def event_for_key(key: Union[int, str], search_enabled: bool) -> Optional[SelectorEvent]:
    """Translate a curses key (get_wch result) into a selector event.

    Letter shortcuts only apply without a search box; with one, every
    printable character is typed into the query.
    """
    if isinstance(key, int):
        if key == curses.KEY_UP:
            return SelectorEvent(EventKind.UP)
        if key == curses.KEY_DOWN:
            return SelectorEvent(EventKind.DOWN)
        if key == curses.KEY_ENTER:
            return SelectorEvent(EventKind.CONFIRM)
        if key == curses.KEY_BACKSPACE:
            return SelectorEvent(EventKind.BACKSPACE)
        return None

    if key in _CONFIRM_CHARS:
        return SelectorEvent(EventKind.CONFIRM)
    if key in _CANCEL_CHARS:
        return SelectorEvent(EventKind.CANCEL)
    if key in _BACKSPACE_CHARS:
        return SelectorEvent(EventKind.BACKSPACE)

    if search_enabled:
        if len(key) == 1 and key.isprintable():
            return SelectorEvent(EventKind.CHAR, key)
        return None

    kind = _BROWSE_KEYS.get(key)
    return SelectorEvent(kind) if kind else None


def footer_text(search_enabled: bool) -> str:
    if search_enabled:
        return "Up/Down: move  Enter: select  Esc: quit  Type to search."
    return "j/k: move  Enter: select  q: quit"


def scroll_offset_for(cursor: int, offset: int, max_rows: int, total: int) -> int:
    """Smallest scroll change that keeps the cursor row visible."""
    if max_rows <= 0 or total <= max_rows:
        return 0
    if cursor < offset:
        offset = cursor
    elif cursor >= offset + max_rows:
        offset = cursor - max_rows + 1
    return max(0, min(offset, total - max_rows))


def render_lines(state: SelectorState, title: str, empty_text: str = DEFAULT_EMPTY_TEXT) -> list[str]:
    """Plain-text view of the picker, without scrolling."""
    lines = title.splitlines() or [""]
    if state.search_enabled:
        lines.append(f"Search: {state.query}")
    lines.append("")
    if not state.filtered:
        lines.append(empty_text)
    else:
        for idx, option in enumerate(state.filtered):
            marker = ">" if idx == state.cursor else " "
            lines.append(f"{marker} {option.label}")
    lines.append("")
    lines.append(footer_text(state.search_enabled))
    return lines


def _render(stdscr, state: SelectorState, title: str, empty_text: str, offset: int) -> int:
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    title_lines = title.splitlines() or [""]

    y = 0
    for line in title_lines:
        if y >= height:
            break
        stdscr.addnstr(y, 0, line, max(0, width - 1), curses.A_BOLD)
        y += 1

    if state.search_enabled and y < height:
        stdscr.addnstr(y, 0, f"Search: {state.query}", max(0, width - 1))
        y += 1
    y += 1

    max_rows = max(0, height - _FOOTER_ROWS - y)
    offset = scroll_offset_for(state.cursor, offset, max_rows, len(state.filtered))

    if not state.filtered:
        if y < height - _FOOTER_ROWS:
            stdscr.addnstr(y, 0, empty_text, max(0, width - 1), curses.A_DIM)
    else:
        for idx in range(offset, min(len(state.filtered), offset + max_rows)):
            if y >= height - _FOOTER_ROWS:
                break
            selected = idx == state.cursor
            marker = ">" if selected else " "
            attr = curses.A_REVERSE | curses.A_BOLD if selected else curses.A_NORMAL
            stdscr.addnstr(y, 0, f"{marker} {state.filtered[idx].label}", max(0, width - 1), attr)
            y += 1

    if height >= 2:
        stdscr.addnstr(height - 1, 0, footer_text(state.search_enabled), max(0, width - 1), curses.A_DIM)
    stdscr.refresh()
    return offset


def run_picker(
    title: str,
    options: Sequence[Option],
    allow_search: bool = True,
    empty_text: str = DEFAULT_EMPTY_TEXT,
) -> Optional[Option]:
    """Show the picker and block until the user confirms or cancels.

    Returns the chosen Option, or None when cancelled.
    """
    os.environ.setdefault("ESCDELAY", "25")

    def _loop(stdscr) -> Optional[Option]:
        curses.curs_set(0)
        stdscr.keypad(True)
        state = new_selector_state(options, allow_search=allow_search)
        offset = 0

        while not state.done:
            offset = _render(stdscr, state, title, empty_text, offset)
            try:
                key = stdscr.get_wch()
            except KeyboardInterrupt:
                state = apply_event(state, SelectorEvent(EventKind.CANCEL))
                continue
            except curses.error:
                continue
            if key == curses.KEY_RESIZE:
                continue
            event = event_for_key(key, state.search_enabled)
            if event is not None:
                state = apply_event(state, event)

        return state.confirmed

    return curses.wrapper(_loop)
