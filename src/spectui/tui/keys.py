"""Translate raw key strings into session input events.

Keys arrive as returned by :func:`click.getchar`: a single character for
printable keys and control characters, or an escape sequence such as
``"\\x1b[A"`` for arrow keys.  Which event a key produces depends on the
input mode: in filter and insert mode printable characters are text, in
normal mode they are commands.
"""

from __future__ import annotations

from typing import Optional

from spectui.models import EventKind, InputEvent, InputMode

ENTER_KEYS = ("\r", "\n")
BACKSPACE_KEYS = ("\x7f", "\x08")
ESCAPE_KEY = "\x1b"
CTRL_C = "\x03"

# Arrow keys (ANSI and the SS3 variants some terminals send) plus tab keys.
_NAVIGATION_KEYS = {
    "\x1b[A": EventKind.UP,
    "\x1bOA": EventKind.UP,
    "\x1b[B": EventKind.DOWN,
    "\x1bOB": EventKind.DOWN,
    "\x1b[C": EventKind.NEXT_PANE,
    "\x1bOC": EventKind.NEXT_PANE,
    "\x1b[D": EventKind.PREV_PANE,
    "\x1bOD": EventKind.PREV_PANE,
    "\t": EventKind.NEXT_PANE,
    "\x1b[Z": EventKind.PREV_PANE,
}

_COMMAND_KEYS = {
    "h": EventKind.PREV_PANE,
    "l": EventKind.NEXT_PANE,
    "j": EventKind.DOWN,
    "k": EventKind.UP,
    "g": EventKind.GO,
    "b": EventKind.BACK,
    "f": EventKind.TOGGLE_FULLSCREEN,
    "/": EventKind.TOGGLE_FILTER,
    "s": EventKind.SEND,
    "[": EventKind.PREV_CONTENT_TYPE,
    "]": EventKind.NEXT_CONTENT_TYPE,
    "q": EventKind.QUIT,
}

HELP = (
    "h/l pane  j/k move  g/b in/out  1-7 jump  Enter select  / filter  "
    "f fullscreen  [/] content type  s send  q quit"
)


def decode_key(key: str, mode: InputMode = InputMode.NORMAL) -> Optional[InputEvent]:
    """Return the event for *key* in *mode*, or ``None`` for unbound keys.

    Example::

        decode_key("j")                    # DOWN
        decode_key("j", InputMode.FILTER)  # CHAR "j"
        decode_key("3")                    # SELECT_PANE index 2
    """
    if key == CTRL_C:
        return InputEvent(kind=EventKind.QUIT)
    if key in ENTER_KEYS:
        return InputEvent(kind=EventKind.SUBMIT)
    if key == ESCAPE_KEY:
        return InputEvent(kind=EventKind.ESCAPE)
    if key in BACKSPACE_KEYS:
        # Backspace edits text, otherwise it climbs out of a drill-down.
        if mode == InputMode.NORMAL:
            return InputEvent(kind=EventKind.BACK)
        return InputEvent(kind=EventKind.BACKSPACE)
    if key in _NAVIGATION_KEYS:
        return InputEvent(kind=_NAVIGATION_KEYS[key])

    if mode in (InputMode.FILTER, InputMode.INSERT):
        if len(key) == 1 and key.isprintable():
            return InputEvent(kind=EventKind.CHAR, text=key)
        return None

    if key in _COMMAND_KEYS:
        return InputEvent(kind=_COMMAND_KEYS[key])
    if len(key) == 1 and key.isdigit() and key != "0":
        return InputEvent(kind=EventKind.SELECT_PANE, index=int(key) - 1)
    return None
