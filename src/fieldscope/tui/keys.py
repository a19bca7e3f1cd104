"""
Key decoding.

Maps raw keys, as returned by `click.getchar()`, to navigation events.
Decoding depends on the mode: while searching, printable keys are query
text, so `q`, `h`, `r` and `/` do not act as commands. The view keys and Tab
work in every mode.
"""

from typing import Optional

from .state import (
    Backspace,
    CharInput,
    Enter,
    EnterSearch,
    Escape,
    Event,
    Mode,
    MoveDown,
    MoveUp,
    NextPanel,
    Quit,
    ReloadRequested,
    ToggleHelp,
    ViewSelect,
)
from .views import VIEW_KEYS

# POSIX escape sequences and the Windows two-byte scan codes
ARROW_UP = frozenset({"\x1b[A", "\x1bOA", "\xe0H", "\x00H"})
ARROW_DOWN = frozenset({"\x1b[B", "\x1bOB", "\xe0P", "\x00P"})
# vi-style movement, browse only
VI_UP = "k"
VI_DOWN = "j"
ENTER_KEYS = frozenset({"\r", "\n", "\r\n"})
BACKSPACE_KEYS = frozenset({"\x7f", "\x08"})
TAB = "\t"
ESC = "\x1b"
CTRL_C = "\x03"

COMMANDS = {
    "/": EnterSearch(),
    "h": ToggleHelp(),
    "r": ReloadRequested(),
    "q": Quit(),
}


def decode_key(key: str, mode: Mode) -> Optional[Event]:
    """
    Translate one key into an event for the given mode.

    Returns:
        The event, or None for keys with no meaning in this mode.
    """
    if key == CTRL_C:
        return Quit()
    if key in ENTER_KEYS:
        return Enter()
    if key == ESC:
        return Escape()
    if key in BACKSPACE_KEYS:
        return Backspace() if mode == Mode.SEARCH else None

    if key in ARROW_UP:
        return MoveUp()
    if key in ARROW_DOWN:
        return MoveDown()

    if key in VIEW_KEYS:
        return ViewSelect(VIEW_KEYS[key])
    if key == TAB:
        return NextPanel()

    if mode == Mode.SEARCH:
        if len(key) == 1 and key.isprintable():
            return CharInput(key)
        return None

    if key == VI_UP:
        return MoveUp()
    if key == VI_DOWN:
        return MoveDown()
    return COMMANDS.get(key)
