"""Unit tests for key decoding."""

import pytest

from fieldscope.tui.keys import decode_key
from fieldscope.tui.state import (
    Backspace,
    CharInput,
    Enter,
    EnterSearch,
    Escape,
    Mode,
    MoveDown,
    MoveUp,
    NextPanel,
    Quit,
    ReloadRequested,
    ToggleHelp,
    ViewSelect,
)
from fieldscope.tui.views import View


class TestBrowse:
    @pytest.mark.parametrize("key,event", [
        ("1", ViewSelect(View.FIELDS)),
        ("5", ViewSelect(View.STATS)),
        ("\t", NextPanel()),
        ("/", EnterSearch()),
        ("h", ToggleHelp()),
        ("r", ReloadRequested()),
        ("q", Quit()),
        ("\x03", Quit()),
        ("\r", Enter()),
        ("\x1b", Escape()),
        ("\x1b[A", MoveUp()),
        ("\x1b[B", MoveDown()),
        ("k", MoveUp()),
        ("j", MoveDown()),
    ])
    def test_keys(self, key, event):
        assert decode_key(key, Mode.BROWSE) == event

    @pytest.mark.parametrize("key", ["x", "9", "\x7f"])
    def test_unmapped(self, key):
        assert decode_key(key, Mode.BROWSE) is None


class TestSearch:
    @pytest.mark.parametrize("key", ["q", "h", "r", "/", "0", "6", "j", "_"])
    def test_printable_keys_are_text(self, key):
        assert decode_key(key, Mode.SEARCH) == CharInput(key)

    def test_editing_keys(self):
        assert decode_key("\x7f", Mode.SEARCH) == Backspace()
        assert decode_key("\x08", Mode.SEARCH) == Backspace()
        assert decode_key("\n", Mode.SEARCH) == Enter()
        assert decode_key("\x1b", Mode.SEARCH) == Escape()

    def test_arrows_still_move(self):
        assert decode_key("\x1b[A", Mode.SEARCH) == MoveUp()

    @pytest.mark.parametrize("key,view", [("1", View.FIELDS), ("3", View.ENDPOINTS), ("5", View.STATS)])
    def test_view_keys_switch_views(self, key, view):
        assert decode_key(key, Mode.SEARCH) == ViewSelect(view)

    def test_tab_cycles_panel(self):
        assert decode_key("\t", Mode.SEARCH) == NextPanel()

    def test_ctrl_c_quits(self):
        assert decode_key("\x03", Mode.SEARCH) == Quit()
