"""
Navigation State Machine.

The whole interactive state is one immutable SelectionState value. Input
events are applied by the pure function `dispatch(event, state)`, which
returns the next state and never touches the old one. The event loop in
app.py is the only place that holds a "current" state.

States are (View, Panel, Mode):
    View  in {Fields, Schemas, Endpoints, Graph, Stats}
    Panel in {Left, Center, Right}
    Mode  in {Browse, Search, Help, Detail}
Initial state: (Fields, Left, Browse).

Cursor rule: every cursor is in [0, len) for its list, or exactly 0 when
the list is empty. Lists are recomputed from the snapshot and the view's
query, so after any change the cursors are clamped again.
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum
from types import MappingProxyType
from typing import List, Mapping, Optional, Union

from ..core.result import Result
from ..core.search import search
from ..core.types import EndpointId
from .views import Snapshot, View, ViewVariant, get_view


class Panel(StrEnum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"

    def next(self) -> "Panel":
        order = list(Panel)
        return order[(order.index(self) + 1) % len(order)]


class Mode(StrEnum):
    BROWSE = "browse"
    SEARCH = "search"
    HELP = "help"
    DETAIL = "detail"


# =============================================================================
# Events
# =============================================================================

@dataclass(frozen=True)
class ViewSelect:
    view: View


@dataclass(frozen=True)
class NextPanel:
    pass


@dataclass(frozen=True)
class EnterSearch:
    pass


@dataclass(frozen=True)
class CharInput:
    char: str


@dataclass(frozen=True)
class Backspace:
    pass


@dataclass(frozen=True)
class Escape:
    pass


@dataclass(frozen=True)
class Enter:
    pass


@dataclass(frozen=True)
class MoveUp:
    pass


@dataclass(frozen=True)
class MoveDown:
    pass


@dataclass(frozen=True)
class ToggleHelp:
    pass


@dataclass(frozen=True)
class ReloadRequested:
    pass


@dataclass(frozen=True)
class ReloadFinished:
    """Outcome of a reload: a new snapshot, or the error that stopped it."""
    result: Result[Snapshot, Exception]


@dataclass(frozen=True)
class Quit:
    pass


Event = Union[
    ViewSelect, NextPanel, EnterSearch, CharInput, Backspace, Escape, Enter,
    MoveUp, MoveDown, ToggleHelp, ReloadRequested, ReloadFinished, Quit,
]


# =============================================================================
# State
# =============================================================================

@dataclass(frozen=True)
class ViewSlot:
    """
    Per-view navigation state.

    Attributes:
        query: Search query applied to the view's Left list.
        cursor: Left-panel cursor into the filtered list.
        center_cursor: Center-panel cursor.
        right_cursor: Right-panel cursor.
        selected: Item committed with Enter; drives Center and Right.
    """
    query: str = ""
    cursor: int = 0
    center_cursor: int = 0
    right_cursor: int = 0
    selected: Optional[str] = None


def _fresh_slots() -> Mapping[View, ViewSlot]:
    return MappingProxyType({v: ViewSlot() for v in View})


@dataclass(frozen=True)
class SelectionState:
    snapshot: Snapshot
    view: View = View.FIELDS
    panel: Panel = Panel.LEFT
    mode: Mode = Mode.BROWSE
    slots: Mapping[View, ViewSlot] = field(default_factory=_fresh_slots)
    # Endpoint shown in the Detail popup
    detail: Optional[EndpointId] = None
    # Mode to return to when Help closes
    help_return: Mode = Mode.BROWSE
    loading: bool = False
    loading_message: Optional[str] = None
    status: Optional[str] = None
    should_quit: bool = False

    @property
    def variant(self) -> ViewVariant:
        return get_view(self.view)

    @property
    def slot(self) -> ViewSlot:
        return self.slots[self.view]

    @property
    def query(self) -> str:
        return self.slot.query

    @property
    def search_mode(self) -> bool:
        return self.mode == Mode.SEARCH

    def with_slot(self, view: View, slot: ViewSlot) -> "SelectionState":
        slots = dict(self.slots)
        slots[view] = slot
        return replace(self, slots=MappingProxyType(slots))


def initial_state(snapshot: Snapshot) -> SelectionState:
    return SelectionState(snapshot=snapshot)


# =============================================================================
# Derived lists
# =============================================================================

def clamp(cursor: int, length: int) -> int:
    """Clamp a cursor to [0, length), or 0 for an empty list."""
    if length <= 0:
        return 0
    return max(0, min(cursor, length - 1))


def left_items(state: SelectionState, view: Optional[View] = None) -> List[str]:
    view = view or state.view
    variant = get_view(view)
    return search(state.slots[view].query, variant.candidates(state.snapshot.index))


def center_items(state: SelectionState, view: Optional[View] = None) -> List[str]:
    view = view or state.view
    return get_view(view).center_items(state.snapshot, state.slots[view].selected)


def right_items(state: SelectionState, view: Optional[View] = None) -> List[str]:
    view = view or state.view
    return get_view(view).right_items(state.snapshot, state.slots[view].selected)


def highlighted(state: SelectionState) -> Optional[str]:
    """Item under the Left cursor of the active view."""
    items = left_items(state)
    return items[state.slot.cursor] if items else None


def _clamped(state: SelectionState, view: View, slot: ViewSlot) -> ViewSlot:
    staged = state.with_slot(view, slot)
    return replace(
        slot,
        cursor=clamp(slot.cursor, len(left_items(staged, view))),
        center_cursor=clamp(slot.center_cursor, len(center_items(staged, view))),
        right_cursor=clamp(slot.right_cursor, len(right_items(staged, view))),
    )


# =============================================================================
# Dispatch
# =============================================================================

def dispatch(event: Event, state: SelectionState) -> SelectionState:
    """
    Apply one input event.

    Pure: the returned state is new, `state` is left untouched. Inputs that
    have no meaning in the current (view, panel, mode) return a state equal
    to the input apart from the cleared status message.
    """
    if isinstance(event, ReloadFinished):
        return _reload_finished(state, event)

    # Transient status lasts until the next key
    if state.status is not None:
        state = replace(state, status=None)

    if isinstance(event, Quit):
        return replace(state, should_quit=True)

    if state.mode == Mode.HELP:
        if isinstance(event, (Escape, ToggleHelp)):
            return replace(state, mode=state.help_return)
        return state

    if isinstance(event, ViewSelect):
        return replace(state, view=event.view, panel=Panel.LEFT, mode=Mode.BROWSE, detail=None)

    if state.mode == Mode.DETAIL:
        if isinstance(event, Escape):
            return replace(state, mode=Mode.BROWSE, detail=None)
        if isinstance(event, ToggleHelp):
            return replace(state, mode=Mode.HELP, help_return=Mode.DETAIL)
        return state

    if state.mode == Mode.SEARCH:
        return _dispatch_search(event, state)

    return _dispatch_browse(event, state)


def _dispatch_browse(event: Event, state: SelectionState) -> SelectionState:
    if isinstance(event, NextPanel):
        return replace(state, panel=state.panel.next())

    if isinstance(event, EnterSearch):
        return replace(state, mode=Mode.SEARCH, panel=Panel.LEFT)

    if isinstance(event, ToggleHelp):
        return replace(state, mode=Mode.HELP, help_return=Mode.BROWSE)

    if isinstance(event, ReloadRequested):
        if state.loading:
            return state
        source = state.snapshot.index.source or "spec"
        return replace(state, loading=True, loading_message=f"Reloading {source}...")

    if isinstance(event, Enter):
        if state.panel == Panel.LEFT:
            return _commit(state)
        if state.panel == Panel.RIGHT:
            return _open_detail(state)
        return state

    if isinstance(event, (MoveUp, MoveDown)):
        return _move(state, -1 if isinstance(event, MoveUp) else 1)

    return state


def _dispatch_search(event: Event, state: SelectionState) -> SelectionState:
    slot = state.slot

    if isinstance(event, CharInput):
        return _set_query(state, slot.query + event.char)

    if isinstance(event, Backspace):
        if not slot.query:
            return state
        return _set_query(state, slot.query[:-1])

    if isinstance(event, Escape):
        cleared = replace(state, mode=Mode.BROWSE)
        return _set_query(cleared, "")

    if isinstance(event, Enter):
        return _commit(replace(state, mode=Mode.BROWSE))

    if isinstance(event, NextPanel):
        return replace(state, mode=Mode.BROWSE, panel=state.panel.next())

    if isinstance(event, (MoveUp, MoveDown)):
        return _move(state, -1 if isinstance(event, MoveUp) else 1)

    return state


def _set_query(state: SelectionState, query: str) -> SelectionState:
    # A new filter means a new list: the cursor restarts at the top
    return state.with_slot(state.view, replace(state.slot, query=query, cursor=0))


def _commit(state: SelectionState) -> SelectionState:
    item = highlighted(state)
    if item is None:
        return state
    slot = replace(state.slot, selected=item, center_cursor=0, right_cursor=0)
    return replace(state.with_slot(state.view, slot), panel=Panel.CENTER)


def _open_detail(state: SelectionState) -> SelectionState:
    slot = state.slot
    if slot.selected is None:
        return state
    items = right_items(state)
    if not items:
        return state
    endpoint = state.variant.right_endpoint(state.snapshot, slot.selected, items[slot.right_cursor])
    if endpoint is None:
        return state
    return replace(state, mode=Mode.DETAIL, detail=endpoint)


def _move(state: SelectionState, step: int) -> SelectionState:
    slot = state.slot

    if state.panel == Panel.LEFT:
        new = replace(slot, cursor=clamp(slot.cursor + step, len(left_items(state))))
    elif state.panel == Panel.CENTER:
        new = replace(
            slot, center_cursor=clamp(slot.center_cursor + step, len(center_items(state)))
        )
    else:
        # The Right panel lists things about the selection; without one it is inert
        if slot.selected is None:
            return state
        new = replace(
            slot, right_cursor=clamp(slot.right_cursor + step, len(right_items(state)))
        )

    if new == slot:
        return state
    return state.with_slot(state.view, new)


def _reload_finished(state: SelectionState, event: ReloadFinished) -> SelectionState:
    done = replace(state, loading=False, loading_message=None)

    if event.result.is_err():
        error = event.result.unwrap_err()
        return replace(done, status=f"Reload failed: {error}")

    snapshot: Snapshot = event.result.unwrap()
    swapped = replace(done, snapshot=snapshot)

    slots = {}
    for view in View:
        old = state.slots[view]
        previous = left_items(state, view)
        was_highlighted = previous[old.cursor] if previous else None

        staged = swapped.with_slot(view, old)
        current = left_items(staged, view)
        candidates = set(get_view(view).candidates(snapshot.index))

        cursor = current.index(was_highlighted) if was_highlighted in current else 0
        selected = old.selected if old.selected in candidates else None
        slot = replace(old, cursor=cursor, selected=selected)
        if selected is None:
            slot = replace(slot, center_cursor=0, right_cursor=0)
        slots[view] = _clamped(swapped, view, slot)

    detail = state.detail if state.detail in snapshot.index.endpoints else None
    mode, help_return = state.mode, state.help_return
    if detail is None:
        if mode == Mode.DETAIL:
            mode = Mode.BROWSE
        if help_return == Mode.DETAIL:
            help_return = Mode.BROWSE

    return replace(
        swapped,
        slots=MappingProxyType(slots),
        detail=detail,
        mode=mode,
        help_return=help_return,
        status=f"Reloaded: {len(snapshot.index.fields)} fields, {len(snapshot.warnings)} warnings",
    )
