"""
Rich rendering of a SelectionState.

Pure presentation: every function takes state and returns a renderable.
The lists drawn in the panels come from the same helpers the state machine
uses, so cursor positions always line up with what is on screen.
"""

from typing import List, Optional

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel as RichPanel
from rich.table import Table
from rich.text import Text

from ..core.impact import method_color
from ..core.types import EndpointId, status_class
from .state import Mode, Panel, SelectionState, center_items, left_items, right_items
from .views import View, VIEWS

FOCUS_STYLE = "bold cyan"
IDLE_STYLE = "grey50"

HELP_LINES = [
    ("1-5", "Switch view (Fields, Schemas, Endpoints, Graph, Stats)"),
    ("Tab", "Next panel"),
    ("Up/Down", "Move cursor"),
    ("Enter", "Select item / open endpoint details"),
    ("/", "Search the left list"),
    ("Esc", "Clear search / close popup"),
    ("r", "Reload the spec"),
    ("h", "Toggle help"),
    ("q", "Quit"),
]


def _endpoint_text(label: str) -> Text:
    eid = EndpointId.parse(label)
    if not eid.path:
        return Text(label)
    text = Text(f"{eid.method:<7}", style=f"bold {method_color(eid.method)}")
    text.append(eid.path)
    return text


def _list_panel(
    title: str,
    items: List[str],
    cursor: int,
    focused: bool,
    endpoints: bool = False,
    empty: str = "Nothing to show",
    height: Optional[int] = None,
) -> RichPanel:
    if not items:
        body: RenderableType = Text(empty, style="dim")
    else:
        # Keep the cursor on screen by sliding a window over the list
        window = max((height or 30) - 2, 1)
        start = max(0, min(cursor - window // 2, len(items) - window))
        lines = []
        for i in range(start, min(start + window, len(items))):
            text = _endpoint_text(items[i]) if endpoints else Text(items[i])
            if i == cursor:
                text.stylize("reverse" if focused else "underline")
            lines.append(text)
        body = Group(*lines)

    return RichPanel(
        body,
        title=f"{title} ({len(items)})",
        border_style=FOCUS_STYLE if focused else IDLE_STYLE,
    )


def _field_header(state: SelectionState, name: str) -> RenderableType:
    index = state.snapshot.index
    usage = index.get(name)
    meta = index.field_meta.get(name)
    table = Table.grid(padding=(0, 1))
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("Field", Text(name, style="bold"))
    if meta:
        table.add_row("Type", meta.type + (f" ({meta.format})" if meta.format else ""))
        if meta.description:
            table.add_row("Description", meta.description)
        if meta.enum_values:
            table.add_row("Enum", ", ".join(str(v) for v in meta.enum_values))
    if usage:
        table.add_row("Usage", str(usage.usage_count))
        table.add_row(
            "Critical",
            Text("Yes", style="red") if usage.critical else Text("No", style="green"),
        )
        if usage.mutating_breakdown:
            table.add_row(
                "Mutating",
                ", ".join(f"{m}:{c}" for m, c in usage.mutating_breakdown.items()),
            )
    targets = state.snapshot.analyzer.fk_detector.targets(name, index.schemas)
    if targets:
        table.add_row("References", ", ".join(targets))
    return table


def _endpoint_header(state: SelectionState, label: str) -> RenderableType:
    op = state.snapshot.index.endpoint_for_label(label)
    table = Table.grid(padding=(0, 1))
    table.add_column(style="cyan")
    table.add_column()
    table.add_row("Endpoint", _endpoint_text(label))
    if op is None:
        return table
    if op.summary:
        table.add_row("Summary", op.summary)
    if op.tags:
        table.add_row("Tags", ", ".join(op.tags))
    if op.request_body_ref:
        table.add_row("Body", op.request_body_ref)
    return table


def _center(state: SelectionState, height: Optional[int]) -> RenderableType:
    view = state.view
    variant = VIEWS[view]
    slot = state.slot
    focused = state.panel == Panel.CENTER
    items = center_items(state)

    listing = _list_panel(
        variant.center_title, items, slot.center_cursor, focused,
        empty="Select an item on the left" if view != View.STATS else "No warnings",
        height=height,
    )
    if view == View.FIELDS and slot.selected:
        return Group(_field_header(state, slot.selected), listing)
    if view == View.ENDPOINTS and slot.selected:
        return Group(_endpoint_header(state, slot.selected), listing)
    if view == View.GRAPH:
        return Group(_graph_header(state), listing)
    return listing


def _graph_header(state: SelectionState) -> RenderableType:
    snapshot = state.snapshot
    graph = snapshot.graph
    table = Table.grid(padding=(0, 1))
    table.add_column(style="cyan")
    table.add_column()

    selected = state.slot.selected
    if selected:
        outgoing, incoming = graph.neighbors(selected)
        table.add_row("Schema", Text(selected, style="bold"))
        table.add_row("Points at", ", ".join(outgoing) or "-")
        table.add_row("Pointed at by", ", ".join(incoming) or "-")

    table.add_row("Nodes", f"{graph.node_count} ({graph.edge_count} edges)")
    table.add_row("Critical fields", Text(str(snapshot.stats.critical_fields), style="red"))
    foreign_keys = snapshot.analyzer.fk_detector.scan(
        snapshot.index.field_names(), snapshot.index.schemas
    )
    table.add_row("Foreign keys", str(len(foreign_keys)))
    table.add_row(
        "Most connected",
        ", ".join(f"{name} ({degree})" for name, degree in graph.most_connected(limit=3)) or "-",
    )
    table.add_row("Density", f"{graph.density():.2f}%")
    cycle = graph.find_cycle()
    if cycle:
        table.add_row("Cycle", Text(" -> ".join(cycle + cycle[:1]), style="yellow"))
    else:
        table.add_row("Cycle", Text("none", style="green"))
    return table


def _stats_summary(state: SelectionState) -> RenderableType:
    stats = state.snapshot.stats
    totals = Table.grid(padding=(0, 1))
    totals.add_column(style="cyan")
    totals.add_column(justify="right")
    totals.add_row("Schemas", str(stats.total_schemas))
    totals.add_row("Fields", str(stats.total_fields))
    totals.add_row("Endpoints", str(stats.total_endpoints))
    totals.add_row("Critical fields", Text(str(stats.critical_fields), style="red"))

    types = Table(title="Field types", show_edge=False, expand=True)
    types.add_column("Type")
    types.add_column("Count", justify="right")
    types.add_column("%", justify="right")
    for share in stats.type_distribution:
        types.add_row(share.type, str(share.count), f"{share.percentage:.1f}")

    methods = Table(title="Methods", show_edge=False, expand=True)
    methods.add_column("Method")
    methods.add_column("Count", justify="right")
    for method, count in stats.method_breakdown.items():
        methods.add_row(Text(method, style=method_color(method)), str(count))

    graph = state.snapshot.graph
    extras = Text(f"Graph density: {graph.density():.2f}%", style="dim")

    focused = state.panel == Panel.RIGHT
    return RichPanel(
        Group(totals, Text(""), types, Text(""), methods, Text(""), extras),
        title=VIEWS[View.STATS].right_title,
        border_style=FOCUS_STYLE if focused else IDLE_STYLE,
    )


def _right(state: SelectionState, height: Optional[int]) -> RenderableType:
    if state.view == View.STATS:
        return _stats_summary(state)
    variant = VIEWS[state.view]
    endpoints = state.view != View.ENDPOINTS
    return _list_panel(
        variant.right_title,
        right_items(state),
        state.slot.right_cursor,
        state.panel == Panel.RIGHT,
        endpoints=endpoints,
        empty="Select an item to see related entries",
        height=height,
    )


def _header(state: SelectionState) -> RenderableType:
    index = state.snapshot.index
    tabs = Text()
    for kind, variant in VIEWS.items():
        style = "bold reverse" if kind == state.view else "dim"
        tabs.append(f" {variant.key}:{variant.title} ", style=style)
        tabs.append(" ")

    title = Text(f"{index.title or 'API'} {index.version}".strip(), style="bold")
    if state.search_mode or state.query:
        cursor = "_" if state.search_mode else ""
        title.append(f"   Search: {state.query}{cursor}", style="yellow")
    return Group(title, tabs)


def _footer(state: SelectionState) -> RenderableType:
    if state.loading:
        return Text(state.loading_message or "Loading...", style="bold yellow")
    if state.status:
        return Text(state.status, style="bold magenta")
    hint = {
        Mode.SEARCH: "Type to filter  Enter: select  Esc: clear",
        Mode.DETAIL: "Esc: close",
        Mode.HELP: "Esc/h: close help",
    }.get(state.mode, "h: help  /: search  Tab: panel  r: reload  q: quit")
    return Text(hint, style="dim")


def render_detail(state: SelectionState) -> RenderableType:
    """Popup with an endpoint's full description."""
    op = state.snapshot.index.endpoints.get(state.detail) if state.detail else None
    if op is None:
        return Text("")

    body = Table.grid(padding=(0, 1))
    body.add_column(style="cyan")
    body.add_column()
    if op.operation_id:
        body.add_row("Operation", op.operation_id)
    if op.summary:
        body.add_row("Summary", op.summary)
    if op.description:
        body.add_row("Description", op.description)
    if op.tags:
        body.add_row("Tags", ", ".join(op.tags))

    params = Table(title="Parameters", show_edge=False, expand=True)
    params.add_column("Name")
    params.add_column("In")
    params.add_column("Type")
    params.add_column("Required")
    for p in op.parameters:
        params.add_row(p.name, p.location.value, p.field.type_token, "yes" if p.field.required else "")

    responses = Table(title="Responses", show_edge=False, expand=True)
    responses.add_column("Status")
    responses.add_column("Class")
    responses.add_column("Schema")
    for status, ref in op.responses.items():
        responses.add_row(status, status_class(status), ref or "-")

    parts: List[RenderableType] = [body]
    if op.request_body_ref:
        parts.append(Text(f"Request body: {op.request_body_ref}"))
    if op.parameters:
        parts.append(params)
    if op.responses:
        parts.append(responses)

    return RichPanel(Group(*parts), title=_endpoint_text(state.detail.label), border_style="bold")


def render_help() -> RenderableType:
    table = Table.grid(padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()
    for key, text in HELP_LINES:
        table.add_row(key, text)
    return RichPanel(table, title="Help", border_style="bold")


def render(state: SelectionState, height: Optional[int] = None) -> RenderableType:
    """Full screen for one frame."""
    layout = Layout()
    layout.split_column(
        Layout(_header(state), name="header", size=2),
        Layout(name="body"),
        Layout(_footer(state), name="footer", size=1),
    )

    if state.mode == Mode.HELP:
        layout["body"].update(render_help())
        return layout
    if state.mode == Mode.DETAIL:
        layout["body"].update(render_detail(state))
        return layout

    body_height = (height - 3) if height else None
    variant = VIEWS[state.view]
    slot = state.slot
    layout["body"].split_row(
        Layout(
            _list_panel(
                variant.left_title, left_items(state), slot.cursor,
                state.panel == Panel.LEFT,
                endpoints=state.view == View.ENDPOINTS,
                empty="No matches" if state.query else "Nothing to show",
                height=body_height,
            ),
            name="left",
        ),
        Layout(_center(state, body_height), name="center", ratio=2),
        Layout(_right(state, body_height), name="right"),
    )
    return layout
