"""
Explorer views.

Each view is one variant of a closed set with a uniform contract:

    candidates(index)                 full Left-panel list (searched, never mutated)
    center_items(snapshot, selected)  Center-panel list for the committed selection
    right_items(snapshot, selected)   Right-panel list for the committed selection
    right_endpoint(snapshot, selected, item)
                                      endpoint behind a Right item, if any

The state machine only talks to this contract; the renderer uses the same
lists, so what is drawn is exactly what the cursors index into.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Dict, List, Optional

from ..config import ExplorerConfig
from ..core.impact import ImpactAnalyzer, number_warnings
from ..core.snapshot import BuildOutput, IndexStats, ReverseIndex
from ..core.types import EndpointId, ValidationWarning
from ..graph.schema_graph import SchemaGraph


class View(StrEnum):
    FIELDS = "fields"
    SCHEMAS = "schemas"
    ENDPOINTS = "endpoints"
    GRAPH = "graph"
    STATS = "stats"


@dataclass(frozen=True)
class Snapshot:
    """
    One published build, with everything derived from it.

    Replaced as a whole on reload.
    """
    output: BuildOutput
    graph: SchemaGraph
    analyzer: ImpactAnalyzer = field(default_factory=ImpactAnalyzer, compare=False)

    @classmethod
    def from_output(cls, output: BuildOutput, config: Optional[ExplorerConfig] = None) -> "Snapshot":
        return cls(
            output=output,
            graph=SchemaGraph.from_index(output.index),
            analyzer=ImpactAnalyzer(config),
        )

    @property
    def index(self) -> ReverseIndex:
        return self.output.index

    @property
    def stats(self) -> IndexStats:
        return self.output.stats

    @property
    def warnings(self) -> tuple[ValidationWarning, ...]:
        return self.output.warnings


class ViewVariant(ABC):
    """Capability contract shared by all views."""

    kind: View
    key: str
    title: str
    left_title: str
    center_title: str
    right_title: str

    @abstractmethod
    def candidates(self, index: ReverseIndex) -> List[str]:
        """Full, unfiltered Left-panel list in display order."""

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        return []

    def right_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        return []

    def right_endpoint(
        self,
        snapshot: Snapshot,
        selected: Optional[str],
        item: str,
    ) -> Optional[EndpointId]:
        return None


def _endpoint_in(snapshot: Snapshot, label: str) -> Optional[EndpointId]:
    eid = EndpointId.parse(label)
    return eid if eid in snapshot.index.endpoints else None


class FieldsView(ViewVariant):
    kind = View.FIELDS
    key = "1"
    title = "Fields"
    left_title = "Fields"
    center_title = "Field Details"
    right_title = "Endpoints"

    def candidates(self, index: ReverseIndex) -> List[str]:
        return list(index.field_names())

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        usage = snapshot.index.get(selected) if selected else None
        return list(usage.sorted_schemas()) if usage else []

    def right_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        usage = snapshot.index.get(selected) if selected else None
        return [e.label for e in usage.sorted_endpoints()] if usage else []

    def right_endpoint(self, snapshot, selected, item):
        return _endpoint_in(snapshot, item)


class SchemasView(ViewVariant):
    kind = View.SCHEMAS
    key = "2"
    title = "Schemas"
    left_title = "Schemas"
    center_title = "Schema Fields"
    right_title = "Endpoints"

    def candidates(self, index: ReverseIndex) -> List[str]:
        return list(index.schema_names())

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        schema = snapshot.index.schemas.get(selected) if selected else None
        return list(schema.field_names) if schema else []

    def right_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        if not selected:
            return []
        return [e.label for e in snapshot.analyzer.schema_endpoints(snapshot.index, selected)]

    def right_endpoint(self, snapshot, selected, item):
        return _endpoint_in(snapshot, item)


class EndpointsView(ViewVariant):
    kind = View.ENDPOINTS
    key = "3"
    title = "Endpoints"
    left_title = "Endpoints"
    center_title = "Endpoint Fields"
    right_title = "Schemas"

    def candidates(self, index: ReverseIndex) -> List[str]:
        return [e.label for e in index.endpoint_ids()]

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        if not selected:
            return []
        return list(snapshot.index.endpoint_fields.get(EndpointId.parse(selected), ()))

    def right_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        op = snapshot.index.endpoint_for_label(selected) if selected else None
        return op.schema_refs() if op else []


class GraphView(ViewVariant):
    kind = View.GRAPH
    key = "4"
    title = "Graph"
    left_title = "Schemas"
    center_title = "Relationships"
    right_title = "Impacted Endpoints"

    def candidates(self, index: ReverseIndex) -> List[str]:
        return list(index.schema_names())

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        if not selected:
            return []
        return [
            f"{source} -{relation}-> {target}"
            for source, relation, target in snapshot.graph.relations(selected)
        ]

    def right_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        if not selected:
            return []
        return [e.label for e in snapshot.graph.impacted_endpoints(selected)]

    def right_endpoint(self, snapshot, selected, item):
        return _endpoint_in(snapshot, item)


class StatsView(ViewVariant):
    """Left: fields ranked by usage. Center: numbered warnings. Right: totals."""

    kind = View.STATS
    key = "5"
    title = "Stats"
    left_title = "Fields by Usage"
    center_title = "Validation Warnings"
    right_title = "Summary"

    def candidates(self, index: ReverseIndex) -> List[str]:
        ranked = sorted(index.fields.values(), key=lambda u: (-u.usage_count, u.name))
        return [u.name for u in ranked]

    def center_items(self, snapshot: Snapshot, selected: Optional[str]) -> List[str]:
        return [
            f"{n}. [{w.category.value}] {w.message}"
            for n, w in number_warnings(snapshot.warnings)
        ]


VIEWS: Dict[View, ViewVariant] = {
    v.kind: v
    for v in (FieldsView(), SchemasView(), EndpointsView(), GraphView(), StatsView())
}

VIEW_KEYS: Dict[str, View] = {v.key: kind for kind, v in VIEWS.items()}


def get_view(view: View | str) -> ViewVariant:
    return VIEWS[View(view)]
