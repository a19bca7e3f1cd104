"""
Schema relationship graph backed by rustworkx.

Nodes are schemas and endpoints. Edges:
    schema   -> schema  "references"  composition / inheritance ($ref, allOf...)
    schema   -> schema  "contains"    a field whose value is another schema
    endpoint -> schema  "uses"        request body or response schema

The graph is built from a published ReverseIndex and is as immutable as the
snapshot it came from: a reload builds a new one.
"""

import logging
from typing import Dict, List, Optional, Set, Tuple

import rustworkx as rx

from ..core.snapshot import ReverseIndex
from ..core.types import EndpointId

logger = logging.getLogger(__name__)

SCHEMA = "schema"
ENDPOINT = "endpoint"


def _node_id(kind: str, name: str) -> str:
    return f"{kind}:{name}"


class SchemaGraph:
    """
    Directed graph of schema and endpoint relationships.

    Keeps the bimap between string node IDs and rustworkx integer indices.
    """

    def __init__(self):
        self._graph = rx.PyDiGraph(multigraph=False)
        self._id_to_idx: Dict[str, int] = {}
        self._idx_to_id: Dict[int, str] = {}

    @classmethod
    def from_index(cls, index: ReverseIndex) -> "SchemaGraph":
        graph = cls()
        for name in index.schema_names():
            graph._add_node(SCHEMA, name)
        for eid in index.endpoint_ids():
            graph._add_node(ENDPOINT, eid.label)

        for name in index.schema_names():
            schema = index.schemas[name]
            for ref in schema.references:
                graph._add_edge(_node_id(SCHEMA, name), _node_id(SCHEMA, ref), "references")
            for f in schema.fields:
                if f.ref:
                    graph._add_edge(_node_id(SCHEMA, name), _node_id(SCHEMA, f.ref), "contains")

        for eid in index.endpoint_ids():
            op = index.endpoints[eid]
            for ref in op.schema_refs():
                graph._add_edge(_node_id(ENDPOINT, eid.label), _node_id(SCHEMA, ref), "uses")

        logger.debug(
            f"Schema graph: {graph.node_count} nodes, {graph.edge_count} edges"
        )
        return graph

    def _add_node(self, kind: str, name: str) -> None:
        node_id = _node_id(kind, name)
        if node_id in self._id_to_idx:
            return
        idx = self._graph.add_node({"kind": kind, "name": name})
        self._id_to_idx[node_id] = idx
        self._idx_to_id[idx] = node_id

    def _add_edge(self, source_id: str, target_id: str, relation: str) -> None:
        # Dangling references are reported by the resolver, not drawn
        if source_id not in self._id_to_idx or target_id not in self._id_to_idx:
            return
        self._graph.add_edge(self._id_to_idx[source_id], self._id_to_idx[target_id], relation)

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def node_count(self) -> int:
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        return self._graph.num_edges()

    def impacted_endpoints(self, schema: str) -> List[EndpointId]:
        """Endpoints that reach `schema` directly or through other schemas."""
        idx = self._id_to_idx.get(_node_id(SCHEMA, schema))
        if idx is None:
            return []
        found = [
            EndpointId.parse(self._graph[a]["name"])
            for a in rx.ancestors(self._graph, idx)
            if self._graph[a]["kind"] == ENDPOINT
        ]
        return sorted(found, key=lambda e: (e.path, e.method))

    def neighbors(self, schema: str) -> Tuple[List[str], List[str]]:
        """
        Direct schema neighbours.

        Returns:
            (outgoing, incoming): schemas this one points at, and schemas
            pointing at it. Both sorted.
        """
        idx = self._id_to_idx.get(_node_id(SCHEMA, schema))
        if idx is None:
            return [], []
        outgoing: Set[str] = {
            self._graph[t]["name"] for t in self._graph.successor_indices(idx)
            if self._graph[t]["kind"] == SCHEMA
        }
        incoming: Set[str] = {
            self._graph[s]["name"] for s in self._graph.predecessor_indices(idx)
            if self._graph[s]["kind"] == SCHEMA
        }
        return sorted(outgoing), sorted(incoming)

    def relations(self, schema: str) -> List[Tuple[str, str, str]]:
        """Every edge touching the schema as (source name, relation, target name)."""
        idx = self._id_to_idx.get(_node_id(SCHEMA, schema))
        if idx is None:
            return []
        edges = []
        for s, t, relation in self._graph.out_edges(idx):
            edges.append((self._graph[s]["name"], relation, self._graph[t]["name"]))
        for s, t, relation in self._graph.in_edges(idx):
            edges.append((self._graph[s]["name"], relation, self._graph[t]["name"]))
        return sorted(edges)

    def most_connected(self, limit: int = 5) -> List[Tuple[str, int]]:
        """Schemas with the highest degree (in + out), ties by name."""
        degrees = []
        for node_id, idx in self._id_to_idx.items():
            if not node_id.startswith(f"{SCHEMA}:"):
                continue
            degree = self._graph.in_degree(idx) + self._graph.out_degree(idx)
            degrees.append((self._graph[idx]["name"], degree))
        degrees.sort(key=lambda pair: (-pair[1], pair[0]))
        return degrees[:limit]

    def density(self) -> float:
        """Edges over possible directed edges, as a percentage."""
        n = self.node_count
        if n < 2:
            return 0.0
        return self.edge_count * 100.0 / (n * (n - 1))

    def has_cycle(self) -> bool:
        return not rx.is_directed_acyclic_graph(self._graph)

    def find_cycle(self) -> Optional[List[str]]:
        """One schema cycle, as a list of names, or None."""
        if not self.has_cycle():
            return None
        for cycle in rx.simple_cycles(self._graph):
            return [self._graph[i]["name"] for i in cycle]
        return None
