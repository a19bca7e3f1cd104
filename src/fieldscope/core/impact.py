"""
Impact Analysis.

Derives the "blast radius" figures from the raw cross-reference sets:
usage counts, criticality (reachability from a state-mutating endpoint),
the per-method breakdown, aggregate statistics and the UnusedSchema
warnings.
"""

import logging
from collections import Counter, deque
from typing import Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..config import DEFAULT_METHOD_COLOR, METHOD_COLORS, ExplorerConfig
from .foreign_keys import ForeignKeyDetector
from .resolver import ResolvedSchema
from .snapshot import (
    FieldDetail,
    FieldMeta,
    FieldUsage,
    IndexStats,
    ReverseIndex,
    TypeShare,
    freeze,
)
from .types import EndpointId, Operation, ValidationWarning, WarningCategory, method_rank

logger = logging.getLogger(__name__)


def method_color(method: str) -> str:
    """Fixed semantic colour for an HTTP method (GET green, POST yellow, PUT blue, DELETE red)."""
    return METHOD_COLORS.get(method.upper(), DEFAULT_METHOD_COLOR)


def number_warnings(warnings: Iterable[ValidationWarning]) -> List[Tuple[int, ValidationWarning]]:
    """
    Stable 1-based numbering.

    Warnings are ordered by (category, subject, message) so the same spec
    always yields the same numbers.
    """
    ordered = sorted(warnings, key=lambda w: w.sort_key())
    return [(i, w) for i, w in enumerate(ordered, start=1)]


class ImpactAnalyzer:
    """
    Analyzes the impact of changing a field.
    """

    def __init__(
        self,
        config: Optional[ExplorerConfig] = None,
        fk_detector: Optional[ForeignKeyDetector] = None,
    ):
        self.config = config or ExplorerConfig()
        self.fk_detector = fk_detector or ForeignKeyDetector()

    # =========================================================================
    # Usage
    # =========================================================================

    def derive_usage(
        self,
        name: str,
        schemas: Set[str],
        endpoints: Set[EndpointId],
    ) -> FieldUsage:
        """Build the FieldUsage for one field from its raw reference sets."""
        mutating = Counter(
            e.method for e in endpoints if self.config.is_mutating(e.method)
        )
        breakdown = {m: mutating[m] for m in sorted(mutating, key=method_rank)}

        return FieldUsage(
            name=name,
            schemas=frozenset(schemas),
            endpoints=frozenset(endpoints),
            usage_count=len(schemas) + len(endpoints),
            critical=bool(breakdown),
            mutating_breakdown=freeze(breakdown),
        )

    # =========================================================================
    # Warnings
    # =========================================================================

    def unused_schemas(
        self,
        schemas: Mapping[str, ResolvedSchema],
        operations: Iterable[Operation],
    ) -> List[ValidationWarning]:
        """
        Schemas no endpoint can reach.

        Reachability starts from request/response schemas and parameter
        schema refs, then follows composition references and fields that
        point at other schemas.
        """
        queue = deque()
        for op in operations:
            queue.extend(op.schema_refs())
            queue.extend(p.field.ref for p in op.parameters if p.field.ref)

        reached: Set[str] = set()
        while queue:
            name = queue.popleft()
            if name in reached or name not in schemas:
                continue
            reached.add(name)
            schema = schemas[name]
            queue.extend(schema.references)
            queue.extend(f.ref for f in schema.fields if f.ref)

        return [
            ValidationWarning(
                category=WarningCategory.UNUSED_SCHEMA,
                message=f"Schema '{name}' is not referenced by any endpoint",
                subject=name,
            )
            for name in schemas
            if name not in reached
        ]

    # =========================================================================
    # Statistics
    # =========================================================================

    def compute_stats(self, index: ReverseIndex) -> IndexStats:
        """Aggregate figures for the Stats view."""
        total_fields = len(index.fields)

        type_counts = Counter(meta.type for meta in index.field_meta.values())
        distribution = tuple(
            TypeShare(
                type=t,
                count=c,
                percentage=round(c * 100.0 / total_fields, 1) if total_fields else 0.0,
            )
            for t, c in sorted(type_counts.items(), key=lambda kv: (-kv[1], kv[0]))
        )

        method_counts = Counter(e.method for e in index.endpoints)
        methods = {m: method_counts[m] for m in sorted(method_counts, key=lambda m: (method_rank(m), m))}

        return IndexStats(
            total_schemas=len(index.schemas),
            total_fields=total_fields,
            total_endpoints=len(index.endpoints),
            critical_fields=sum(1 for u in index.fields.values() if u.critical),
            type_distribution=distribution,
            method_breakdown=freeze(methods),
            top_fields=self.top_fields(index, self.config.top_n),
        )

    def top_fields(self, index: ReverseIndex, n: int) -> Tuple[Tuple[str, int], ...]:
        """Top-N fields by usage count; ties broken by name."""
        ranked = sorted(index.fields.values(), key=lambda u: (-u.usage_count, u.name))
        return tuple((u.name, u.usage_count) for u in ranked[:n])

    # =========================================================================
    # Queries
    # =========================================================================

    def field_detail(self, index: ReverseIndex, name: str) -> Optional[FieldDetail]:
        usage = index.get(name)
        if usage is None:
            return None

        meta = index.field_meta.get(name) or FieldMeta(name=name)
        return FieldDetail(
            name=name,
            meta=meta,
            schemas=usage.sorted_schemas(),
            endpoints=usage.sorted_endpoints(),
            usage_count=usage.usage_count,
            critical=usage.critical,
            mutating_breakdown=usage.mutating_breakdown,
            related_fields=self.related_fields(index, name),
            foreign_key_targets=self.fk_detector.targets(name, index.schemas),
        )

    def related_fields(self, index: ReverseIndex, name: str) -> Tuple[str, ...]:
        """Fields that share at least one schema with `name`."""
        usage = index.get(name)
        if usage is None:
            return ()
        related: Set[str] = set()
        for schema_name in usage.schemas:
            schema = index.schemas.get(schema_name)
            if schema:
                related.update(schema.field_names)
        related.discard(name)
        return tuple(sorted(related))

    def schema_endpoints(self, index: ReverseIndex, schema_name: str) -> Tuple[EndpointId, ...]:
        """Endpoints touching any field carried by the schema."""
        schema = index.schemas.get(schema_name)
        if schema is None:
            return ()
        endpoints: Set[EndpointId] = set()
        for field_name in schema.field_names:
            usage = index.get(field_name)
            if usage:
                endpoints.update(usage.endpoints)
        return tuple(sorted(endpoints, key=lambda e: (e.path, method_rank(e.method), e.method)))

    def calculate(self, index: ReverseIndex, field_names: List[str]) -> Dict:
        """
        Blast radius for a set of fields.

        Returns:
            Dict with the impacted schemas and endpoints (union over all
            requested fields), the critical flag and a per-method breakdown.
        """
        schemas: Set[str] = set()
        endpoints: Set[EndpointId] = set()
        missing = []

        for name in field_names:
            usage = index.get(name)
            if usage is None:
                missing.append(name)
                continue
            schemas.update(usage.schemas)
            endpoints.update(usage.endpoints)

        combined = self.derive_usage("+".join(field_names), schemas, endpoints)
        by_method = Counter(e.method for e in endpoints)

        return {
            "fields": [n for n in field_names if n not in missing],
            "missing": missing,
            "impacted_schemas": sorted(schemas),
            "impacted_endpoints": [e.label for e in combined.sorted_endpoints()],
            "count": combined.usage_count,
            "critical": combined.critical,
            "breakdown": {m: by_method[m] for m in sorted(by_method, key=method_rank)},
        }
