"""
Index snapshot types.

A snapshot is built in one pass and published whole. Every member is an
immutable container (frozenset, tuple, MappingProxyType) so readers can
hold on to a snapshot for as long as they like while a reload builds the
next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Mapping, Tuple

from .resolver import ResolvedSchema
from .types import ApiField, EndpointId, Operation, ValidationWarning, endpoint_sort_key


def freeze(mapping: Dict) -> Mapping:
    """Wrap a freshly built dict in a read-only view."""
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class FieldMeta:
    """Display metadata for a field, taken from its first declaration."""
    name: str
    type: str = "unknown"
    format: str | None = None
    description: str | None = None
    required: bool = False
    enum_values: Tuple[Any, ...] = ()

    @classmethod
    def from_field(cls, api_field: ApiField) -> "FieldMeta":
        return cls(
            name=api_field.name,
            type=api_field.type_token,
            format=api_field.format,
            description=api_field.description,
            required=api_field.required,
            enum_values=tuple(api_field.enum_values),
        )


@dataclass(frozen=True)
class FieldUsage:
    """
    Where a field is used, plus the figures derived from that.

    Attributes:
        name: Field name.
        schemas: Schemas carrying the field (own or inherited).
        endpoints: Endpoints touching the field.
        usage_count: |schemas| + |endpoints|.
        critical: True when any endpoint uses a mutating method.
        mutating_breakdown: Mutating method -> number of endpoints.
    """
    name: str
    schemas: FrozenSet[str] = frozenset()
    endpoints: FrozenSet[EndpointId] = frozenset()
    usage_count: int = 0
    critical: bool = False
    mutating_breakdown: Mapping[str, int] = field(default_factory=lambda: freeze({}))

    def sorted_schemas(self) -> Tuple[str, ...]:
        return tuple(sorted(self.schemas))

    def sorted_endpoints(self) -> Tuple[EndpointId, ...]:
        return tuple(sorted(self.endpoints, key=endpoint_sort_key))


@dataclass(frozen=True)
class ReverseIndex:
    """
    Field -> (schemas, endpoints) cross-reference, plus the tables the views
    need to describe schemas and endpoints without the raw spec tree.
    """
    fields: Mapping[str, FieldUsage]
    field_meta: Mapping[str, FieldMeta]
    schemas: Mapping[str, ResolvedSchema]
    endpoints: Mapping[EndpointId, Operation]
    endpoint_fields: Mapping[EndpointId, Tuple[str, ...]]
    title: str = ""
    version: str = ""
    source: str | None = None

    def get(self, name: str) -> FieldUsage | None:
        return self.fields.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.fields

    def field_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self.fields))

    def schema_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self.schemas))

    def endpoint_ids(self) -> Tuple[EndpointId, ...]:
        return tuple(sorted(self.endpoints, key=endpoint_sort_key))

    def endpoint_for_label(self, label: str) -> Operation | None:
        return self.endpoints.get(EndpointId.parse(label))

    def as_mapping(self) -> Dict[str, Tuple[FrozenSet[str], FrozenSet[EndpointId]]]:
        """The bare field -> (schemas, endpoints) relation, for comparisons."""
        return {name: (u.schemas, u.endpoints) for name, u in self.fields.items()}


@dataclass(frozen=True)
class TypeShare:
    """One row of the field-type distribution."""
    type: str
    count: int
    percentage: float


@dataclass(frozen=True)
class IndexStats:
    """Aggregate figures for the Stats view."""
    total_schemas: int = 0
    total_fields: int = 0
    total_endpoints: int = 0
    critical_fields: int = 0
    type_distribution: Tuple[TypeShare, ...] = ()
    method_breakdown: Mapping[str, int] = field(default_factory=lambda: freeze({}))
    top_fields: Tuple[Tuple[str, int], ...] = ()


@dataclass(frozen=True)
class BuildOutput:
    """Everything one successful build publishes."""
    index: ReverseIndex
    stats: IndexStats
    warnings: Tuple[ValidationWarning, ...] = ()


@dataclass(frozen=True)
class FieldDetail:
    """Answer to query_field: one field's full impact picture."""
    name: str
    meta: FieldMeta
    schemas: Tuple[str, ...]
    endpoints: Tuple[EndpointId, ...]
    usage_count: int
    critical: bool
    mutating_breakdown: Mapping[str, int]
    related_fields: Tuple[str, ...] = ()
    foreign_key_targets: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.meta.type,
            "format": self.meta.format,
            "description": self.meta.description,
            "schemas": list(self.schemas),
            "endpoints": [e.label for e in self.endpoints],
            "usage_count": self.usage_count,
            "critical": self.critical,
            "mutating_breakdown": dict(self.mutating_breakdown),
            "related_fields": list(self.related_fields),
            "foreign_key_targets": list(self.foreign_key_targets),
        }
