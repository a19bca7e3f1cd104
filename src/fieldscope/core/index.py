"""
Reverse Index Builder.

Turns a typed spec tree into a ReverseIndex snapshot in a single pass:

    1. Fatal checks (no components/schemas section, no operations at all).
    2. Reference resolution (see resolver.py).
    3. Registration: field -> schema for every resolved field, and
       field -> endpoint for parameters and for every field carried by a
       request-body or response schema.
    4. Derivation of usage figures and statistics (see impact.py).

Everything is accumulated into fresh local containers and frozen at the
end. A previously published snapshot is never touched.
"""

import logging
from collections import defaultdict
from typing import Dict, List, Optional, Set

from ..config import ExplorerConfig
from .exceptions import FatalBuildError, NoComponentsSection, NoEndpoints
from .impact import ImpactAnalyzer
from .resolver import resolve_schemas
from .result import Err, Ok, Result
from .snapshot import BuildOutput, FieldDetail, FieldMeta, ReverseIndex, freeze
from .types import (
    ApiField,
    EndpointId,
    Operation,
    SpecTree,
    ValidationWarning,
    WarningCategory,
)

logger = logging.getLogger(__name__)


class IndexBuilder:
    """
    Builds ReverseIndex snapshots.

    The builder holds configuration only; every call to `build` starts from
    empty containers, so one instance can serve any number of reloads.
    """

    def __init__(self, config: Optional[ExplorerConfig] = None):
        self.config = config or ExplorerConfig()
        self.analyzer = ImpactAnalyzer(self.config)

    def build(self, spec: SpecTree) -> Result[BuildOutput, FatalBuildError]:
        if spec.schemas is None:
            logger.warning("Build aborted: spec has no components/schemas section")
            return Err(NoComponentsSection())
        if spec.endpoint_count == 0:
            logger.warning("Build aborted: spec declares no operations")
            return Err(NoEndpoints())

        logger.debug(f"Processing {len(spec.schemas)} schemas, {spec.endpoint_count} operations")

        resolution = resolve_schemas(spec.schemas, max_depth=self.config.max_resolution_depth)
        resolved = resolution.schemas

        warnings: List[ValidationWarning] = list(resolution.warnings)
        warnings.extend(self._structural_warnings(spec))

        schema_users: Dict[str, Set[str]] = defaultdict(set)
        endpoint_users: Dict[str, Set[EndpointId]] = defaultdict(set)
        field_meta: Dict[str, FieldMeta] = {}

        for schema in resolved.values():
            for f in schema.fields:
                schema_users[f.name].add(schema.name)
                self._remember(field_meta, f)

        endpoints: Dict[EndpointId, Operation] = {}
        endpoint_fields: Dict[EndpointId, tuple] = {}

        for op in spec.iter_operations():
            eid = op.endpoint_id
            endpoints[eid] = op
            touched: List[str] = []

            for param in op.parameters:
                endpoint_users[param.name].add(eid)
                self._remember(field_meta, param.field)
                if param.name not in touched:
                    touched.append(param.name)

            for ref in op.schema_refs():
                schema = resolved.get(ref)
                if schema is None:
                    warnings.append(ValidationWarning(
                        category=WarningCategory.SCHEMA_REF_UNRESOLVED,
                        message=f"Endpoint '{eid.label}' references unknown schema '{ref}'",
                        subject=eid.label,
                    ))
                    continue
                for name in schema.field_names:
                    endpoint_users[name].add(eid)
                    if name not in touched:
                        touched.append(name)

            endpoint_fields[eid] = tuple(touched)

        warnings.extend(self.analyzer.unused_schemas(resolved, endpoints.values()))

        fields = {}
        for name in sorted(set(schema_users) | set(endpoint_users)):
            fields[name] = self.analyzer.derive_usage(
                name, schema_users.get(name, set()), endpoint_users.get(name, set())
            )

        index = ReverseIndex(
            fields=freeze(fields),
            field_meta=freeze(field_meta),
            schemas=freeze(resolved),
            endpoints=freeze(endpoints),
            endpoint_fields=freeze(endpoint_fields),
            title=spec.title,
            version=spec.version,
            source=spec.source,
        )
        stats = self.analyzer.compute_stats(index)

        ordered = tuple(sorted(self._dedupe(warnings), key=lambda w: w.sort_key()))
        logger.info(
            f"Indexed {len(fields)} fields across {len(resolved)} schemas "
            f"and {len(endpoints)} endpoints ({len(ordered)} warnings)"
        )
        return Ok(BuildOutput(index=index, stats=stats, warnings=ordered))

    def _structural_warnings(self, spec: SpecTree) -> List[ValidationWarning]:
        found: List[ValidationWarning] = []

        for path, item in spec.paths.items():
            if not item.operations:
                found.append(ValidationWarning(
                    category=WarningCategory.OPERATIONLESS_PATH,
                    message=f"Path '{path}' declares no operations",
                    subject=path,
                ))

        for name, node in (spec.schemas or {}).items():
            if not node.description:
                found.append(ValidationWarning(
                    category=WarningCategory.MISSING_DESCRIPTION,
                    message=f"Schema '{name}' has no description",
                    subject=name,
                ))
            for f in node.fields:
                if f.type_token not in self.config.known_field_types:
                    found.append(self._unknown_type(f, owner=name))

        for op in spec.iter_operations():
            label = op.endpoint_id.label
            if not op.summary and not op.description:
                found.append(ValidationWarning(
                    category=WarningCategory.MISSING_DESCRIPTION,
                    message=f"Endpoint '{label}' has no summary or description",
                    subject=label,
                ))
            for param in op.parameters:
                if param.field.type_token not in self.config.known_field_types:
                    found.append(self._unknown_type(param.field, owner=label))

        return found

    @staticmethod
    def _unknown_type(f: ApiField, owner: str) -> ValidationWarning:
        return ValidationWarning(
            category=WarningCategory.UNKNOWN_FIELD_TYPE,
            message=f"Field '{f.name}' in '{owner}' has unknown type '{f.type_token}'",
            subject=f"{owner}.{f.name}",
        )

    @staticmethod
    def _remember(field_meta: Dict[str, FieldMeta], f: ApiField) -> None:
        if f.name not in field_meta:
            field_meta[f.name] = FieldMeta.from_field(f)

    @staticmethod
    def _dedupe(warnings: List[ValidationWarning]) -> List[ValidationWarning]:
        seen = set()
        unique = []
        for w in warnings:
            if w in seen:
                continue
            seen.add(w)
            unique.append(w)
        return unique


def build_index(
    spec: SpecTree,
    config: Optional[ExplorerConfig] = None,
) -> Result[BuildOutput, FatalBuildError]:
    """
    Build a fresh index snapshot.

    Returns:
        Ok(BuildOutput) with the index, stats and sorted warnings, or
        Err(FatalBuildError) when the spec cannot be indexed at all.
    """
    return IndexBuilder(config).build(spec)


def query_field(
    index: ReverseIndex,
    name: str,
    analyzer: Optional[ImpactAnalyzer] = None,
) -> Optional[FieldDetail]:
    """Full impact picture for one field, or None if the index does not know it."""
    return (analyzer or ImpactAnalyzer()).field_detail(index, name)
