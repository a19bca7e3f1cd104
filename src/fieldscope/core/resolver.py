"""
Schema Reference Resolver.

Flattens every schema into the full list of fields it carries, including
the fields inherited or composed from the schemas it references.

Resolution Strategy:
    - Explicit stack traversal, never recursion.
    - Each stack entry carries the path of schema names that led to it;
      meeting a name already on the path is a cycle.
    - A schema is expanded again only when reached at a shallower depth
      than before, so densely composed tables stay polynomial.
    - No more than `max_depth` reference hops are followed; going beyond
      that is treated as an assumed cycle.
    - Own fields first, then referenced schemas in declaration order. The
      first declaration of a field name wins.

Every problem found is recorded as a ValidationWarning; resolution never
raises for bad input.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, List, Mapping, Set, Tuple

from ..config import MAX_RESOLUTION_DEPTH
from .types import ApiField, SchemaNode, ValidationWarning, WarningCategory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedSchema:
    """
    A schema with its flattened field set.

    Attributes:
        name: Schema name.
        fields: Own and inherited fields, in resolution order.
        references: Direct references as declared.
        description: Schema description, if any.
        resolved: False when a cycle, unresolved reference or the depth bound
            cut resolution short.
    """
    name: str
    fields: Tuple[ApiField, ...]
    references: Tuple[str, ...] = ()
    description: str | None = None
    resolved: bool = True

    @property
    def field_names(self) -> Tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def get_field(self, name: str) -> ApiField | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None


@dataclass
class ResolutionResult:
    """
    Result container for a resolution pass.

    Attributes:
        schemas: Resolved schemas keyed by name, in declaration order.
        warnings: Non-fatal warnings, de-duplicated.
    """
    schemas: Dict[str, ResolvedSchema] = field(default_factory=dict)
    warnings: List[ValidationWarning] = field(default_factory=list)


class ReferenceResolver:
    """
    Resolves schema references into flattened field sets.

    Example:
        ```python
        resolver = ReferenceResolver(spec.schemas, max_depth=10)
        result = resolver.resolve_all()
        print(result.schemas["Pet"].field_names)
        ```
    """

    def __init__(
        self,
        schemas: Mapping[str, SchemaNode],
        max_depth: int = MAX_RESOLUTION_DEPTH,
    ):
        self._schemas = MappingProxyType(dict(schemas))
        self.max_depth = max_depth
        self._warnings: List[ValidationWarning] = []
        self._seen_warnings: Set[Tuple] = set()

    def resolve_all(self) -> ResolutionResult:
        """Resolve every schema in declaration order."""
        result = ResolutionResult()
        for name in self._schemas:
            result.schemas[name] = self.resolve(name)
        result.warnings = list(self._warnings)
        logger.debug(
            f"Resolved {len(result.schemas)} schemas "
            f"({len(result.warnings)} warnings)"
        )
        return result

    def resolve(self, name: str) -> ResolvedSchema:
        """
        Flatten a single schema.

        Args:
            name: Schema to resolve. Must exist in the schema table.

        Returns:
            ResolvedSchema with the accumulated fields. On a cycle or an
            unresolved reference the fields gathered so far are kept.
        """
        root = self._schemas[name]
        fields: Dict[str, ApiField] = {}
        complete = True

        # (schema name, path from root, hop depth)
        stack: List[Tuple[str, Tuple[str, ...], int]] = [(name, (name,), 0)]
        # Shallowest depth each schema has been expanded at
        expanded: Dict[str, int] = {}

        while stack:
            current, path, depth = stack.pop()
            if expanded.get(current, depth + 1) <= depth:
                continue
            expanded[current] = depth
            node = self._schemas[current]

            for f in node.fields:
                fields.setdefault(f.name, f)

            children = []
            for ref in node.references:
                if ref not in self._schemas:
                    complete = False
                    self._warn(
                        WarningCategory.SCHEMA_REF_UNRESOLVED,
                        f"Schema '{current}' references unknown schema '{ref}'",
                        subject=current,
                        key=(current, ref),
                    )
                    continue

                if ref in path:
                    complete = False
                    cycle = path[path.index(ref):] + (ref,)
                    self._warn(
                        WarningCategory.CIRCULAR_REFERENCE,
                        f"Circular reference: {' -> '.join(cycle)}",
                        subject=ref,
                        key=("cycle", frozenset(cycle)),
                    )
                    continue

                if depth + 1 > self.max_depth:
                    complete = False
                    self._warn(
                        WarningCategory.CIRCULAR_REFERENCE,
                        f"Reference depth limit ({self.max_depth}) reached "
                        f"resolving '{name}' at '{ref}'; assuming a cycle",
                        subject=name,
                        key=("depth", name),
                    )
                    continue

                if expanded.get(ref, depth + 2) <= depth + 1:
                    continue

                children.append((ref, path + (ref,), depth + 1))

            # Reversed so the first declared reference is expanded first
            stack.extend(reversed(children))

        return ResolvedSchema(
            name=name,
            fields=tuple(fields.values()),
            references=tuple(root.references),
            description=root.description,
            resolved=complete,
        )

    def _warn(
        self,
        category: WarningCategory,
        message: str,
        subject: str,
        key: Tuple,
    ) -> None:
        dedupe_key = (category, key)
        if dedupe_key in self._seen_warnings:
            return
        self._seen_warnings.add(dedupe_key)
        logger.debug(f"{category}: {message}")
        self._warnings.append(
            ValidationWarning(category=category, message=message, subject=subject)
        )


def resolve_schemas(
    schemas: Mapping[str, SchemaNode],
    max_depth: int = MAX_RESOLUTION_DEPTH,
) -> ResolutionResult:
    """Convenience wrapper: resolve a whole schema table."""
    return ReferenceResolver(schemas, max_depth=max_depth).resolve_all()
