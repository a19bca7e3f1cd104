"""
OpenAPI 3.x document loader.

Reads a JSON or YAML document and converts it into a SpecTree. Only the
parts the cross-reference engine needs are extracted:

    components/schemas  -> SchemaNode (fields + composition references)
    paths               -> PathItem / Operation (parameters, request body
                           and response schema references)

Local references of the form `#/components/<section>/<Name>` are followed
for parameters, request bodies and responses. Schema references are kept as
names and left for the resolver. External (multi-document) references are
ignored.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from ..config import HTTP_METHODS, MAX_SPEC_SIZE_BYTES
from ..core.exceptions import SpecLoadError
from ..core.types import (
    ApiField,
    Operation,
    ParameterBinding,
    ParamLocation,
    PathItem,
    SchemaNode,
    SpecTree,
)

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"
COMPOSITION_KEYS = ("allOf", "oneOf", "anyOf")
PREFERRED_MEDIA_TYPES = ("application/json", "application/*+json", "*/*")


def ref_name(ref: Optional[str]) -> Optional[str]:
    """
    Extract the schema name from a local schema reference.

    "#/components/schemas/Pet" -> "Pet"; anything else -> None.
    """
    if not isinstance(ref, str) or not ref.startswith(SCHEMA_REF_PREFIX):
        return None
    name = ref[len(SCHEMA_REF_PREFIX):]
    return name or None


def load_spec(path: Union[str, Path]) -> SpecTree:
    """
    Load and convert a spec document.

    `.json` files are decoded as JSON, everything else as YAML (which also
    accepts JSON).

    Raises:
        SpecLoadError: Missing file, oversized file, undecodable content or
            a document that is not a mapping.
    """
    spec_path = Path(path)
    source = str(spec_path)

    if not spec_path.is_file():
        raise SpecLoadError(source, "file not found")

    size = spec_path.stat().st_size
    if size > MAX_SPEC_SIZE_BYTES:
        raise SpecLoadError(
            source, f"file is too large ({size} bytes, limit {MAX_SPEC_SIZE_BYTES})"
        )

    try:
        text = spec_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SpecLoadError(source, f"cannot read file: {e}") from e

    try:
        if spec_path.suffix.lower() == ".json":
            document = json.loads(text)
        else:
            document = yaml.safe_load(text)
    except json.JSONDecodeError as e:
        raise SpecLoadError(source, f"invalid JSON: {e}") from e
    except yaml.YAMLError as e:
        raise SpecLoadError(source, f"invalid YAML: {e}") from e

    logger.debug(f"Loaded {source} ({size} bytes)")
    return parse_document(document, source=source)


def parse_document(document: Any, source: Optional[str] = None) -> SpecTree:
    """
    Convert a decoded OpenAPI document into a SpecTree.

    Raises:
        SpecLoadError: The document decodes but does not have the shape of an
            OpenAPI document (a list where a mapping belongs, a number where
            a name belongs, and so on).
    """
    label = source or "<document>"
    if not isinstance(document, dict):
        raise SpecLoadError(label, "document is not a mapping")

    try:
        return _DocumentParser(document, label).parse(source)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise SpecLoadError(
            label, f"invalid {e.title} ({location}: {first['msg']})"
        ) from e


class _DocumentParser:
    """Holds the document so local component references can be followed."""

    def __init__(self, document: Dict[str, Any], label: str):
        self.document = document
        self.label = label
        self.components = self._mapping(document.get("components"), "components")

    def parse(self, source: Optional[str]) -> SpecTree:
        info = self._mapping(self.document.get("info"), "info")

        raw_schemas = self.components.get("schemas")
        schemas: Optional[Dict[str, SchemaNode]] = None
        if raw_schemas is not None:
            schemas = {
                str(name): self._parse_schema(
                    str(name), self._schema(raw, f"components.schemas.{name}")
                )
                for name, raw in self._mapping(raw_schemas, "components.schemas").items()
            }

        paths: Dict[str, PathItem] = {}
        for path, raw_item in self._mapping(self.document.get("paths"), "paths").items():
            paths[str(path)] = self._parse_path_item(
                str(path), self._mapping(raw_item, f"paths.{path}")
            )

        tree = SpecTree(
            title=str(info.get("title", "")),
            version=str(info.get("version", "")),
            source=source,
            schemas=schemas,
            paths=paths,
        )
        logger.debug(
            f"Parsed {len(schemas or {})} schemas and {tree.endpoint_count} operations"
        )
        return tree

    # =========================================================================
    # Shape checks
    # =========================================================================

    def _mapping(self, value: Any, where: str) -> Dict[str, Any]:
        """A mapping node; absent or null counts as empty."""
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise SpecLoadError(
                self.label, f"{where} must be a mapping, got {type(value).__name__}"
            )
        return value

    def _list(self, value: Any, where: str) -> List[Any]:
        """A sequence node; absent or null counts as empty."""
        if value is None:
            return []
        if not isinstance(value, list):
            raise SpecLoadError(
                self.label, f"{where} must be a list, got {type(value).__name__}"
            )
        return value

    def _schema(self, value: Any, where: str) -> Dict[str, Any]:
        # OpenAPI 3.1 allows `true` / `false` as a schema; neither declares anything
        if isinstance(value, bool):
            return {}
        return self._mapping(value, where)

    def _names(self, value: Any, where: str) -> set:
        return {str(n) for n in self._list(value, where) if isinstance(n, (str, int))}

    # =========================================================================
    # Schemas
    # =========================================================================

    def _parse_schema(self, name: str, raw: Dict[str, Any]) -> SchemaNode:
        fields: List[ApiField] = []
        references: List[str] = []

        self._collect(raw, fields, references, f"components.schemas.{name}")

        return SchemaNode(
            name=name,
            fields=fields,
            references=references,
            description=raw.get("description"),
        )

    def _collect(
        self,
        raw: Dict[str, Any],
        fields: List[ApiField],
        references: List[str],
        where: str,
    ) -> None:
        """Gather own properties and composition references, in declaration order."""
        target = ref_name(raw.get("$ref"))
        if target and target not in references:
            references.append(target)

        required = self._names(raw.get("required"), f"{where}.required")
        for prop_name, prop in self._mapping(raw.get("properties"), f"{where}.properties").items():
            prop_where = f"{where}.properties.{prop_name}"
            fields.append(self._parse_field(
                str(prop_name),
                self._schema(prop, prop_where),
                str(prop_name) in required,
                where=prop_where,
            ))

        # An array schema carries the fields of its item schema, inline or referenced
        items = raw.get("items")
        if isinstance(items, dict):
            self._collect(items, fields, references, f"{where}.items")

        for key in COMPOSITION_KEYS:
            for part in self._list(raw.get(key), f"{where}.{key}"):
                if isinstance(part, dict):
                    self._collect(part, fields, references, f"{where}.{key}")

    def _parse_field(
        self,
        name: str,
        raw: Dict[str, Any],
        required: bool = False,
        description: Optional[str] = None,
        where: str = "",
    ) -> ApiField:
        ref = ref_name(raw.get("$ref"))
        items = raw.get("items") if isinstance(raw.get("items"), dict) else None
        if ref is None and items is not None:
            ref = ref_name(items.get("$ref"))
        if ref is None:
            for key in COMPOSITION_KEYS:
                for part in self._list(raw.get(key), f"{where}.{key}"):
                    if isinstance(part, dict) and ref_name(part.get("$ref")):
                        ref = ref_name(part.get("$ref"))
                        break
                if ref:
                    break

        return ApiField(
            name=name,
            type=_field_type(raw, ref),
            format=raw.get("format"),
            description=description or raw.get("description"),
            required=required,
            enum_values=list(self._list(raw.get("enum"), f"{where}.enum")),
            ref=ref,
        )

    # =========================================================================
    # Paths
    # =========================================================================

    def _parse_path_item(self, path: str, raw: Dict[str, Any]) -> PathItem:
        shared = [
            self._deref(p, "parameters")
            for p in self._list(raw.get("parameters"), f"paths.{path}.parameters")
        ]

        operations: Dict[str, Operation] = {}
        for method, raw_op in raw.items():
            if str(method).lower() not in HTTP_METHODS:
                continue
            where = f"paths.{path}.{method}"
            op = self._parse_operation(
                path, str(method).upper(), self._mapping(raw_op, where), shared, where
            )
            operations[op.method] = op
        return PathItem(operations=operations)

    def _parse_operation(
        self,
        path: str,
        method: str,
        raw: Dict[str, Any],
        shared: List[Dict[str, Any]],
        where: str,
    ) -> Operation:
        # Operation-level parameters override path-level ones with the same (name, in)
        merged: Dict[Tuple[str, str], Dict[str, Any]] = {}
        own = [
            self._deref(p, "parameters")
            for p in self._list(raw.get("parameters"), f"{where}.parameters")
        ]
        for p in shared + own:
            if "name" in p:
                merged[(str(p["name"]), str(p.get("in", "query")))] = p

        parameters = [self._parse_parameter(p, f"{where}.parameters") for p in merged.values()]

        request_body_ref, body_params = self._parse_request_body(
            raw.get("requestBody"), f"{where}.requestBody"
        )
        parameters.extend(body_params)

        responses: Dict[str, Optional[str]] = {}
        for status, raw_resp in self._mapping(raw.get("responses"), f"{where}.responses").items():
            resp = self._deref(raw_resp, "responses")
            responses[str(status)] = self._content_ref(resp.get("content"))[0]

        return Operation(
            method=method,
            path=path,
            operation_id=raw.get("operationId"),
            summary=raw.get("summary"),
            description=raw.get("description"),
            tags=[str(t) for t in self._list(raw.get("tags"), f"{where}.tags")],
            parameters=parameters,
            request_body_ref=request_body_ref,
            responses=responses,
        )

    def _parse_parameter(self, raw: Dict[str, Any], where: str) -> ParameterBinding:
        try:
            location = ParamLocation(str(raw.get("in", "query")).lower())
        except ValueError:
            location = ParamLocation.QUERY
        name = str(raw["name"])
        f = self._parse_field(
            name,
            self._schema(raw.get("schema"), f"{where}.{name}.schema"),
            required=bool(raw.get("required", False)),
            description=raw.get("description"),
            where=f"{where}.{name}",
        )
        return ParameterBinding(field=f, location=location)

    def _parse_request_body(
        self, raw: Any, where: str
    ) -> Tuple[Optional[str], List[ParameterBinding]]:
        """
        Request body schema reference, or body parameters for an inline schema.

        Inline object bodies have no schema to point at, so each property is
        bound to the endpoint as a BODY parameter instead.
        """
        if not isinstance(raw, dict):
            return None, []
        body = self._deref(raw, "requestBodies")
        ref, inline = self._content_ref(body.get("content"))
        if ref or not inline:
            return ref, []

        required = self._names(inline.get("required"), f"{where}.required")
        params = [
            ParameterBinding(
                field=self._parse_field(
                    str(name),
                    self._schema(prop, f"{where}.properties.{name}"),
                    str(name) in required,
                    where=f"{where}.properties.{name}",
                ),
                location=ParamLocation.BODY,
            )
            for name, prop in self._mapping(inline.get("properties"), f"{where}.properties").items()
        ]
        return None, params

    def _content_ref(self, content: Any) -> Tuple[Optional[str], Optional[Dict[str, Any]]]:
        """
        Pick the schema of a content map.

        Returns:
            (schema name, None) for a referenced schema, (None, inline schema)
            for an inline one, or (None, None) when there is no schema.
        """
        if not isinstance(content, dict) or not content:
            return None, None

        media = None
        for preferred in PREFERRED_MEDIA_TYPES:
            if preferred in content:
                media = content[preferred]
                break
        if media is None:
            media = next(iter(content.values()))

        if not isinstance(media, dict):
            return None, None
        schema = media.get("schema")
        if not isinstance(schema, dict):
            return None, None

        ref = ref_name(schema.get("$ref"))
        if ref is None and isinstance(schema.get("items"), dict):
            ref = ref_name(schema["items"].get("$ref"))
        if ref is None:
            for key in COMPOSITION_KEYS:
                for part in self._list(schema.get(key), key):
                    if isinstance(part, dict) and ref_name(part.get("$ref")):
                        return ref_name(part.get("$ref")), None
        if ref:
            return ref, None
        return None, schema

    def _deref(self, raw: Any, section: str) -> Dict[str, Any]:
        """Follow a `#/components/<section>/<Name>` reference, one hop."""
        if not isinstance(raw, dict):
            return {}
        ref = raw.get("$ref")
        prefix = f"#/components/{section}/"
        if isinstance(ref, str) and ref.startswith(prefix):
            target = self._mapping(self.components.get(section), f"components.{section}").get(
                ref[len(prefix):]
            )
            if isinstance(target, dict):
                return target
            logger.debug(f"Unresolved {section} reference: {ref}")
            return {}
        return raw


def _field_type(raw: Dict[str, Any], ref: Optional[str]) -> Optional[str]:
    declared = raw.get("type")
    # OpenAPI 3.1 allows a list of types, e.g. ["string", "null"]
    if isinstance(declared, list):
        declared = next((t for t in declared if t != "null"), None)
    if declared:
        return str(declared)
    if ref is not None or "properties" in raw:
        return "object"
    if "items" in raw:
        return "array"
    return None
