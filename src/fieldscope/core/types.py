"""
Core type definitions for fieldscope.

The spec tree handed over by the loader is modelled with pydantic so that
malformed input fails at the boundary instead of deep inside the builder.
Field identity for cross-referencing is the field *name*: two fields called
`id` in different schemas are the same logical field.
"""

from enum import StrEnum
from typing import Any, Dict, Iterator, List, NamedTuple, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..config import METHOD_ORDER


class WarningCategory(StrEnum):
    """Non-fatal findings recorded while resolving and indexing."""
    SCHEMA_REF_UNRESOLVED = "SchemaRefUnresolved"
    CIRCULAR_REFERENCE = "CircularReference"
    UNKNOWN_FIELD_TYPE = "UnknownFieldType"
    OPERATIONLESS_PATH = "OperationlessPath"
    MISSING_DESCRIPTION = "MissingDescription"
    UNUSED_SCHEMA = "UnusedSchema"


class ParamLocation(StrEnum):
    """Where an endpoint parameter is carried."""
    QUERY = "query"
    PATH = "path"
    HEADER = "header"
    COOKIE = "cookie"
    BODY = "body"


class ValidationWarning(BaseModel):
    """
    A recorded, never fatal, structural finding.

    `subject` names the schema, path or field the warning is about and is used
    for de-duplication and stable ordering.
    """
    category: WarningCategory
    message: str
    subject: str = ""

    model_config = ConfigDict(frozen=True)

    def sort_key(self) -> tuple:
        return (self.category.value, self.subject, self.message)


class ApiField(BaseModel):
    """A single declared field (schema property or parameter)."""
    name: str
    type: Optional[str] = None
    format: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    enum_values: List[Any] = Field(default_factory=list)
    # Schema name when the field's own value is another schema
    ref: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @property
    def type_token(self) -> str:
        return self.type or "unknown"


class ParameterBinding(BaseModel):
    """An endpoint parameter, bound to a field by name and location."""
    field: ApiField
    location: ParamLocation = ParamLocation.QUERY

    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return self.field.name


class SchemaNode(BaseModel):
    """
    A named schema as declared in components/schemas.

    `references` lists composed/inherited schemas ($ref, allOf, oneOf, anyOf)
    in declaration order. Fields that merely *point at* another schema are
    kept on the field (`ApiField.ref`), not here.
    """
    name: str
    fields: List[ApiField] = Field(default_factory=list)
    references: List[str] = Field(default_factory=list)
    description: Optional[str] = None
    resolved: bool = False


class EndpointId(NamedTuple):
    """Identity of an endpoint: (METHOD, path-template)."""
    method: str
    path: str

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    def __str__(self) -> str:
        return self.label

    @classmethod
    def parse(cls, label: str) -> "EndpointId":
        method, _, path = label.strip().partition(" ")
        return cls(method.upper(), path.strip())


def method_rank(method: str) -> int:
    try:
        return METHOD_ORDER.index(method.upper())
    except ValueError:
        return len(METHOD_ORDER)


def endpoint_sort_key(endpoint: EndpointId) -> tuple:
    """Sort endpoints by path, then by canonical method order."""
    return (endpoint.path, method_rank(endpoint.method), endpoint.method)


class Operation(BaseModel):
    """One HTTP operation on a path."""
    method: str
    path: str
    operation_id: Optional[str] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    parameters: List[ParameterBinding] = Field(default_factory=list)
    request_body_ref: Optional[str] = None
    # Status key as declared ("200", "4XX", "default") -> schema name
    responses: Dict[str, Optional[str]] = Field(default_factory=dict)

    @property
    def endpoint_id(self) -> EndpointId:
        return EndpointId(self.method.upper(), self.path)

    def schema_refs(self) -> List[str]:
        """Request body and response schema names, declaration order, no duplicates."""
        refs: List[str] = []
        for ref in [self.request_body_ref, *self.responses.values()]:
            if ref and ref not in refs:
                refs.append(ref)
        return refs


class PathItem(BaseModel):
    """All operations declared on one path template, keyed by upper-case method."""
    operations: Dict[str, Operation] = Field(default_factory=dict)


class SpecTree(BaseModel):
    """
    The typed spec handed to the index builder.

    `schemas` is None when the document has no components/schemas section,
    which is distinct from an empty section.
    """
    title: str = ""
    version: str = ""
    source: Optional[str] = None
    schemas: Optional[Dict[str, SchemaNode]] = None
    paths: Dict[str, PathItem] = Field(default_factory=dict)

    def iter_operations(self) -> Iterator[Operation]:
        for path_item in self.paths.values():
            yield from path_item.operations.values()

    @property
    def endpoint_count(self) -> int:
        return sum(len(p.operations) for p in self.paths.values())


def status_class(status: str) -> str:
    """
    Bucket a response status key into its class.

    "200" -> "2xx", "4XX" -> "4xx", "default" -> "default".
    """
    key = status.strip().lower()
    if len(key) == 3 and key[0].isdigit():
        return f"{key[0]}xx"
    return key
