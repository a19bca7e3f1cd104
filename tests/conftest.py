"""Shared fixtures: spec files on disk and small in-memory spec trees."""

from pathlib import Path

import pytest

from fieldscope.core.index import build_index
from fieldscope.core.types import (
    ApiField,
    Operation,
    ParameterBinding,
    ParamLocation,
    PathItem,
    SchemaNode,
    SpecTree,
)
from fieldscope.parsing.openapi import load_spec
from fieldscope.tui.state import initial_state
from fieldscope.tui.views import Snapshot

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def petstore_path() -> Path:
    return FIXTURES / "petstore.json"


@pytest.fixture
def users_path() -> Path:
    return FIXTURES / "users.yaml"


@pytest.fixture
def make_spec():
    """
    Factory for SpecTree values.

    schemas: {name: {"fields": [(name, type), ...], "refs": [...], "description": ...}}
             or None for a spec without a components/schemas section.
    ops:     [{"method", "path", "body", "responses", "params", "summary"}]
    """
    def _make(schemas=None, ops=(), empty_paths=()):
        schema_nodes = None
        if schemas is not None:
            schema_nodes = {}
            for name, body in schemas.items():
                fields = []
                for entry in body.get("fields", []):
                    fname, ftype = entry[0], entry[1]
                    ref = entry[2] if len(entry) > 2 else None
                    fields.append(ApiField(name=fname, type=ftype, ref=ref))
                schema_nodes[name] = SchemaNode(
                    name=name,
                    fields=fields,
                    references=list(body.get("refs", [])),
                    description=body.get("description", f"{name} schema"),
                )

        paths = {}
        for spec_op in ops:
            method = spec_op["method"].upper()
            path = spec_op["path"]
            params = [
                ParameterBinding(
                    field=ApiField(name=p[0], type=p[1] if len(p) > 1 else "string"),
                    location=p[2] if len(p) > 2 else ParamLocation.QUERY,
                )
                for p in spec_op.get("params", [])
            ]
            operation = Operation(
                method=method,
                path=path,
                summary=spec_op.get("summary", f"{method} {path}"),
                parameters=params,
                request_body_ref=spec_op.get("body"),
                responses=spec_op.get("responses", {}),
            )
            paths.setdefault(path, PathItem()).operations[method] = operation

        for path in empty_paths:
            paths[path] = PathItem()

        return SpecTree(title="Test", version="1", schemas=schema_nodes, paths=paths)

    return _make


@pytest.fixture
def worked_spec(make_spec) -> SpecTree:
    """User/Patient example: three endpoints, all on User."""
    return make_spec(
        schemas={
            "User": {"fields": [("id", "integer"), ("name", "string")]},
            "Patient": {"fields": [("id", "integer"), ("user_id", "integer")]},
        },
        ops=[
            {"method": "GET", "path": "/user", "responses": {"200": "User"}},
            {"method": "POST", "path": "/user", "body": "User", "responses": {"201": None}},
            {"method": "PUT", "path": "/user/{id}", "body": "User", "responses": {"200": "User"}},
        ],
    )


@pytest.fixture
def worked_output(worked_spec):
    return build_index(worked_spec).unwrap()


@pytest.fixture
def petstore_output(petstore_path):
    return build_index(load_spec(petstore_path)).unwrap()


@pytest.fixture
def petstore_snapshot(petstore_output) -> Snapshot:
    return Snapshot.from_output(petstore_output)


@pytest.fixture
def petstore_state(petstore_snapshot):
    return initial_state(petstore_snapshot)
