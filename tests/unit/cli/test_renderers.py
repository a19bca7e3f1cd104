"""Unit tests for the JSON envelope renderer."""

import json

import pytest
from pydantic import BaseModel

from fieldscope.cli.renderers import JsonRenderer
from fieldscope.core.exceptions import FieldNotFoundError, NoEndpoints


class Payload(BaseModel):
    value: int


class TestEnvelope:
    def test_success(self, capsys):
        JsonRenderer("demo").render_success(Payload(value=3))
        payload = json.loads(capsys.readouterr().out)

        assert payload == {"status": "success", "command": "demo", "data": {"value": 3}}

    @pytest.mark.parametrize("error,code", [
        (FieldNotFoundError(["ghost"]), "FieldNotFoundError"),
        (NoEndpoints(), "NoEndpoints"),
        (ValueError("bad"), "InvalidInput"),
        (RuntimeError("boom"), "InternalError"),
    ])
    def test_error_codes(self, capsys, error, code):
        JsonRenderer("demo").render_error(error)
        payload = json.loads(capsys.readouterr().out)

        assert payload["status"] == "error"
        assert payload["error"] == {"code": code, "message": str(error)}
        assert "data" not in payload

    def test_capture_swallows_stray_output(self, capsys):
        renderer = JsonRenderer("demo")
        with renderer.capture() as buffer:
            print("noise")

        assert buffer.getvalue() == "noise\n"
        assert capsys.readouterr().out == ""
