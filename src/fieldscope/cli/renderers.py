"""
JSON output for CLI commands.

Every `--json` command prints exactly one envelope on stdout:

    {"status": "success", "command": "<name>", "data": {...}}
    {"status": "error",   "command": "<name>", "error": {"code": ..., "message": ...}}

While a command is working, `capture()` diverts stray stdout writes so they
cannot corrupt the envelope.
"""

import io
import json
import logging
from contextlib import contextmanager, redirect_stdout
from typing import Any, Iterator, Optional

import click
from pydantic import BaseModel

from ..core.exceptions import FieldscopeError

logger = logging.getLogger(__name__)


class ErrorDetail(BaseModel):
    code: str
    message: str


class Envelope(BaseModel):
    status: str
    command: str
    data: Optional[Any] = None
    error: Optional[ErrorDetail] = None


def _error_code(error: Exception) -> str:
    if isinstance(error, FieldscopeError):
        return type(error).__name__
    if isinstance(error, ValueError):
        return "InvalidInput"
    return "InternalError"


class JsonRenderer:
    """Renders command results in the standard envelope."""

    def __init__(self, command: str):
        self.command = command

    @contextmanager
    def capture(self) -> Iterator[io.StringIO]:
        buffer = io.StringIO()
        with redirect_stdout(buffer):
            yield buffer
        if buffer.getvalue():
            logger.debug(f"Suppressed {len(buffer.getvalue())} bytes of output from {self.command}")

    def _emit(self, envelope: Envelope) -> None:
        payload = envelope.model_dump(mode="json", exclude_none=True)
        click.echo(json.dumps(payload, indent=2))

    def render_success(self, data: BaseModel) -> None:
        self._emit(Envelope(status="success", command=self.command, data=data.model_dump(mode="json")))

    def render_error(self, error: Exception) -> None:
        self._emit(Envelope(
            status="error",
            command=self.command,
            error=ErrorDetail(code=_error_code(error), message=str(error)),
        ))
