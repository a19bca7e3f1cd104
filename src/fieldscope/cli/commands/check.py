"""
Check Command - CI gate for spec consistency.
Standardized output version.
"""

import sys
from collections import Counter
from enum import StrEnum
from typing import Dict, List, Tuple

import click
from pydantic import BaseModel, Field

from ...core.exceptions import FatalBuildError, SpecLoadError
from ...core.impact import number_warnings
from ...core.types import ValidationWarning, WarningCategory
from ..renderers import JsonRenderer
from ..utils import build_from_path, echo_error, echo_info, echo_success, echo_warning, get_config, null_context


# --- API Models ---
class CheckResultStatus(StrEnum):
    PASS = "PASS"
    WARN = "WARN"
    BLOCKED = "BLOCKED"


class ApiWarning(BaseModel):
    number: int
    category: str
    subject: str
    message: str


class CheckResponse(BaseModel):
    """
    Standardized response for the check command.
    """

    result: CheckResultStatus
    exit_code: int
    spec: str
    fields: int = 0
    schemas: int = 0
    endpoints: int = 0
    warning_counts: Dict[str, int] = Field(default_factory=dict)
    warnings: List[ApiWarning] = Field(default_factory=list)
    fatal: str | None = None


def evaluate(
    warnings: Tuple[ValidationWarning, ...],
    fail_on_warnings: bool,
    ignored: Tuple[str, ...] = (),
) -> Tuple[CheckResultStatus, List[ValidationWarning]]:
    """Decide the gate result from the warnings left after ignoring categories."""
    kept = [w for w in warnings if w.category.value not in ignored]
    if not kept:
        return CheckResultStatus.PASS, kept
    if fail_on_warnings:
        return CheckResultStatus.BLOCKED, kept
    return CheckResultStatus.WARN, kept


@click.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.option("--fail-on-warnings", is_flag=True, help="Exit 1 when any warning remains")
@click.option("--ignore", "ignored", multiple=True,
              type=click.Choice([c.value for c in WarningCategory]),
              help="Warning category to ignore (repeatable)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON (Standard Envelope)")
@click.option("--quiet", "-q", is_flag=True, help="Only print the verdict")
@click.pass_context
def check(
    ctx: click.Context,
    spec: str,
    fail_on_warnings: bool,
    ignored: Tuple[str, ...],
    as_json: bool,
    quiet: bool,
):
    """Validate a spec's structure for CI.

    Exit code 1 when the spec cannot be indexed, or when warnings remain
    and --fail-on-warnings is set.
    """
    renderer = JsonRenderer("check")
    context_manager = renderer.capture() if as_json else null_context()

    error_to_report = None
    api_response = None

    with context_manager:
        try:
            output = build_from_path(spec, get_config(ctx))
            status, kept = evaluate(output.warnings, fail_on_warnings, ignored)
            counts = Counter(w.category.value for w in kept)
            api_response = CheckResponse(
                result=status,
                exit_code=1 if status == CheckResultStatus.BLOCKED else 0,
                spec=spec,
                fields=len(output.index.fields),
                schemas=len(output.index.schemas),
                endpoints=len(output.index.endpoints),
                warning_counts=dict(sorted(counts.items())),
                warnings=[
                    ApiWarning(number=n, category=w.category.value, subject=w.subject, message=w.message)
                    for n, w in number_warnings(kept)
                ],
            )
        except FatalBuildError as e:
            api_response = CheckResponse(
                result=CheckResultStatus.BLOCKED, exit_code=1, spec=spec, fatal=str(e)
            )
        except SpecLoadError as e:
            error_to_report = e

    if error_to_report:
        if as_json:
            renderer.render_error(error_to_report)
        else:
            echo_error(f"Failed to load spec: {error_to_report}")
        sys.exit(1)

    if as_json:
        renderer.render_success(api_response)
    else:
        _print_report(api_response, quiet)

    if api_response.exit_code:
        sys.exit(api_response.exit_code)


def _print_report(report: CheckResponse, quiet: bool) -> None:
    if report.fatal:
        echo_error(f"BLOCKED: {report.fatal}")
        return

    if not quiet:
        echo_info(f"{report.fields} fields, {report.schemas} schemas, {report.endpoints} endpoints")
        for w in report.warnings:
            click.echo(f"   {w.number:>3}. [{w.category}] {w.message}")

    if report.result == CheckResultStatus.PASS:
        echo_success("PASS: no warnings")
    elif report.result == CheckResultStatus.WARN:
        echo_warning(f"WARN: {len(report.warnings)} warning(s)")
    else:
        echo_error(f"BLOCKED: {len(report.warnings)} warning(s)")
