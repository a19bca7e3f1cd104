"""
Blast Radius Command - Show everything a field change would touch.

Standardized output version.
"""

import logging
from typing import Any, Dict, List

import click
from pydantic import BaseModel, Field

from ...core.exceptions import FieldNotFoundError
from ...core.impact import ImpactAnalyzer
from ..renderers import JsonRenderer
from ..utils import build_from_path, echo_error, get_config, load_index

logger = logging.getLogger(__name__)


# --- API Models ---
class FieldReport(BaseModel):
    name: str
    type: str
    usage_count: int
    critical: bool
    schemas: List[str]
    endpoints: List[str]
    mutating_breakdown: Dict[str, int] = Field(default_factory=dict)
    related_fields: List[str] = Field(default_factory=list)
    foreign_key_targets: List[str] = Field(default_factory=list)


class BlastRadiusResponse(BaseModel):
    fields: List[FieldReport]
    impacted_schemas: List[str]
    impacted_endpoints: List[str]
    count: int
    critical: bool
    breakdown: Dict[str, int] = Field(default_factory=dict)
    missing: List[str] = Field(default_factory=list)


def format_blast_radius(result: Dict[str, Any]) -> str:
    """Human-readable report for ImpactAnalyzer.calculate output."""
    lines = []
    title = ", ".join(result["fields"]) or "(none)"
    lines.append(click.style(f"💥 Blast radius: {title}", bold=True))
    lines.append("")

    critical = click.style("YES", fg="red", bold=True) if result["critical"] else click.style("no", fg="green")
    lines.append(f"   Usage count: {result['count']}")
    lines.append(f"   Critical:    {critical}")
    if result["breakdown"]:
        parts = ", ".join(f"{m}: {c}" for m, c in result["breakdown"].items())
        lines.append(f"   By method:   {parts}")
    lines.append("")

    lines.append(click.style(f"   Schemas ({len(result['impacted_schemas'])})", fg="cyan"))
    for name in result["impacted_schemas"]:
        lines.append(f"     • {name}")
    lines.append("")

    lines.append(click.style(f"   Endpoints ({len(result['impacted_endpoints'])})", fg="cyan"))
    for label in result["impacted_endpoints"]:
        lines.append(f"     • {label}")

    return "\n".join(lines)


@click.command("blast")
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.argument("fields", nargs=-1)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def blast_radius(ctx: click.Context, spec: str, fields: tuple, as_json: bool) -> None:
    """
    Calculate the impact of changing one or more fields.
    """
    config = get_config(ctx)

    if not as_json:
        if not _run_human_mode(spec, list(fields), config):
            ctx.exit(1)
        return

    renderer = JsonRenderer("blast")
    error_to_report = None
    response_data = None

    with renderer.capture():
        try:
            if not fields:
                raise ValueError("Provide at least one field to analyze")

            output = build_from_path(spec, config)
            analyzer = ImpactAnalyzer(config)
            raw_result = analyzer.calculate(output.index, list(fields))
            if raw_result["missing"] and not raw_result["fields"]:
                raise FieldNotFoundError(raw_result["missing"])

            reports = []
            for name in raw_result["fields"]:
                detail = analyzer.field_detail(output.index, name)
                reports.append(FieldReport(
                    name=detail.name,
                    type=detail.meta.type,
                    usage_count=detail.usage_count,
                    critical=detail.critical,
                    schemas=list(detail.schemas),
                    endpoints=[e.label for e in detail.endpoints],
                    mutating_breakdown=dict(detail.mutating_breakdown),
                    related_fields=list(detail.related_fields),
                    foreign_key_targets=list(detail.foreign_key_targets),
                ))

            response_data = BlastRadiusResponse(
                fields=reports,
                impacted_schemas=raw_result["impacted_schemas"],
                impacted_endpoints=raw_result["impacted_endpoints"],
                count=raw_result["count"],
                critical=raw_result["critical"],
                breakdown=raw_result["breakdown"],
                missing=raw_result["missing"],
            )
        except Exception as e:
            error_to_report = e

    # Outside capture context, so output reaches stdout
    if error_to_report:
        renderer.render_error(error_to_report)
        ctx.exit(1)
    renderer.render_success(response_data)


def _run_human_mode(spec: str, fields: List[str], config) -> bool:
    if not fields:
        echo_error("Provide at least one field to analyze")
        return False

    output = load_index(spec, config)
    if output is None:
        return False

    analyzer = ImpactAnalyzer(config)
    result = analyzer.calculate(output.index, fields)

    for name in result["missing"]:
        echo_error(f"Field not found: {name}")
    if not result["fields"]:
        return False

    click.echo(format_blast_radius(result))
    return True
