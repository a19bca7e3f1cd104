"""
Stats Command - Aggregate figures for a spec.
"""

from typing import List

import click
from pydantic import BaseModel, Field
from rich.console import Console
from rich.table import Table

from ...core.impact import method_color, number_warnings
from ...core.snapshot import BuildOutput
from ..renderers import JsonRenderer
from ..utils import build_from_path, get_config, load_index

console = Console()


# --- API Models ---
class TypeShareModel(BaseModel):
    type: str
    count: int
    percentage: float


class MethodCount(BaseModel):
    method: str
    count: int
    color: str


class TopField(BaseModel):
    name: str
    usage_count: int


class NumberedWarning(BaseModel):
    number: int
    category: str
    subject: str
    message: str


class StatsResponse(BaseModel):
    title: str
    version: str
    total_schemas: int
    total_fields: int
    total_endpoints: int
    critical_fields: int
    type_distribution: List[TypeShareModel]
    method_breakdown: List[MethodCount]
    top_fields: List[TopField]
    warnings: List[NumberedWarning] = Field(default_factory=list)


@click.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.option("--top", "top_n", type=click.IntRange(min=1), default=None,
              help="Number of top fields to list (default from config)")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def stats(ctx: click.Context, spec: str, top_n: int | None, as_json: bool) -> None:
    """
    Show field types, method breakdown, top fields and warnings.
    """
    config = get_config(ctx)
    if top_n is not None:
        config = config.model_copy(update={"top_n": top_n})

    if as_json:
        renderer = JsonRenderer("stats")
        error_to_report = None
        response_data = None
        with renderer.capture():
            try:
                response_data = _build_response(build_from_path(spec, config))
            except Exception as e:
                error_to_report = e

        if error_to_report:
            renderer.render_error(error_to_report)
            ctx.exit(1)
        renderer.render_success(response_data)
        return

    output = load_index(spec, config)
    if output is None:
        ctx.exit(1)
    _print_stats(_build_response(output))


def _build_response(output: BuildOutput) -> StatsResponse:
    figures = output.stats
    index = output.index
    return StatsResponse(
        title=index.title,
        version=index.version,
        total_schemas=figures.total_schemas,
        total_fields=figures.total_fields,
        total_endpoints=figures.total_endpoints,
        critical_fields=figures.critical_fields,
        type_distribution=[
            TypeShareModel(type=s.type, count=s.count, percentage=s.percentage)
            for s in figures.type_distribution
        ],
        method_breakdown=[
            MethodCount(method=m, count=c, color=method_color(m))
            for m, c in figures.method_breakdown.items()
        ],
        top_fields=[TopField(name=n, usage_count=c) for n, c in figures.top_fields],
        warnings=[
            NumberedWarning(
                number=n, category=w.category.value, subject=w.subject, message=w.message
            )
            for n, w in number_warnings(output.warnings)
        ],
    )


def _print_stats(data: StatsResponse) -> None:
    console.print(f"[bold]{data.title or 'API'}[/bold] {data.version}")
    console.print(
        f"Schemas: [cyan]{data.total_schemas}[/cyan]   "
        f"Fields: [cyan]{data.total_fields}[/cyan]   "
        f"Endpoints: [cyan]{data.total_endpoints}[/cyan]   "
        f"Critical fields: [red]{data.critical_fields}[/red]"
    )

    types = Table(title="Field Types")
    types.add_column("Type")
    types.add_column("Count", justify="right")
    types.add_column("%", justify="right")
    for share in data.type_distribution:
        types.add_row(share.type, str(share.count), f"{share.percentage:.1f}")
    console.print(types)

    methods = Table(title="HTTP Methods")
    methods.add_column("Method")
    methods.add_column("Count", justify="right")
    for m in data.method_breakdown:
        methods.add_row(f"[{m.color}]{m.method}[/{m.color}]", str(m.count))
    console.print(methods)

    top = Table(title=f"Top {len(data.top_fields)} Fields")
    top.add_column("Field")
    top.add_column("Usage", justify="right")
    for f in data.top_fields:
        top.add_row(f.name, str(f.usage_count))
    console.print(top)

    if data.warnings:
        console.print(f"[yellow]Warnings ({len(data.warnings)})[/yellow]")
        for w in data.warnings:
            console.print(f"  {w.number}. [{w.category}] {w.message}", markup=False)
