"""
Search Command - Fuzzy-find fields, schemas or endpoints.
"""

import click
from pydantic import BaseModel

from ...core.search import score, search_view
from ...tui.views import View, get_view
from ..renderers import JsonRenderer
from ..utils import build_from_path, echo_warning, get_config, load_index


# --- API Models ---
class SearchHit(BaseModel):
    name: str
    score: int


class SearchResponse(BaseModel):
    query: str
    view: str
    total: int
    results: list[SearchHit]


SEARCHABLE = [View.FIELDS.value, View.SCHEMAS.value, View.ENDPOINTS.value]


@click.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.argument("query")
@click.option("--view", "view_name", type=click.Choice(SEARCHABLE), default=View.FIELDS.value,
              help="What to search")
@click.option("-n", "--limit", default=20, type=click.IntRange(min=1), help="Maximum results")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def search(ctx: click.Context, spec: str, query: str, view_name: str, limit: int, as_json: bool) -> None:
    """
    Rank names in the spec against QUERY.
    """
    config = get_config(ctx)
    view = get_view(view_name)

    if as_json:
        renderer = JsonRenderer("search")
        error_to_report = None
        response_data = None
        with renderer.capture():
            try:
                output = build_from_path(spec, config)
                ranked = search_view(query, view, output.index)
                response_data = SearchResponse(
                    query=query,
                    view=view_name,
                    total=len(ranked),
                    results=[SearchHit(name=n, score=score(query, n)) for n in ranked[:limit]],
                )
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

    ranked = search_view(query, view, output.index)
    if not ranked:
        echo_warning(f"No {view_name} match '{query}'")
        return

    click.echo(click.style(f"🔍 {len(ranked)} {view_name} matching '{query}'", bold=True))
    for name in ranked[:limit]:
        click.echo(f"   {score(query, name):>4}  {name}")
    if len(ranked) > limit:
        click.echo(click.style(f"   ... and {len(ranked) - limit} more", dim=True))
