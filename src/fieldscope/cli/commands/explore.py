"""
Explore Command - Interactive field explorer.
"""

import logging

import click

from ...tui.app import ExplorerApp
from ..utils import echo_error, get_config

logger = logging.getLogger(__name__)


@click.command()
@click.argument("spec", type=click.Path(exists=True, dir_okay=False))
@click.pass_context
def explore(ctx: click.Context, spec: str) -> None:
    """
    Browse fields, schemas and endpoints interactively.

    \b
    Keys:
      1-5 views   Tab panels   / search   Enter select
      Esc back    r reload     h help     q quit
    """
    app = ExplorerApp(spec, config=get_config(ctx))

    started = app.start()
    if started.is_err():
        echo_error(f"Cannot explore {spec}: {started.unwrap_err()}")
        ctx.exit(1)

    final = app.run(started.unwrap())
    logger.debug(f"Explorer closed in view '{final.view}'")
