"""
fieldscope CLI - Main entry point.

This module registers all CLI commands. Each command is implemented
in its own module under cli/commands/.
"""

from pathlib import Path

import click

from ..config import load_config
from .commands import blast_radius, check, explore, search, stats
from .utils import configure_logging


@click.group()
@click.version_option(package_name="fieldscope")
@click.option("-v", "--verbose", is_flag=True, help="Log progress (INFO)")
@click.option("--debug", is_flag=True, help="Log everything (DEBUG)")
@click.option("--config", "config_path", type=click.Path(dir_okay=False),
              help="Config file (default: .fieldscope/config.yaml)")
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool, config_path: str | None):
    """fieldscope: Field Impact Explorer for OpenAPI specs.

    Finds every schema and endpoint that uses a field, and how far a
    change to it would reach.

    \b
    Quick Start:
      fieldscope explore openapi.yaml
      fieldscope blast openapi.yaml user_id
      fieldscope check openapi.yaml --fail-on-warnings
    """
    configure_logging(verbose=verbose, debug=debug)
    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(Path(config_path) if config_path else None)


# Register commands
main.add_command(explore.explore)
main.add_command(blast_radius.blast_radius, name="blast")
main.add_command(search.search)
main.add_command(stats.stats)
main.add_command(check.check)

if __name__ == "__main__":
    main()
