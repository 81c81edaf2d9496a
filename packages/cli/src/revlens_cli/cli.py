"""CLI entry point for revlens.

Commands:
  review   : review local changes with a local model (the default command)
  settings : show the resolved endpoint and model settings
"""

from __future__ import annotations

import importlib.metadata

import click

from revlens_cli.commands.review import review_cmd
from revlens_cli.commands.settings import settings_cmd


@click.group(invoke_without_command=True)
@click.version_option(
    version=importlib.metadata.version("revlens"),
    prog_name="revlens",
)
@click.option(
    "--config",
    "config_path",
    default=None,
    help="Path to a config file. Defaults to config / config.toml (and friends) in the current directory.",
    envvar="REVLENS_CONFIG",
)
@click.pass_context
def main(ctx: click.Context, config_path: str | None):
    """Review uncommitted changes with a locally hosted language model."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path

    # Running bare `revlens` reviews the current directory with defaults.
    if ctx.invoked_subcommand is None:
        ctx.invoke(review_cmd)


main.add_command(review_cmd)
main.add_command(settings_cmd)
