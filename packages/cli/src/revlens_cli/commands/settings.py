"""settings command: show which endpoint and model a review would use."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from revlens_core.config import DEFAULT_MODEL, DEFAULT_OLLAMA_URL, find_config_files, load_config

console = Console()


@click.command("settings")
@click.pass_context
def settings_cmd(ctx):
    """Show the resolved settings and where they came from."""
    config_path = ctx.obj.get("config_path") if ctx.obj else None
    settings = load_config(config_path)

    if config_path is not None:
        sources = [str(config_path)] if Path(config_path).is_file() else []
    else:
        sources = [str(p) for p in find_config_files()]

    table = Table(title="revlens settings", show_header=True, header_style="bold cyan")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_column("Default", style="dim")
    table.add_row("ollama_url", settings.ollama_url, DEFAULT_OLLAMA_URL)
    table.add_row("model", settings.model, DEFAULT_MODEL)
    console.print(table)

    if sources:
        console.print(f"[dim]Config files: {', '.join(sources)}[/dim]")
    else:
        console.print("[dim]No config file found: using built-in defaults.[/dim]")
