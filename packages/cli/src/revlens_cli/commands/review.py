"""review command: review local changes with a local model."""

from __future__ import annotations

import logging
import os

import click
import requests
from rich.console import Console
from rich.logging import RichHandler

from revlens_core.config import load_config
from revlens_core.reviewer import DEFAULT_MAX_FILES, run_review

console = Console()

BANNER = "Code Review Results:"


def _configure_logging(verbose: bool) -> None:
    """Route log records to stderr through rich when verbose output is wanted.

    Without this, Python's last-resort handler still prints warnings.
    """
    if not verbose and os.environ.get("DEBUG", "") != "TRUE":
        return
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # urllib3 logs every connection at DEBUG; keep it out of the way.
    logging.getLogger("urllib3").setLevel(logging.WARNING)


@click.command("review")
@click.option("--path", default=".", show_default=True, help="Directory to scan and diff.")
@click.option("--staged", is_flag=True, help="Review staged changes only (git diff --staged).")
@click.option(
    "--max-files",
    type=click.IntRange(min=0),
    default=DEFAULT_MAX_FILES,
    show_default=True,
    help="Maximum number of codebase files to include as context.",
)
@click.option("--model", default=None, help="Model name. Overrides config file.")
@click.option("--url", "ollama_url", default=None, help="Ollama base URL. Overrides config file.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Request timeout in seconds. No timeout by default.",
)
@click.option("--verbose", "-v", is_flag=True, help="Log progress and diagnostics to stderr.")
@click.pass_context
def review_cmd(
    ctx,
    path: str = ".",
    staged: bool = False,
    max_files: int = DEFAULT_MAX_FILES,
    model: str | None = None,
    ollama_url: str | None = None,
    timeout: float | None = None,
    verbose: bool = False,
):
    """Review the current git diff with a local model.

    Sends the diff of PATH plus a handful of files from it as context to
    the Ollama /api/generate endpoint and prints the review.

    \b
    Environment variables:
      DEBUG=TRUE       Print the raw HTTP status and response body to stderr
      REVLENS_CONFIG   Path to the config file
    """
    _configure_logging(verbose)

    config_path = ctx.obj.get("config_path") if ctx.obj else None
    settings = load_config(config_path, cli_overrides={"model": model, "ollama_url": ollama_url})

    try:
        review = run_review(settings, path=path, staged=staged, max_files=max_files, timeout=timeout)
    except FileNotFoundError as e:
        if e.filename == "git":
            raise click.ClickException("git executable not found. Install git and make sure it is on PATH.")
        raise click.ClickException(str(e))
    except requests.RequestException as e:
        raise click.ClickException(f"Request to {settings.ollama_url} failed: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(str(e))

    console.print(f"\n{BANNER}", markup=False, highlight=False)
    click.echo(review)
