"""
GemWatch CLI - Main entry point.

A terminal-first tender listing scraper with keyword matching and CSV
export.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.traceback import install as install_rich_traceback

from gemwatch import __app_name__, __version__

load_dotenv()

install_rich_traceback(show_locals=False, width=120)

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    name=__app_name__,
    help="Terminal-first GeM tender scraper and keyword matcher",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config: Path = typer.Option(
        Path("configs/app.yaml"),
        "--config",
        "-c",
        help="Path to app.yaml",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Override the configured log level",
    ),
) -> None:
    """GemWatch - GeM bid listing scraper."""
    from gemwatch.core.config.loader import ConfigError, load_app_config
    from gemwatch.core.logging import setup_logging

    try:
        app_config = load_app_config(config)
    except ConfigError as e:
        err_console.print(f"[red]Error loading config:[/red] {e}")
        if e.details:
            err_console.print(f"[dim]{e.details}[/dim]")
        raise typer.Exit(1)

    setup_logging(
        level=log_level or app_config.logging.level,
        log_file=app_config.logging.file,
        json_format=app_config.logging.json_format,
        rich_console=app_config.logging.rich_console,
    )

    ctx.obj = app_config


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import scrape, tenders  # noqa: E402

app.add_typer(scrape.app, name="scrape", help="Fetch tenders from the listing")
app.add_typer(tenders.app, name="tenders", help="View, match and export stored tenders")


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
