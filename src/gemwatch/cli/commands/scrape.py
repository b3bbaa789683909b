"""
Scrape commands for fetching tenders from the listing.
"""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from gemwatch.core.config.models import AppConfig

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Fetch tenders from the listing",
    no_args_is_help=True,
)


@app.command("run")
def run_scrape(
    ctx: typer.Context,
    pages: int = typer.Option(
        5,
        "--pages",
        "-n",
        min=1,
        max=50,
        help="Maximum listing pages to read (1-50)",
    ),
    keyword: str = typer.Option(
        "",
        "--keyword",
        "-k",
        help="Search the listing for this keyword first",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Summary output format (table, json)",
    ),
) -> None:
    """Fetch tenders and replace the local store.

    Examples:
        gemwatch scrape run --pages 10
        gemwatch scrape run -n 3 --keyword "solar" --format json
    """
    from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
    from gemwatch.core.orchestrator import ScrapeError, ScrapeRunner, validate_page_limit

    config: AppConfig = ctx.obj or AppConfig()
    keyword = keyword.strip()

    try:
        validate_page_limit(pages, config.max_page_limit)
    except ValueError as e:
        err_console.print(f"[red]Invalid --pages:[/red] {e}")
        raise typer.Exit(2)

    runner = ScrapeRunner(config)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("[cyan]Reading GeM listing...[/cyan]", total=None)
        try:
            stats = asyncio.run(runner.run(pages, keyword))
        except ScrapeError as e:
            err_console.print(f"[red]Fetch failed:[/red] {e}")
            err_console.print(f"[dim]Cause: {e.cause}[/dim]")
            err_console.print("[dim]The existing store was left unchanged.[/dim]")
            raise typer.Exit(1)

    if format == "json":
        import orjson

        console.print_json(orjson.dumps(stats.to_dict()).decode("utf-8"))
        return

    table = Table(title="Fetch Summary", show_header=True, header_style="bold magenta")
    table.add_column("Keyword", style="cyan")
    table.add_column("Pages", justify="right")
    table.add_column("Cards", justify="right")
    table.add_column("Failed", justify="right")
    table.add_column("Duplicates", justify="right")
    table.add_column("Stored", justify="right")
    table.add_column("Stop", justify="center")

    table.add_row(
        keyword or "[dim]-[/dim]",
        str(stats.pages_parsed),
        str(stats.cards_seen),
        f"[red]{stats.cards_failed}[/red]" if stats.cards_failed else "0",
        str(stats.duplicates),
        f"[green]{stats.stored_count}[/green]",
        stats.stop_reason or "-",
    )

    console.print(table)
    console.print(f"[dim]Store: {runner.store.path}[/dim]")
