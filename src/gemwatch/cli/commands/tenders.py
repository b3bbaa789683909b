"""
Stored tender viewing, keyword matching and export commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from gemwatch.core.config.models import AppConfig
from gemwatch.persistence.models import MatchedRecord, TenderRecord

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="View, match and export stored tenders",
    no_args_is_help=True,
)


def _load_records(config: AppConfig) -> list[TenderRecord]:
    from gemwatch.persistence.store import TenderStore

    return TenderStore(config.storage.store_path).read()


def _clip(text: str, width: int) -> str:
    if not text:
        return "[dim]-[/dim]"
    return (text[: width - 3] + "...") if len(text) > width else text


def _tender_table(title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Bid No", style="cyan", no_wrap=True)
    table.add_column("Title", max_width=50)
    table.add_column("Department", max_width=30)
    table.add_column("End Date", justify="right")
    return table


@app.command("list")
def list_tenders(
    ctx: typer.Context,
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum results to show",
    ),
) -> None:
    """List stored tenders in discovery order."""
    config: AppConfig = ctx.obj or AppConfig()
    records = _load_records(config)

    if not records:
        console.print("[dim]No tenders stored. Run:[/dim] gemwatch scrape run")
        return

    shown = records[:limit]
    table = _tender_table(f"Tenders ({len(shown)} of {len(records)} shown)")
    for record in shown:
        table.add_row(
            record.bid_number or record.ra_number or "[dim]-[/dim]",
            _clip(record.title, 50),
            _clip(record.department, 30),
            record.end_date or "[dim]-[/dim]",
        )
    console.print(table)


@app.command("search")
def search_tenders(
    ctx: typer.Context,
    include: str = typer.Option(
        "",
        "--include",
        "-i",
        help="Comma-separated keywords to look for",
    ),
    exclude: str = typer.Option(
        "",
        "--exclude",
        "-x",
        help="Comma-separated keywords that rule a tender out",
    ),
    mode: str = typer.Option(
        "ANY",
        "--mode",
        "-m",
        help="ANY (one keyword hits) or ALL (every keyword hits)",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="CSV path for the matches (default: <export_dir>/matches.csv)",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Console output format (table, json)",
    ),
) -> None:
    """Match stored tenders against keywords and export the hits.

    Examples:
        gemwatch tenders search --include "road,bridge" --mode all
        gemwatch tenders search -i solar -x "maintenance" -o out/solar.csv
    """
    from gemwatch.core.match import MatchMode, match_tenders
    from gemwatch.persistence.export import write_matches_csv

    if not include.strip():
        err_console.print("[red]Include keywords are required.[/red]")
        raise typer.Exit(1)

    try:
        match_mode = MatchMode.parse(mode)
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    config: AppConfig = ctx.obj or AppConfig()
    records = _load_records(config)

    try:
        matches = match_tenders(records, include, exclude, match_mode)
    except ValueError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    csv_path = write_matches_csv(matches, output or config.storage.matches_csv)

    if format == "json":
        import orjson

        console.print_json(orjson.dumps([m.to_dict() for m in matches]).decode("utf-8"))
    else:
        _print_matches(matches, len(records))

    console.print(f"[green]OK[/green] Wrote {len(matches)} matches to {csv_path}")


def _print_matches(matches: list[MatchedRecord], total: int) -> None:
    if not matches:
        console.print(f"[dim]No matches among {total} stored tenders.[/dim]")
        return

    table = Table(
        title=f"Matches ({len(matches)} of {total})",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Bid No", style="cyan", no_wrap=True)
    table.add_column("Title", max_width=50)
    table.add_column("Keywords", style="green")
    table.add_column("End Date", justify="right")

    for match in matches:
        record = match.record
        table.add_row(
            str(match.score),
            record.bid_number or record.ra_number or "[dim]-[/dim]",
            _clip(record.title, 50),
            ", ".join(match.matched_keywords),
            record.end_date or "[dim]-[/dim]",
        )
    console.print(table)


@app.command("export")
def export_tenders(
    ctx: typer.Context,
    output: Optional[Path] = typer.Argument(
        None,
        help="Output CSV path (default: <export_dir>/all.csv)",
    ),
) -> None:
    """Export every stored tender to CSV.

    Examples:
        gemwatch tenders export
        gemwatch tenders export data/all.csv
    """
    from gemwatch.persistence.export import write_all_csv

    config: AppConfig = ctx.obj or AppConfig()
    records = _load_records(config)

    path = write_all_csv(records, output or config.storage.all_csv)
    console.print(f"[green]OK[/green] Exported {len(records)} tenders to {path}")
