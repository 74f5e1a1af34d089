"""Headless sample-and-compare runs for the vessel audit dashboard."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Optional

import typer

from .comparator import ComparisonReport
from .core_config import effective_config, get_settings
from .fetcher import RecordFetcher
from .logging_setup import configure_logging
from .state import DashboardState, run_sample

app = typer.Typer(help="Compare sampled internal vessels against the vessel API")


def _parse_date(value: Optional[str], option: str):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise typer.BadParameter(f"expected YYYY-MM-DD, got {value!r}", param_hint=option)


def _print_report(report: ComparisonReport) -> None:
    if not report.rows:
        typer.echo("No differences found")
    for row in report.rows:
        typer.echo(f"🚢 {row.title}")
        headers = ("Details", "Marine Radar", "Vessel Finder", "Difference")
        table = [
            (diff.label, diff.internal_display, diff.external_display, "Diff" if diff.differs else "")
            for diff in row.fields
        ]
        widths = [max(len(headers[i]), *(len(line[i]) for line in table)) for i in range(4)]
        typer.echo(" | ".join(title.ljust(widths[i]) for i, title in enumerate(headers)))
        typer.echo("-+-".join("-" * width for width in widths))
        for line in table:
            typer.echo(" | ".join(cell.ljust(widths[i]) for i, cell in enumerate(line)))
        typer.echo("")

    typer.echo(f"Error Rate: {report.error_rate:.2f}%")
    typer.echo(f"Data Accuracy: {report.accuracy:.2f}%")
    typer.echo(f"Total Ships Compared: {report.total_compared}")
    typer.echo(f"Ships in Date Range: {report.in_range}")
    typer.echo(f"Differences Found: {report.differing}")


@app.command()
def compare(
    percent: Optional[int] = typer.Option(
        None, "--percent", min=1, max=100, help="Sample size as a percentage (1-100)"
    ),
    start: Optional[str] = typer.Option(None, "--start", help="Window start (YYYY-MM-DD)"),
    end: Optional[str] = typer.Option(None, "--end", help="Window end (YYYY-MM-DD)"),
    as_json: bool = typer.Option(False, "--json", help="Emit the report as JSON"),
) -> None:
    """Sample vessels, fetch their external states and print the comparison."""
    settings = get_settings()
    configure_logging(settings)

    state = DashboardState.from_settings(settings)
    if percent is not None:
        state.set_sample_percent(percent)
    state.set_date_range(
        _parse_date(start, "--start") or state.start_date,
        _parse_date(end, "--end") or state.end_date,
    )

    fetcher = RecordFetcher.from_settings(settings)
    if not run_sample(state, fetcher):
        typer.echo(f"Error: {state.error}", err=True)
        raise typer.Exit(code=1)

    report = state.report()
    if as_json:
        typer.echo(json.dumps(report.to_dict(), indent=2))
    else:
        _print_report(report)


@app.command("config")
def show_config() -> None:
    """Print the effective configuration with secrets redacted."""
    typer.echo(json.dumps(effective_config(get_settings()), indent=2, default=str))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
