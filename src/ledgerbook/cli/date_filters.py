"""CLI helpers for date range resolution."""

from datetime import date

import click

from ledgerbook.utils.date_parser import get_date_range, parse_date

PERIOD_CHOICES = ["this-week", "this-month", "this-year", "last-week", "last-month", "last-year"]

date_range_options = [
    click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'this month')"),
    click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today')"),
    click.option("--period", type=click.Choice(PERIOD_CHOICES), help="Named period instead of explicit dates"),
]


def with_date_range(command):
    """Attach --start-date, --end-date and --period to a command."""
    for option in reversed(date_range_options):
        command = option(command)
    return command


def resolve_cli_date_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
    period: str | None,
) -> tuple[date | None, date | None]:
    """Resolve CLI date range from a named period or explicit dates."""
    if period is not None:
        if start_date or end_date:
            click.echo("Error: --period cannot be combined with --start-date or --end-date.", err=True)
            ctx.exit(1)
        return get_date_range(period)

    start = None
    end = None
    if start_date:
        try:
            start = parse_date(start_date)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)
    if end_date:
        try:
            end = parse_date(end_date)
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)
    if start is not None and end is not None and start > end:
        click.echo("Error: Start date must not be after end date.", err=True)
        ctx.exit(1)
    return start, end
