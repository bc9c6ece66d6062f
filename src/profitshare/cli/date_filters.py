"""CLI helpers for date range resolution."""

from datetime import datetime, time

import click

from profitshare.utils.date_parser import end_of_day, parse_date


def resolve_cli_time_range(
    ctx,
    *,
    start_date: str | None,
    end_date: str | None,
) -> tuple[datetime | None, datetime | None]:
    """Resolve inclusive CLI date options into a time range.

    The start date begins at midnight, the end date runs through 23:59:59.
    """
    start = None
    end = None

    if start_date:
        try:
            start = datetime.combine(parse_date(start_date), time.min)
        except ValueError as e:
            click.echo(f"Error: Invalid start date: {e}", err=True)
            ctx.exit(1)

    if end_date:
        try:
            end = end_of_day(parse_date(end_date))
        except ValueError as e:
            click.echo(f"Error: Invalid end date: {e}", err=True)
            ctx.exit(1)

    return start, end
