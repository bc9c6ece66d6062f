"""Profit report commands."""

import json

import click
from profitshare.cli.date_filters import resolve_cli_time_range
from profitshare.domain.profit import ProfitService
from profitshare.domain.serialization import profit_summary_to_dict
from profitshare.utils.money import format_amount

SUMMARY_ROWS = [
    ("Settled income", "settled_income"),
    ("Pending income", "pending_income"),
    ("Expense", "expense"),
    ("Traffic cost", "traffic_cost"),
    ("Platform commission", "platform_commission"),
    ("Closed (income)", "closed_income"),
    ("Closed (expense)", "closed_expense"),
    ("Closed (neutral)", "closed_neutral"),
    ("Refund expense", "refund_expense"),
]

TOTAL_ROWS = [
    ("Pure profit (settled)", "pure_profit_settled"),
    ("Pure profit (with pending)", "pure_profit_with_pending"),
    ("Settlement net", "settlement_net"),
]


@click.group()
def profit_group():
    """Report profit from the ledger."""
    pass


@profit_group.command("summary")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--bill-account", help="Restrict to one bill account")
@click.option("--json", "as_json", is_flag=True, help="Print the serialized summary")
@click.pass_context
def profit_summary(
    ctx, start_date: str | None, end_date: str | None, bill_account: str | None, as_json: bool
):
    """Show profit buckets for a period.

    Examples:
        profitshare profit summary --start-date "this month"
        profitshare profit summary --bill-account shop-a --end-date 2026-02-28
    """
    service = ProfitService(ctx.obj["db"], ctx.obj["policy"])
    start, end = resolve_cli_time_range(ctx, start_date=start_date, end_date=end_date)

    summary = service.get_summary(start=start, end=end, bill_account=bill_account)
    if as_json:
        click.echo(json.dumps(profit_summary_to_dict(summary), indent=2))
        return

    scope = (bill_account or "").strip() or "all accounts"
    click.echo(f"\nProfit summary ({scope})")
    click.echo("-" * 50)
    for label, attr in SUMMARY_ROWS:
        click.echo(f"{label:<32} {format_amount(getattr(summary, attr)):>16}")
    click.echo("-" * 50)
    for label, attr in TOTAL_ROWS:
        click.echo(f"{label:<32} {format_amount(getattr(summary, attr)):>16}")


def register_commands(cli: click.Group) -> None:
    """Register profit commands with main CLI."""
    cli.add_command(profit_group, name="profit")
