"""Settlement batch commands."""

import json

import click
from profitshare.cli.error_handling import handle_domain_error
from profitshare.domain.entities import SettlementStrategy
from profitshare.domain.errors import DomainError
from profitshare.domain.serialization import batch_to_dict
from profitshare.domain.settlement import SettlementService
from profitshare.utils.date_parser import resolve_settlement_time
from profitshare.utils.money import format_amount, format_ratio

STRATEGY_CHOICES = [s.value for s in SettlementStrategy]

AMOUNT_ROWS = [
    ("Period net", "period_net_amount"),
    ("Previous carry-forward", "previous_carry_forward_amount"),
    ("Cumulative net", "cumulative_net_amount"),
    ("Settled base", "settled_base_amount"),
    ("Distributable", "distributable_amount"),
    ("Paid", "paid_amount"),
    ("Carry-forward", "carry_forward_amount"),
    ("Cumulative settled", "cumulative_settled_amount"),
]


def _echo_json(payload) -> None:
    click.echo(json.dumps(payload, ensure_ascii=False, indent=2))


def _echo_amounts(result) -> None:
    for label, attr in AMOUNT_ROWS:
        click.echo(f"  {label:<26} {format_amount(getattr(result, attr)):>14}")


def _echo_allocations(allocations) -> None:
    if not allocations:
        click.echo("  No participants configured.")
        return
    click.echo(
        f"  {'Participant':<20} {'Bill account':<16} {'Ratio':>10} {'Amount':>12} "
        f"{'Held':>12} {'Transfer':>12}"
    )
    for row in allocations:
        click.echo(
            f"  {row.participant_name[:20]:<20} {(row.participant_bill_account or '-')[:16]:<16} "
            f"{format_ratio(row.ratio):>10} {format_amount(row.amount):>12} "
            f"{format_amount(row.account_held_amount):>12} "
            f"{format_amount(row.actual_transfer_amount):>12}"
        )


def _resolve_time_or_exit(ctx, settlement_time: str | None):
    try:
        return resolve_settlement_time(settlement_time)
    except ValueError as e:
        click.echo(f"Error: Invalid settlement time: {e}", err=True)
        ctx.exit(1)


@click.group()
def settlement_group():
    """Preview, create and list settlement batches."""
    pass


def settlement_options(func):
    """Options shared by preview and create."""
    func = click.option(
        "--carry-ratio",
        help="Share of a positive distributable amount to withhold (0-1, two decimals)",
    )(func)
    func = click.option("--bill-account", default="", help="Settlement scope; empty means all accounts")(func)
    func = click.option(
        "--strategy",
        type=click.Choice(STRATEGY_CHOICES),
        default=SettlementStrategy.CUMULATIVE.value,
        show_default=True,
        help="Settlement strategy",
    )(func)
    func = click.option(
        "--time",
        "settlement_time",
        help="Settlement date (YYYY-MM-DD or relative like 'today'); settles through 23:59:59",
    )(func)
    return func


@settlement_group.command("preview")
@settlement_options
@click.option("--json", "as_json", is_flag=True, help="Print the serialized preview")
@click.pass_context
def preview_settlement(
    ctx,
    settlement_time: str | None,
    strategy: str,
    bill_account: str,
    carry_ratio: str | None,
    as_json: bool,
):
    """Preview a settlement without persisting anything.

    Examples:
        profitshare settlement preview --time 2026-02-28 --carry-ratio 0.2
        profitshare settlement preview --strategy incremental --bill-account shop-a --json
    """
    service = SettlementService(ctx.obj["db"], ctx.obj["policy"])
    parsed_time = _resolve_time_or_exit(ctx, settlement_time)

    try:
        if as_json:
            _echo_json(service.preview_payload(parsed_time, strategy, bill_account, carry_ratio))
            return
        preview = service.preview(parsed_time, strategy, bill_account, carry_ratio)
    except DomainError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"\nSettlement preview ({preview.strategy.value}, "
        f"{preview.bill_account or 'all accounts'}) at {preview.settlement_time:%Y-%m-%d %H:%M:%S}"
    )
    if preview.effective_batch_no:
        click.echo(f"  Current effective batch: {preview.effective_batch_no}")
    click.echo(f"  {'Carry ratio':<26} {format_amount(preview.carry_ratio):>14}")
    _echo_amounts(preview)
    click.echo()
    _echo_allocations(preview.allocations)


@settlement_group.command("create")
@settlement_options
@click.option("--note", default="", help="Batch note")
@click.option("--json", "as_json", is_flag=True, help="Print the serialized batch")
@click.pass_context
def create_settlement(
    ctx,
    settlement_time: str | None,
    strategy: str,
    bill_account: str,
    carry_ratio: str | None,
    note: str,
    as_json: bool,
):
    """Create a settlement batch.

    The new batch becomes the effective batch for its strategy and scope.
    Incremental batches mark the consumed transactions as settled.

    Examples:
        profitshare settlement create --time 2026-02-28 --note "February"
    """
    service = SettlementService(ctx.obj["db"], ctx.obj["policy"])
    parsed_time = _resolve_time_or_exit(ctx, settlement_time)

    try:
        batch = service.create(parsed_time, strategy, bill_account, carry_ratio, note)
    except DomainError as e:
        handle_domain_error(ctx, e)

    if as_json:
        _echo_json(batch_to_dict(batch))
        return

    click.echo(f"Created settlement batch {batch.batch_no} (ID: {batch.id})")
    _echo_amounts(batch)
    click.echo()
    _echo_allocations(batch.allocations)


@settlement_group.command("list")
@click.option("--strategy", type=click.Choice(STRATEGY_CHOICES), help="Filter by strategy")
@click.option("--bill-account", help="Filter by settlement scope")
@click.option("--json", "as_json", is_flag=True, help="Print serialized batches")
@click.pass_context
def list_settlements(ctx, strategy: str | None, bill_account: str | None, as_json: bool):
    """List settlement batches, newest first."""
    service = SettlementService(ctx.obj["db"], ctx.obj["policy"])

    batches = service.list_batches(strategy=strategy, bill_account=bill_account)
    if as_json:
        _echo_json([batch_to_dict(batch) for batch in batches])
        return

    if not batches:
        click.echo("No settlement batches found.")
        return

    click.echo(
        f"\n{'ID':<6} {'Batch':<24} {'Strategy':<12} {'Scope':<16} {'Settled at':<20} "
        f"{'Paid':>12} {'Carry':>12}  Effective"
    )
    click.echo("-" * 120)
    for batch in batches:
        click.echo(
            f"{batch.id:<6} {batch.batch_no:<24} {batch.strategy.value:<12} "
            f"{(batch.bill_account or 'all')[:16]:<16} {batch.settlement_time:%Y-%m-%d %H:%M:%S} "
            f"{format_amount(batch.paid_amount):>12} {format_amount(batch.carry_forward_amount):>12}  "
            f"{'yes' if batch.is_effective else 'no'}"
        )


@settlement_group.command("delete")
@click.argument("batch_id", type=int)
@click.pass_context
def delete_settlement(ctx, batch_id: int):
    """Delete a settlement batch (always rejected).

    Settlement history is append-only; issue a new batch instead.
    """
    service = SettlementService(ctx.obj["db"], ctx.obj["policy"])
    try:
        service.delete_batch(batch_id)
    except DomainError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register settlement commands with main CLI."""
    cli.add_command(settlement_group, name="settlement")
