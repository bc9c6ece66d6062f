"""Ledger transaction commands."""

import click
from profitshare.cli.date_filters import resolve_cli_time_range
from profitshare.cli.error_handling import handle_domain_error
from profitshare.domain.entities import Category, Direction, SETTLED_STATUS, TransactionFilter
from profitshare.domain.errors import DomainError
from profitshare.domain.transaction import TransactionService
from profitshare.utils.date_parser import parse_datetime
from profitshare.utils.money import format_amount, parse_amount

CATEGORY_CHOICES = [c.value for c in Category]
DIRECTION_CHOICES = [d.value for d in Direction]


@click.group()
def transaction_group():
    """Manage ledger transactions."""
    pass


@transaction_group.command("add")
@click.option("--account", required=True, help="Bill account the money moved through")
@click.option("--time", "txn_time", required=True, help="Transaction time (e.g., '2026-02-16 10:00:00')")
@click.option("--amount", required=True, help="Amount as a non-negative magnitude (e.g., 123.45)")
@click.option("--direction", type=click.Choice(DIRECTION_CHOICES), required=True, help="Money flow direction")
@click.option(
    "--category",
    type=click.Choice(CATEGORY_CHOICES),
    default=Category.MANUAL_ADD.value,
    show_default=True,
    help="Ledger category",
)
@click.option("--status", default=SETTLED_STATUS, show_default=True, help="Trade status")
@click.option("--order-id", default="", help="Platform order ID")
@click.option("--description", default="", help="Transaction description")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    txn_time: str,
    amount: str,
    direction: str,
    category: str,
    status: str,
    order_id: str,
    description: str,
):
    """Add a ledger transaction manually.

    Examples:
        profitshare transaction add --account shop-a --time "2026-02-16 10:00" --amount 100 --direction income
        profitshare transaction add --account shop-a --time 2026-02-16 --amount 8.5 --direction expense --category traffic_cost
    """
    service = TransactionService(ctx.obj["db"])

    try:
        parsed_time = parse_datetime(txn_time)
    except ValueError as e:
        click.echo(f"Error: Invalid time format: {e}", err=True)
        ctx.exit(1)

    try:
        parsed_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        transaction_id = service.add_transaction(
            transaction_time=parsed_time,
            bill_account=account,
            amount=parsed_amount,
            direction=direction,
            category=category,
            status=status,
            order_id=order_id,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created transaction {transaction_id}")


@transaction_group.command("list")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@click.option("--account", help="Bill account")
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), help="Ledger category")
@click.option("--unsettled", is_flag=True, help="Show only transactions not consumed by an incremental settlement")
@click.pass_context
def list_transactions(
    ctx,
    start_date: str | None,
    end_date: str | None,
    account: str | None,
    category: str | None,
    unsettled: bool,
):
    """View ledger transactions with optional filters."""
    service = TransactionService(ctx.obj["db"])
    start, end = resolve_cli_time_range(ctx, start_date=start_date, end_date=end_date)

    transactions = service.list_transactions(
        TransactionFilter(
            start=start,
            end=end,
            bill_account=(account or "").strip() or None,
            categories=frozenset({Category(category)}) if category else None,
            unsettled_only=unsettled,
        )
    )

    if not transactions:
        click.echo("No transactions found.")
        return

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 110)
    click.echo(
        f"{'ID':<6} {'Time':<20} {'Account':<16} {'Category':<24} {'Direction':<10} "
        f"{'Amount':>12} {'Deletable':<9}"
    )
    click.echo("-" * 110)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {txn.transaction_time:%Y-%m-%d %H:%M:%S} {txn.bill_account[:16]:<16} "
            f"{txn.category.value:<24} {txn.direction.value:<10} "
            f"{format_amount(txn.amount):>12} {'yes' if txn.deletable else 'no':<9}"
        )


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--status", help="Trade status")
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), help="Ledger category")
@click.option("--direction", type=click.Choice(DIRECTION_CHOICES), help="Money flow direction")
@click.option("--amount", help="Amount as a non-negative magnitude")
@click.option("--description", help="Transaction description")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    status: str | None,
    category: str | None,
    direction: str | None,
    amount: str | None,
    description: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Transactions consumed by an
    incremental settlement cannot be edited.

    Examples:
        profitshare transaction update 1 --status 交易成功
        profitshare transaction update 1 --amount 75.00 --category traffic_cost
    """
    service = TransactionService(ctx.obj["db"])

    txn_amount = None
    if amount is not None:
        try:
            txn_amount = parse_amount(amount)
        except ValueError as e:
            click.echo(f"Error: Invalid amount format: {e}", err=True)
            ctx.exit(1)

    try:
        service.update_transaction(
            transaction_id,
            status=status,
            category=category,
            direction=direction,
            amount=txn_amount,
            description=description,
        )
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated transaction {transaction_id}")


@transaction_group.command("categorize")
@click.argument("transaction_ids", type=int, nargs=-1, required=True)
@click.option("--category", type=click.Choice(CATEGORY_CHOICES), required=True, help="New ledger category")
@click.pass_context
def categorize_transactions(ctx, transaction_ids: tuple[int, ...], category: str) -> None:
    """Move several transactions to one category, all or nothing.

    Examples:
        profitshare transaction categorize 4 5 6 --category internal_transfer
    """
    service = TransactionService(ctx.obj["db"])

    try:
        count = service.recategorize_transactions(list(transaction_ids), category)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Categorized {count} transaction(s) as {category}")


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.pass_context
def delete_transaction(ctx, transaction_id: int) -> None:
    """Delete a transaction.

    Transactions consumed by an incremental settlement cannot be deleted.

    Examples:
        profitshare transaction delete 1
    """
    service = TransactionService(ctx.obj["db"])

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
    except DomainError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Deleted transaction {transaction_id}")


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
