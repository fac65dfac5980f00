"""Transaction management commands."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.date_filters import period_options, resolve_cli_date_range
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import TransactionStatus, TransactionType
from fundbook.domain.transaction import TransactionService
from fundbook.utils.amount_parser import parse_amount
from fundbook.utils.date_parser import parse_date


@click.group()
def transaction_group():
    """Manage transactions."""
    pass


@transaction_group.command("list")
@click.option("--account", help="Account name or ID")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TransactionStatus], case_sensitive=False),
    help="Only show transactions with this status",
)
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_options
@click.pass_context
def list_transactions(ctx, account, status, start_date, end_date, **period_flags):
    """View transactions with optional filters, newest first.

    Examples:
        fundbook transaction list --account "Club Checking" --this-month
        fundbook transaction list --status uncleared --start-date 2024-01-01
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    account_service = AccountService(db)

    start, end = resolve_cli_date_range(
        ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
    )
    account_id = resolve_account_or_exit(ctx, account_service, account) if account else None

    transactions = service.list_transactions(
        start_date=start,
        end_date=end,
        account_id=account_id,
        status=TransactionStatus(status.lower()) if status else None,
    )
    if not transactions:
        click.echo("No transactions found.")
        return

    accounts = {acc.id: acc.name for acc in account_service.list_accounts(include_inactive=True)}

    click.echo(f"\nFound {len(transactions)} transaction(s):")
    click.echo("-" * 100)
    click.echo(f"{'ID':<6} {'Date':<12} {'Status':<11} {'Amount':>12}  {'Account':<20} {'Description':<30}")
    click.echo("-" * 100)
    for txn in transactions:
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.status.value:<11} "
            f"{format_money(txn.signed_amount):>12}  {accounts.get(txn.account_id, 'Unknown'):<20} "
            f"{(txn.description or '')[:30]:<30}"
        )

    total_income = sum(t.amount for t in transactions if t.transaction_type == TransactionType.INCOME)
    total_expense = sum(t.amount for t in transactions if t.transaction_type == TransactionType.EXPENSE)
    click.echo("-" * 100)
    click.echo(
        f"{'TOTAL':<6} Income: {format_money(total_income)} | "
        f"Expenses: {format_money(total_expense)} | Count: {len(transactions)}"
    )


@transaction_group.command("status")
@click.argument("transaction_id", type=int)
@click.argument("status", type=click.Choice(["cleared", "uncleared"], case_sensitive=False))
@click.pass_context
def set_status(ctx, transaction_id: int, status: str) -> None:
    """Mark a transaction cleared or uncleared.

    Reconciled transactions cannot change status.

    Examples:
        fundbook transaction status 12 cleared
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    try:
        service.set_status(transaction_id, status.lower())
        click.echo(f"Transaction {transaction_id} marked {status.lower()}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("update")
@click.argument("transaction_id", type=int)
@click.option("--date", help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')")
@click.option("--amount", help="Transaction amount, always positive")
@click.option("--description", help="Transaction description")
@click.option("--category", help="Category name or ID")
@click.pass_context
def update_transaction(
    ctx,
    transaction_id: int,
    date: str | None,
    amount: str | None,
    description: str | None,
    category: str | None,
) -> None:
    """Update a transaction.

    Updates only the fields that are provided. Reconciled transactions
    cannot be edited.

    Examples:
        fundbook transaction update 1 --amount 75.00
        fundbook transaction update 1 --category "Equipment"
    """
    db = ctx.obj["db"]
    service = TransactionService(db)
    category_service = CategoryService(db)

    try:
        txn = service.get_transaction(transaction_id)
        category_id = None
        if category is not None:
            category_id = category_service.resolve_category(
                category, txn.transaction_type if txn else None
            )
        service.update_transaction(
            transaction_id=transaction_id,
            date=parse_date(date) if date is not None else None,
            amount=parse_amount(amount) if amount is not None else None,
            description=description,
            category_id=category_id,
        )
        click.echo(f"Updated transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@transaction_group.command("delete")
@click.argument("transaction_id", type=int)
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_transaction(ctx, transaction_id: int, yes: bool) -> None:
    """Delete a transaction.

    Examples:
        fundbook transaction delete 1
    """
    db = ctx.obj["db"]
    service = TransactionService(db)

    txn = service.get_transaction(transaction_id)
    if txn is None:
        click.echo(f"Error: Transaction {transaction_id} not found", err=True)
        ctx.exit(1)

    if not yes and not click.confirm(f"Are you sure you want to delete transaction {transaction_id}?"):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_transaction(transaction_id)
        click.echo(f"Deleted transaction {transaction_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli: click.Group) -> None:
    """Register transaction commands with main CLI."""
    cli.add_command(transaction_group, name="transaction")
