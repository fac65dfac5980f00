"""Add transaction command."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import TransactionType
from fundbook.domain.transaction import TransactionService
from fundbook.utils.amount_parser import parse_amount
from fundbook.utils.date_parser import parse_date


@click.command("add")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--date",
    required=True,
    help="Transaction date (YYYY-MM-DD or relative like 'today', 'yesterday')",
)
@click.option("--amount", required=True, help="Transaction amount, always positive (e.g., 123.45)")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Whether money comes in or goes out",
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", help="Category name or ID")
@click.option("--cleared", is_flag=True, help="Record the transaction as already cleared")
@click.pass_context
def add_transaction(
    ctx,
    account: str,
    date: str,
    amount: str,
    transaction_type: str,
    description: str,
    category: str | None,
    cleared: bool,
):
    """Add a transaction manually.

    Examples:
        fundbook add --account 1 --date 2024-01-15 --amount 50.00 --type expense --description "Referee fees"
        fundbook add --account "Club Checking" --date today --amount 1000 --type income --description "Sponsorship" --category "Sponsors"
    """
    db = ctx.obj["db"]
    transaction_service = TransactionService(db)
    account_service = AccountService(db)
    category_service = CategoryService(db)

    account_id = resolve_account_or_exit(ctx, account_service, account)
    txn_type = TransactionType(transaction_type.lower())

    try:
        txn_date = parse_date(date)
    except ValueError as e:
        click.echo(f"Error: Invalid date format: {e}", err=True)
        ctx.exit(1)

    try:
        txn_amount = parse_amount(amount)
    except ValueError as e:
        click.echo(f"Error: Invalid amount format: {e}", err=True)
        ctx.exit(1)

    try:
        category_id = None
        if category:
            category_id = category_service.resolve_category(category, txn_type)
        transaction_id = transaction_service.create_transaction(
            account_id=account_id,
            date=txn_date,
            amount=txn_amount,
            transaction_type=txn_type,
            description=description,
            category_id=category_id,
            status="cleared" if cleared else "uncleared",
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Created transaction {transaction_id}")
    click.echo(f"  Date: {txn_date}")
    click.echo(f"  Amount: {format_money(txn_amount)} ({txn_type.value})")
    click.echo(f"  Description: {description}")
    if category:
        click.echo(f"  Category: {category}")


def register_commands(cli):
    """Register add command with main CLI."""
    cli.add_command(add_transaction)
