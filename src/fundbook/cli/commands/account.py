"""Account management commands."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import ACCOUNT_TYPES, AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import TransactionStatus, TransactionType
from fundbook.utils.amount_parser import parse_amount


@click.group()
def account_group():
    """Manage accounts."""
    pass


@account_group.command("create")
@click.argument("name", metavar="ACCOUNT_NAME")
@click.option(
    "--type",
    "account_type",
    type=click.Choice(ACCOUNT_TYPES, case_sensitive=False),
    default="checking",
    help="Account type (default: checking)",
)
@click.option("--opening-balance", default="0", help="Balance before the first transaction")
@click.option("--fee-percentage", help="Processing fee percentage charged on income (e.g. 2.9)")
@click.option("--fee-flat", help="Flat processing fee charged on income (e.g. 0.30)")
@click.option("--fee-category", help="Expense category for processing fees (name or ID)")
@click.pass_context
def create_account(
    ctx,
    name: str,
    account_type: str,
    opening_balance: str,
    fee_percentage: str | None,
    fee_flat: str | None,
    fee_category: str | None,
):
    """Create a new account.

    Accounts that receive card payments can carry a processing fee. Income
    generated from recurring templates then books the fee as an expense.

    Examples:
        fundbook account create "Club Checking" --opening-balance 1500.00
        fundbook account create "PayPal" --type paypal --fee-percentage 2.9 --fee-flat 0.30 --fee-category "Fees"
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    category_service = CategoryService(db)

    try:
        fee_category_id = None
        if fee_category:
            fee_category_id = category_service.resolve_category(fee_category, TransactionType.EXPENSE)
        account_id = service.create_account(
            name=name,
            account_type=account_type.lower(),
            opening_balance=parse_amount(opening_balance),
            fee_percentage=parse_amount(fee_percentage) if fee_percentage else None,
            fee_flat_amount=parse_amount(fee_flat) if fee_flat else None,
            fee_category_id=fee_category_id,
        )
        click.echo(f"Created account '{name}' (ID: {account_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("list")
@click.option("--all", "show_all", is_flag=True, help="Include inactive accounts")
@click.pass_context
def list_accounts(ctx, show_all: bool):
    """List accounts with their current balances."""
    db = ctx.obj["db"]
    service = AccountService(db)

    accounts = service.list_accounts(include_inactive=show_all)
    if not accounts:
        click.echo("No accounts found.")
        return

    balances = service.get_balances(include_inactive=show_all)
    click.echo("\nAccounts:")
    click.echo("-" * 70)
    for acc in accounts:
        balance = format_money(balances[acc.id].current_balance)
        inactive = "" if acc.is_active else " (inactive)"
        click.echo(f"ID: {acc.id:3d} | {acc.name:20s} | {acc.account_type:8s} | {balance:>14s}{inactive}")


@account_group.command("balance")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_balance(ctx, account: str):
    """Show an account's balance broken down by clearing status.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    balance = service.get_balances(include_inactive=True)[account_id]
    click.echo(f"\n{account_obj.name}")
    click.echo("-" * 40)
    click.echo(f"{'Opening balance':<20} {format_money(account_obj.opening_balance or 0):>16}")
    click.echo(f"{'Income':<20} {format_money(balance.total_income):>16}")
    click.echo(f"{'Expenses':<20} {format_money(balance.total_expense):>16}")
    for status in TransactionStatus:
        label = f"  {status.value.capitalize()} net"
        click.echo(f"{label:<20} {format_money(balance.status_net[status]):>16}")
    click.echo("-" * 40)
    click.echo(f"{'Current balance':<20} {format_money(balance.current_balance):>16}")


@account_group.command("register")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def show_register(ctx, account: str):
    """Show an account's transactions with a running balance.

    ACCOUNT can be an account name or ID.
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    register = service.get_register(account_id)
    if not register:
        click.echo("No transactions found.")
        return

    click.echo(f"\n{'ID':<6} {'Date':<12} {'Status':<11} {'Amount':>12} {'Balance':>14}  Description")
    click.echo("-" * 90)
    for txn, balance in register:
        click.echo(
            f"{txn.id:<6} {str(txn.date):<12} {txn.status.value:<11} "
            f"{format_money(txn.signed_amount):>12} {format_money(balance):>14}  {txn.description or ''}"
        )


@account_group.command("deactivate")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def deactivate_account(ctx, account: str) -> None:
    """Deactivate an account. Its history is kept."""
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)

    try:
        service.deactivate_account(account_id)
        click.echo(f"Deactivated account {account_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


@account_group.command("delete")
@click.argument("account", metavar="ACCOUNT")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def delete_account(ctx, account: str, yes: bool) -> None:
    """Delete an account.

    ACCOUNT can be an account name or ID. The account can only be deleted
    if it has no transactions; deactivate it instead to keep its history.

    Examples:
        fundbook account delete "Old Savings"
        fundbook account delete 3 --yes
    """
    db = ctx.obj["db"]
    service = AccountService(db)
    account_id = resolve_account_or_exit(ctx, service, account)
    account_obj = service.get_account(account_id)

    if not yes and not click.confirm(
        f"Are you sure you want to delete account '{account_obj.name}' (ID: {account_id})?"
    ):
        click.echo("Deletion cancelled.")
        return

    try:
        service.delete_account(account_id)
        click.echo(f"Deleted account '{account_obj.name}'")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register account commands with main CLI."""
    cli.add_command(account_group, name="account")
