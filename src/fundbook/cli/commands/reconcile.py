"""Bank statement reconciliation commands."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import TransactionType
from fundbook.domain.reconciliation import ReconciliationMatch, ReconciliationService
from fundbook.domain.validation import parse_reference_list
from fundbook.utils.amount_parser import parse_amount


@click.group()
def reconcile_group():
    """Reconcile an account against a bank statement."""
    pass


def _load_session_or_exit(ctx, service: ReconciliationService, session_id: int):
    session = service.get_session(session_id)
    if session is None:
        click.echo(f"Error: Reconciliation session {session_id} not found", err=True)
        ctx.exit(1)
    return session


def _print_match(match: ReconciliationMatch) -> None:
    session = match.session
    click.echo(f"\nReconciliation session {session.id} (statement {session.statement_date})")
    click.echo("-" * 90)
    if not match.candidates:
        click.echo("No unreconciled transactions.")
    for txn in match.candidates:
        mark = "[x]" if match.is_selected(txn.id) else "[ ]"
        click.echo(
            f"{mark} {txn.id:<6} {str(txn.date):<12} {txn.status.value:<10} "
            f"{format_money(txn.signed_amount):>12}  {txn.description or ''}"
        )
    click.echo("-" * 90)
    click.echo(f"{'Starting balance':<26} {format_money(session.starting_balance):>14}")
    click.echo(f"{'Selected total':<26} {format_money(match.selected_total):>14}")
    click.echo(f"{'Cleared balance':<26} {format_money(match.cleared_balance):>14}")
    click.echo(f"{'Statement ending balance':<26} {format_money(session.statement_ending_balance):>14}")
    click.echo(f"{'Difference':<26} {format_money(match.difference):>14}")
    click.echo("Balanced." if match.is_balanced else "Not balanced.")


@reconcile_group.command("start")
@click.argument("account", metavar="ACCOUNT")
@click.option("--statement-date", required=True, help="Date of the bank statement")
@click.option("--ending-balance", required=True, help="Ending balance printed on the statement")
@click.pass_context
def start_session(ctx, account: str, statement_date: str, ending_balance: str):
    """Start reconciling ACCOUNT against a statement.

    If the account already has a reconciliation in progress, that session
    is resumed instead.

    Examples:
        fundbook reconcile start "Club Checking" --statement-date 2024-03-31 --ending-balance 2450.17
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    try:
        session_id, created = service.create_session(account_id, statement_date, ending_balance)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if created:
        click.echo(f"Started reconciliation session {session_id}")
    else:
        click.echo(f"Resuming reconciliation session {session_id} already in progress")
    _print_match(service.get_match(session_id))


@reconcile_group.command("show")
@click.argument("session_id", type=int)
@click.option("--select", "selected", default="", help="Comma separated transaction IDs to tick")
@click.pass_context
def show_session(ctx, session_id: int, selected: str):
    """Show the matching worksheet for a session.

    Use --select to see how the cleared balance changes with a selection.
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)

    try:
        ids = parse_reference_list(selected, "transaction_ids") if selected.strip() else []
        match = service.get_match(session_id)
        for txn_id in ids:
            match.select(txn_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    _print_match(match)


@reconcile_group.command("add")
@click.argument("session_id", type=int)
@click.option("--date", "transaction_date", required=True, help="Transaction date")
@click.option("--amount", required=True, help="Transaction amount, always positive")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Whether money comes in or goes out",
)
@click.option("--description", required=True, help="Transaction description")
@click.option("--category", required=True, help="Category name or ID")
@click.pass_context
def quick_add(ctx, session_id, transaction_date, amount, transaction_type, description, category):
    """Add a transaction found on the statement but missing from the books.

    Examples:
        fundbook reconcile add 4 --date 2024-03-28 --amount 2.50 --type expense --description "Bank fee" --category "Fees"
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    session = _load_session_or_exit(ctx, service, session_id)
    txn_type = TransactionType(transaction_type.lower())

    try:
        category_id = CategoryService(db).resolve_category(category, txn_type)
        txn_id = service.quick_add_transaction(
            session_id=session.id,
            account_id=session.account_id,
            transaction_date=transaction_date,
            description=description,
            amount=parse_amount(amount),
            transaction_type=txn_type,
            category_id=category_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Added transaction {txn_id} to session {session.id}")


@reconcile_group.command("finish")
@click.argument("session_id", type=int)
@click.option("--transactions", "transaction_ids", help="Comma separated transaction IDs to reconcile")
@click.option("--all", "select_all", is_flag=True, help="Reconcile every listed transaction")
@click.option("--force", is_flag=True, help="Finish even if the session does not balance")
@click.pass_context
def finish_session(ctx, session_id: int, transaction_ids: str | None, select_all: bool, force: bool):
    """Finish a session, marking the selected transactions reconciled.

    Transactions added to the session with 'reconcile add' are included
    automatically.

    Examples:
        fundbook reconcile finish 4 --transactions 10,11,15
        fundbook reconcile finish 4 --all
    """
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    session = _load_session_or_exit(ctx, service, session_id)

    try:
        match = service.get_match(session.id)
        if select_all:
            match.select_all()
        elif transaction_ids:
            for txn_id in parse_reference_list(transaction_ids, "transaction_ids"):
                match.select(txn_id)

        if not match.is_balanced and not force:
            click.echo(
                f"Error: Session does not balance (difference {format_money(match.difference)}). "
                "Use --force to finish anyway.",
                err=True,
            )
            ctx.exit(1)

        finished = service.finish(session.id, session.account_id, match.selected_ids)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(
        f"Finished reconciliation session {finished.id}: "
        f"{finished.transaction_count} transaction(s) reconciled"
    )


@reconcile_group.command("cancel")
@click.argument("session_id", type=int)
@click.pass_context
def cancel_session(ctx, session_id: int):
    """Cancel a session. No transactions are changed."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    session = _load_session_or_exit(ctx, service, session_id)

    try:
        service.cancel(session.id, session.account_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Cancelled reconciliation session {session.id}")


@reconcile_group.command("history")
@click.argument("account", metavar="ACCOUNT")
@click.pass_context
def session_history(ctx, account: str):
    """List an account's reconciliation sessions, newest first."""
    db = ctx.obj["db"]
    service = ReconciliationService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)

    sessions = service.list_sessions(account_id)
    if not sessions:
        click.echo("No reconciliation sessions found.")
        return

    click.echo(f"\n{'ID':<6} {'Statement':<12} {'Status':<12} {'Ending balance':>16} {'Count':>6}")
    click.echo("-" * 60)
    for s in sessions:
        click.echo(
            f"{s.id:<6} {str(s.statement_date):<12} {s.status.value:<12} "
            f"{format_money(s.statement_ending_balance):>16} {s.transaction_count:>6}"
        )


def register_commands(cli):
    """Register reconcile commands with main CLI."""
    cli.add_command(reconcile_group, name="reconcile")
