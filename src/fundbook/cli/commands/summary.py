"""Summary commands."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.date_filters import period_options, resolve_cli_date_range
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import AccountService
from fundbook.domain.entities import TransactionStatus
from fundbook.domain.summary import ROOT_LABEL, SummaryService
from fundbook.utils.fiscal_year import PRESETS, get_preset_range


def _display_groups(title: str, groups, total) -> None:
    click.echo(title)
    click.echo("*" * 80)
    for group in groups:
        click.echo(f"{group.parent_name:<50} {format_money(group.subtotal):>20}")
        # A group holding only its own amounts needs no breakdown
        if [c.name for c in group.children] == [ROOT_LABEL]:
            continue
        for child in group.children:
            click.echo(f"    {child.name:<46} {format_money(child.total):>20}")
    click.echo("-" * 80)
    click.echo(f"{title + ' Subtotal':<50} {format_money(total):>20}")
    click.echo("=" * 80)


@click.command("summary")
@click.option("--start-date", help="Start date (YYYY-MM-DD or relative like 'last month', 'this year')")
@click.option("--end-date", help="End date (YYYY-MM-DD or relative like 'today', 'this month')")
@period_options
@click.option(
    "--preset",
    type=click.Choice(PRESETS, case_sensitive=False),
    help="Fiscal date range preset",
)
@click.option(
    "--fiscal-start-month",
    type=click.IntRange(1, 12),
    default=1,
    show_default=True,
    envvar="FUNDBOOK_FISCAL_START_MONTH",
    help="Month the fiscal year starts in",
)
@click.option("--account", help="Only include this account (name or ID)")
@click.option("--category", help="Only include this category and its subcategories (name, path or ID)")
@click.pass_context
def summary(
    ctx,
    start_date: str | None,
    end_date: str | None,
    preset: str | None,
    fiscal_start_month: int,
    account: str | None,
    category: str | None,
    **period_flags: bool,
):
    """Show income and expense totals by category.

    Examples:
        fundbook summary --this-year
        fundbook summary --preset current-fy --fiscal-start-month 7
        fundbook summary --start-date 2024-01-01 --end-date 2024-03-31 --account "Club Checking"
    """
    db = ctx.obj["db"]

    if preset and (start_date or end_date or any(period_flags.values())):
        click.echo("Error: --preset cannot be combined with period options or explicit dates.", err=True)
        ctx.exit(1)

    if preset:
        date_range = get_preset_range(preset, fiscal_start_month)
        start, end, title = date_range.start, date_range.end, date_range.label
    else:
        start, end = resolve_cli_date_range(
            ctx, start_date=start_date, end_date=end_date, period_flags=period_flags
        )
        title = f"{start or 'beginning'} to {end or 'today'}"

    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None
    try:
        report = SummaryService(db).build_summary(
            start_date=start, end_date=end, account_id=account_id, category=category
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    if report.transaction_count == 0:
        click.echo("No transactions found.")
        return

    click.echo(f"\nSummary: {title}")
    click.echo("-" * 80)
    if report.income_by_category:
        _display_groups("Income", report.income_by_category, report.total_income)
        click.echo()
    if report.expenses_by_category:
        _display_groups("Expense", report.expenses_by_category, report.total_expenses)

    click.echo(f"{'NET CHANGE':<50} {format_money(report.net_change):>20}")
    click.echo()
    click.echo("By status:")
    for status in TransactionStatus:
        click.echo(f"    {status.value.capitalize():<46} {format_money(report.balance_by_status[status]):>20}")


def register_commands(cli):
    """Register summary command with main CLI."""
    cli.add_command(summary)
