"""Recurring transaction template commands."""

import click
from fundbook.cli.account_resolution import resolve_account_or_exit
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.account import AccountService
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import RecurrenceRule, TransactionType
from fundbook.domain.template import TemplateService
from fundbook.utils.amount_parser import parse_amount
from fundbook.utils.date_parser import parse_date

RULE_CHOICES = [rule.value for rule in RecurrenceRule]


@click.group()
def template_group():
    """Manage recurring transaction templates."""
    pass


@template_group.command("create")
@click.option("--account", required=True, help="Account name or ID")
@click.option(
    "--type",
    "transaction_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    required=True,
    help="Whether money comes in or goes out",
)
@click.option("--amount", required=True, help="Amount of each occurrence")
@click.option("--description", required=True, help="Description copied to each transaction")
@click.option("--rule", type=click.Choice(RULE_CHOICES, case_sensitive=False), required=True)
@click.option("--start-date", required=True, help="First occurrence")
@click.option("--end-date", help="Last possible occurrence (inclusive)")
@click.option("--category", help="Category name or ID")
@click.pass_context
def create_template(
    ctx, account, transaction_type, amount, description, rule, start_date, end_date, category
):
    """Create a recurring template.

    Examples:
        fundbook template create --account 1 --type expense --amount 120 --description "Field rental" --rule monthly --start-date 2024-01-31
    """
    db = ctx.obj["db"]
    service = TemplateService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account)
    txn_type = TransactionType(transaction_type.lower())

    try:
        category_id = None
        if category:
            category_id = CategoryService(db).resolve_category(category, txn_type)
        template_id = service.create_template(
            account_id=account_id,
            transaction_type=txn_type,
            amount=parse_amount(amount),
            description=description,
            rule=rule.lower(),
            start_date=start_date,
            end_date=end_date,
            category_id=category_id,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)

    template = service.get_template(template_id)
    click.echo(f"Created template {template_id}")
    click.echo(f"  Next occurrence: {template.next_occurrence_date or 'none'}")


@template_group.command("list")
@click.option("--account", help="Account name or ID")
@click.pass_context
def list_templates(ctx, account: str | None):
    """List recurring templates."""
    db = ctx.obj["db"]
    service = TemplateService(db)
    account_id = resolve_account_or_exit(ctx, AccountService(db), account) if account else None

    templates = service.list_templates(account_id=account_id)
    if not templates:
        click.echo("No templates found.")
        return

    click.echo(f"\n{'ID':<5} {'Rule':<10} {'Type':<8} {'Amount':>12}  {'Next':<12} {'State':<8} Description")
    click.echo("-" * 90)
    for t in templates:
        state = "active" if t.is_active else "paused"
        click.echo(
            f"{t.id:<5} {t.rule.value:<10} {t.transaction_type.value:<8} {format_money(t.amount):>12}  "
            f"{str(t.next_occurrence_date or '-'):<12} {state:<8} {t.description}"
        )


@template_group.command("generate")
@click.argument("template_id", type=int)
@click.pass_context
def generate(ctx, template_id: int):
    """Create the template's pending transaction and advance it."""
    db = ctx.obj["db"]
    service = TemplateService(db)

    try:
        txn_ids = service.generate(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"Generated transaction(s): {', '.join(str(i) for i in txn_ids)}")
    template = service.get_template(template_id)
    if template.next_occurrence_date is None:
        click.echo("Template has no further occurrences.")
    else:
        click.echo(f"Next occurrence: {template.next_occurrence_date}")


@template_group.command("pause")
@click.argument("template_id", type=int)
@click.pass_context
def pause(ctx, template_id: int):
    """Pause a template."""
    db = ctx.obj["db"]
    try:
        TemplateService(db).pause(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Paused template {template_id}")


@template_group.command("resume")
@click.argument("template_id", type=int)
@click.pass_context
def resume(ctx, template_id: int):
    """Resume a paused template from its first occurrence on or after today."""
    db = ctx.obj["db"]
    try:
        next_date = TemplateService(db).resume(template_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Resumed template {template_id}, next occurrence {next_date}")


@template_group.command("reschedule")
@click.argument("template_id", type=int)
@click.option("--rule", type=click.Choice(RULE_CHOICES, case_sensitive=False))
@click.option("--start-date")
@click.option("--end-date")
@click.option("--no-end-date", is_flag=True, help="Remove the end date")
@click.pass_context
def reschedule(ctx, template_id, rule, start_date, end_date, no_end_date):
    """Change a template's rule, start date or end date."""
    db = ctx.obj["db"]
    try:
        next_date = TemplateService(db).update_schedule(
            template_id,
            rule=rule.lower() if rule else None,
            start_date=start_date,
            end_date=end_date,
            clear_end_date=no_end_date,
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Updated template {template_id}, next occurrence {next_date or 'none'}")


@template_group.command("due")
@click.option("--as-of", help="Treat this date as today")
@click.option("--generate", "do_generate", is_flag=True, help="Create every due transaction")
@click.pass_context
def due(ctx, as_of: str | None, do_generate: bool):
    """List templates with occurrences due, optionally generating them.

    Templates that missed several periods are caught up one occurrence at
    a time.
    """
    db = ctx.obj["db"]
    service = TemplateService(db)

    try:
        today = parse_date(as_of or "today")
        if do_generate:
            created = service.generate_due(today)
        else:
            templates = service.list_due(today)
    except ValueError as e:
        handle_domain_error(ctx, e)

    if do_generate:
        if not created:
            click.echo("Nothing due.")
        for template_id, txn_ids in created.items():
            click.echo(f"Template {template_id}: created {len(txn_ids)} transaction(s)")
        return

    if not templates:
        click.echo("Nothing due.")
    for t in templates:
        dates = service.pending_occurrences(t, today)
        click.echo(f"Template {t.id} ({t.description}): {len(dates)} due, first {dates[0]}")


def register_commands(cli):
    """Register template commands with main CLI."""
    cli.add_command(template_group, name="template")
