"""Season, enrollment and fee payment commands."""

import click
from fundbook.cli.error_handling import format_money, handle_domain_error
from fundbook.domain.season import SeasonService
from fundbook.utils.amount_parser import parse_amount


@click.group()
def season_group():
    """Manage seasons, enrollments and fee payments."""
    pass


@season_group.command("create")
@click.argument("name")
@click.option("--fee", required=True, help="Default enrollment fee")
@click.option("--start-date", help="First day of the season")
@click.option("--end-date", help="Last day of the season")
@click.pass_context
def create_season(ctx, name: str, fee: str, start_date: str | None, end_date: str | None):
    """Create a season.

    Examples:
        fundbook season create "Spring 2024" --fee 150 --start-date 2024-03-01 --end-date 2024-06-30
    """
    db = ctx.obj["db"]
    try:
        season_id = SeasonService(db).create_season(
            name=name, fee_amount=parse_amount(fee), start_date=start_date, end_date=end_date
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created season '{name}' (ID: {season_id})")


@season_group.command("list")
@click.pass_context
def list_seasons(ctx):
    """List seasons, newest first."""
    seasons = SeasonService(ctx.obj["db"]).list_seasons()
    if not seasons:
        click.echo("No seasons found.")
        return
    for s in seasons:
        dates = f" {s.start_date} to {s.end_date}" if s.start_date and s.end_date else ""
        click.echo(f"ID: {s.id:3d} | {s.name:20s} | Fee: {format_money(s.fee_amount)}{dates}")


@season_group.command("student")
@click.argument("name")
@click.option("--guardian", help="Parent or guardian name")
@click.pass_context
def create_student(ctx, name: str, guardian: str | None):
    """Register a student."""
    db = ctx.obj["db"]
    try:
        student_id = SeasonService(db).create_student(name=name, guardian_name=guardian)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Created student '{name}' (ID: {student_id})")


@season_group.command("students")
@click.pass_context
def list_students(ctx):
    """List registered students."""
    students = SeasonService(ctx.obj["db"]).list_students()
    if not students:
        click.echo("No students found. Use 'season student' to add one.")
        return
    for s in students:
        guardian = f" (guardian: {s.guardian_name})" if s.guardian_name else ""
        click.echo(f"ID: {s.id:3d} | {s.name}{guardian}")


@season_group.command("enroll")
@click.argument("season_id", type=int)
@click.argument("student_ids")
@click.option("--fee", help="Fee for these students (defaults to the season fee)")
@click.pass_context
def enroll(ctx, season_id: int, student_ids: str, fee: str | None):
    """Enroll students in a season.

    STUDENT_IDS is a comma separated list. The whole batch is rejected if
    any student is listed twice or already enrolled.

    Examples:
        fundbook season enroll 1 3,4,7
    """
    db = ctx.obj["db"]
    try:
        enrollment_ids = SeasonService(db).enroll_students(
            season_id, student_ids, fee_amount=parse_amount(fee) if fee else None
        )
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Enrolled {len(enrollment_ids)} student(s) in season {season_id}")


@season_group.command("pay")
@click.argument("enrollment_id", type=int)
@click.option("--amount", required=True, help="Amount paid")
@click.option("--date", "payment_date", default="today", help="Payment date (default: today)")
@click.option("--method", help="Payment method, e.g. cash or check")
@click.pass_context
def record_payment(ctx, enrollment_id: int, amount: str, payment_date: str, method: str | None):
    """Record a fee payment against an enrollment."""
    db = ctx.obj["db"]
    service = SeasonService(db)
    try:
        service.record_payment(enrollment_id, payment_date, parse_amount(amount), method)
        summary = service.get_enrollment_summary(enrollment_id)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(
        f"Recorded payment of {format_money(parse_amount(amount))} for {summary.student_name}: "
        f"{summary.payment_status.value}, balance due {format_money(summary.balance_due)}"
    )


@season_group.command("status")
@click.argument("season_id", type=int)
@click.pass_context
def season_status(ctx, season_id: int):
    """Show fee collection status for a season."""
    db = ctx.obj["db"]
    try:
        summary = SeasonService(db).get_season_summary(season_id)
    except ValueError as e:
        handle_domain_error(ctx, e)

    click.echo(f"\n{summary.season.name}")
    click.echo("-" * 80)
    click.echo(f"{'Enrollment':<11} {'Student':<24} {'Fee':>10} {'Paid':>10} {'Due':>10}  Status")
    for e in summary.enrollments:
        click.echo(
            f"{e.enrollment.id:<11} {e.student_name[:24]:<24} {format_money(e.enrollment.fee_amount):>10} "
            f"{format_money(e.total_paid):>10} {format_money(e.balance_due):>10}  {e.payment_status.value}"
        )
    click.echo("-" * 80)
    click.echo(f"Enrolled: {summary.total_enrolled}")
    click.echo(f"Expected: {format_money(summary.total_fees_expected)}")
    click.echo(f"Collected: {format_money(summary.total_collected)}")
    click.echo(f"Outstanding: {format_money(summary.total_outstanding)}")
    click.echo(f"Collection rate: {summary.collection_rate}%")


def register_commands(cli):
    """Register season commands with main CLI."""
    cli.add_command(season_group, name="season")
