"""CLI error handling helpers."""

import click

from fundbook.domain.errors import DomainError, ValidationError


def handle_domain_error(ctx: click.Context, error: DomainError | ValueError) -> None:
    """Render a domain error and exit with failure."""
    if isinstance(error, ValidationError) and error.field:
        click.echo(f"Error: {error} ({error.field})", err=True)
    else:
        click.echo(f"Error: {error}", err=True)
    ctx.exit(1)


def format_money(amount) -> str:
    """Format an amount for display, negatives with a leading minus."""
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,.2f}"
