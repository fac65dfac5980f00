"""CLI helpers for account resolution."""

from __future__ import annotations

import click

from fundbook.cli.error_handling import handle_domain_error
from fundbook.domain import errors
from fundbook.domain.account import AccountService
from fundbook.domain.errors import NotFoundError


def resolve_account(account_service: AccountService, account: str | int) -> int:
    """Resolve account name or ID to account ID.

    Inactive accounts resolve too; services decide whether they may be used.

    Raises:
        NotFoundError: If account is not found
    """
    if isinstance(account, int) or str(account).strip().isdigit():
        account_id = int(account)
        if account_service.get_account(account_id) is None:
            raise NotFoundError(errors.account_not_found(account_id))
        return account_id

    for acc in account_service.list_accounts(include_inactive=True):
        if acc.name == account:
            return acc.id

    raise NotFoundError(f"Account '{account}' not found")


def resolve_account_or_exit(
    ctx: click.Context, account_service: AccountService, account: str | int
) -> int:
    """Resolve account name or ID, or exit with a CLI error."""
    try:
        return resolve_account(account_service, account)
    except NotFoundError as exc:
        handle_domain_error(ctx, exc)
