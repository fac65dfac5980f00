"""Category management commands."""

import click
from fundbook.cli.error_handling import handle_domain_error
from fundbook.domain.category import CategoryService
from fundbook.domain.entities import TransactionType


@click.group()
def category_group():
    """Manage categories."""
    pass


def _display_tree(nodes, indent=0):
    """Print category nodes, children indented under their parent."""
    for node in nodes:
        cat = node.category
        inactive = " (inactive)" if not cat.is_active else ""
        click.echo(f"{'  ' * indent}{cat.name} (ID: {cat.id}){inactive}")
        _display_tree(node.children, indent + 1)


@category_group.command("list")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    help="Only list categories of this type",
)
@click.option("--all", "show_all", is_flag=True, help="Include inactive categories")
@click.pass_context
def list_categories(ctx, category_type: str | None, show_all: bool):
    """List categories grouped by type."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    tree = service.get_category_tree(
        category_type=TransactionType(category_type.lower()) if category_type else None,
        include_inactive=show_all,
    )
    if not tree:
        click.echo("No categories found. Use 'category create' to add one.")
        return

    for kind in TransactionType:
        roots = [node for node in tree if node.category.category_type == kind]
        if not roots:
            continue
        click.echo(f"\n{kind.value.capitalize()} categories:")
        _display_tree(roots, indent=1)


@category_group.command("create")
@click.argument("name")
@click.option(
    "--type",
    "category_type",
    type=click.Choice(["income", "expense"], case_sensitive=False),
    default="expense",
    help="Category type (default: expense)",
)
@click.option("--parent", help="Parent category name, path or ID (same type)")
@click.pass_context
def create_category(ctx, name: str, category_type: str, parent: str | None):
    """Create a new category.

    Examples:
        fundbook category create "Dues" --type income
        fundbook category create "Youth" --type income --parent "Dues"
    """
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.create_category(
            name=name, category_type=category_type.lower(), parent=parent
        )
        click.echo(f"Created {category_type.lower()} category '{name}' (ID: {category_id})")
    except ValueError as e:
        handle_domain_error(ctx, e)


@category_group.command("move")
@click.argument("category")
@click.option("--parent", help="New parent category name, path or ID")
@click.option("--root", is_flag=True, help="Make the category a top-level category")
@click.pass_context
def move_category(ctx, category: str, parent: str | None, root: bool):
    """Move a category under another parent or to the top level."""
    if bool(parent) == root:
        click.echo("Error: Specify exactly one of --parent or --root.", err=True)
        ctx.exit(1)

    db = ctx.obj["db"]
    service = CategoryService(db)
    try:
        category_id = service.resolve_category(category)
        service.move_category(category_id, None if root else parent)
    except ValueError as e:
        handle_domain_error(ctx, e)
    click.echo(f"Moved category to '{service.get_category_path(category_id)}'")


@category_group.command("deactivate")
@click.argument("category")
@click.pass_context
def deactivate_category(ctx, category: str):
    """Deactivate a category so it can no longer be assigned."""
    db = ctx.obj["db"]
    service = CategoryService(db)

    try:
        category_id = service.resolve_category(category)
        service.deactivate_category(category_id)
        click.echo(f"Deactivated category {category_id}")
    except ValueError as e:
        handle_domain_error(ctx, e)


def register_commands(cli):
    """Register category commands with main CLI."""
    cli.add_command(category_group, name="category")
