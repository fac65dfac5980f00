"""Category domain service."""

import logging
from typing import Iterable, Optional

from fundbook.database.base import Database
from fundbook.domain import errors
from fundbook.domain.entities import Category as CategoryEntity, CategoryTreeNode, TransactionType
from fundbook.domain.errors import ConflictError, NotFoundError, ValidationError
from fundbook.domain.validation import parse_transaction_type

logger = logging.getLogger(__name__)

MAX_CATEGORY_NAME_LENGTH = 100
PATH_SEPARATOR = " > "


def category_path(category_id: int, index: dict[int, CategoryEntity]) -> str:
    """Full path of a category, e.g. "Dues > Youth"."""
    parts = []
    current = index.get(category_id)
    while current is not None:
        parts.append(current.name)
        current = index.get(current.parent_id) if current.parent_id is not None else None
    return PATH_SEPARATOR.join(reversed(parts))


def top_level_id(category_id: int, index: dict[int, CategoryEntity]) -> int:
    """ID of the root category a category sits under (itself for roots)."""
    current_id = category_id
    while True:
        parent_id = index[current_id].parent_id
        if parent_id is None or parent_id not in index:
            return current_id
        current_id = parent_id


def descendant_ids(category_id: int, categories: Iterable[CategoryEntity]) -> set[int]:
    """IDs of a category and everything below it."""
    children: dict[int, list[int]] = {}
    for cat in categories:
        if cat.parent_id is not None:
            children.setdefault(cat.parent_id, []).append(cat.id)

    result = {category_id}
    pending = [category_id]
    while pending:
        for child_id in children.get(pending.pop(), []):
            if child_id not in result:
                result.add(child_id)
                pending.append(child_id)
    return result


def build_category_tree(categories: Iterable[CategoryEntity]) -> list[CategoryTreeNode]:
    """Nest categories under their parents, names sorted at every level.

    Categories whose parent is not in ``categories`` become roots.
    """
    categories = sorted(categories, key=lambda c: c.name)
    known = {c.id for c in categories}

    def build(parent_id: Optional[int]) -> list[CategoryTreeNode]:
        nodes = []
        for cat in categories:
            effective_parent = cat.parent_id if cat.parent_id in known else None
            if effective_parent == parent_id:
                nodes.append(CategoryTreeNode(category=cat, children=tuple(build(cat.id))))
        return nodes

    return build(None)


class CategoryService:
    """Service for managing income and expense categories."""

    def __init__(self, db: Database):
        """Initialize category service.

        Args:
            db: Database instance
        """
        self.db = db

    def create_category(
        self,
        name: str,
        category_type: TransactionType | str,
        parent: Optional[str | int] = None,
    ) -> int:
        """Create a category.

        Args:
            name: Category name, unique within its type
            category_type: "income" or "expense"
            parent: Optional parent category name, path or ID. The parent
                must have the same type.

        Returns:
            Category ID

        Raises:
            ValidationError: If name, type or parent type is invalid
            NotFoundError: If the parent category doesn't exist
            ConflictError: If a category with the same name and type exists
        """
        name = name.strip()
        if not name:
            raise ValidationError("Category name is required.", field="name")
        if len(name) > MAX_CATEGORY_NAME_LENGTH:
            raise ValidationError(
                f"Category name must be {MAX_CATEGORY_NAME_LENGTH} characters or fewer.", field="name"
            )
        if ">" in name:
            raise ValidationError("Category name cannot contain '>'.", field="name")
        category_type = parse_transaction_type(category_type, field="category_type")

        parent_id = None
        if parent is not None and str(parent).strip():
            parent_id = self._resolve_parent(parent, category_type)

        if self.db.get_category_by_name(name, category_type) is not None:
            raise ConflictError(f"{category_type.value.capitalize()} category '{name}' already exists")

        category_id = self.db.create_category(name=name, category_type=category_type, parent_id=parent_id)
        logger.info("Created %s category %s (%s)", category_type.value, category_id, name)
        return category_id

    def get_category(self, category_id: int) -> Optional[CategoryEntity]:
        return self.db.get_category(category_id)

    def resolve_category(self, category: str | int, category_type: Optional[TransactionType] = None) -> int:
        """Resolve a category ID, name or path (e.g. "Dues > Youth") to an ID.

        When a name matches both an income and an expense category,
        ``category_type`` picks between them.

        Raises:
            NotFoundError: If no category matches
        """
        if isinstance(category, int) or str(category).strip().isdigit():
            category_id = int(category)
            if self.db.get_category(category_id) is None:
                raise NotFoundError(errors.category_not_found(category_id))
            return category_id

        if ">" in category:
            found = self.db.get_category_by_path(category, category_type)
            if found is None:
                raise NotFoundError(f"Category '{category}' not found")
            return found.id

        matches = [c for c in self.db.list_categories() if c.name == category]
        if category_type is not None:
            matches = [c for c in matches if c.category_type == category_type]
        if not matches:
            raise NotFoundError(f"Category '{category}' not found")
        return matches[0].id

    def list_categories(
        self, category_type: Optional[TransactionType] = None, include_inactive: bool = False
    ) -> list[CategoryEntity]:
        """List categories, optionally filtered by type."""
        categories = self.db.list_categories(category_type=category_type)
        if include_inactive:
            return categories
        return [c for c in categories if c.is_active]

    def get_category_tree(
        self, category_type: Optional[TransactionType] = None, include_inactive: bool = False
    ) -> list[CategoryTreeNode]:
        """Get the category tree, roots sorted by name."""
        return build_category_tree(self.list_categories(category_type, include_inactive))

    def get_category_path(self, category_id: int) -> str:
        """Full path for a category, or an empty string if it doesn't exist."""
        index = {c.id: c for c in self.db.list_categories()}
        return category_path(category_id, index)

    def move_category(self, category: str | int, new_parent: Optional[str | int]) -> None:
        """Put a category under another parent, or make it a root with None.

        Raises:
            NotFoundError: If either category doesn't exist
            ValidationError: If the move would create a cycle or mix types
        """
        category_id = self.resolve_category(category)
        moving = self.db.get_category(category_id)

        parent_id = None
        if new_parent is not None:
            parent_id = self._resolve_parent(new_parent, moving.category_type)
            if parent_id in descendant_ids(category_id, self.db.list_categories()):
                raise ValidationError(
                    "Cannot move a category under itself or one of its subcategories.",
                    field="parent_id",
                )

        self.db.set_category_parent(category_id, parent_id)
        logger.info("Moved category %s under %s", category_id, parent_id)

    def deactivate_category(self, category_id: int) -> None:
        if self.db.get_category(category_id) is None:
            raise NotFoundError(errors.category_not_found(category_id))
        self.db.set_category_active(category_id, False)

    def _resolve_parent(self, parent: str | int, category_type: TransactionType) -> int:
        if isinstance(parent, int) or str(parent).strip().isdigit():
            parent_id = self.resolve_category(parent)
        else:
            parent_id = self.resolve_category(str(parent).strip(), category_type)
        if self.db.get_category(parent_id).category_type != category_type:
            raise ValidationError(
                f"Parent category must be an {category_type.value} category.", field="parent_id"
            )
        return parent_id
