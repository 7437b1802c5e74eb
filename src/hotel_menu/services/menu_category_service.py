"""Menu Category Service - CRUD for a business's two-level category tree.

Root categories (e.g., "Pizza") hold child categories (e.g., "Classic").
A child's parent must be a root in the same business, so the tree never
grows past two levels and can never loop.

All functions take a TenantScope and follow the optional-session pattern:
pass ``session`` to compose with a caller's transaction, or omit it to run
in a fresh session_scope().

Example Usage:
    >>> from hotel_menu.services.tenant import TenantScope
    >>> from hotel_menu.services.menu_category_service import create_category
    >>>
    >>> scope = TenantScope("b-1")
    >>> pizza = create_category(scope, "Pizza")
    >>> classic = create_category(scope, "Classic", parent_id=pizza["id"])
    >>> classic["parent_id"] == pizza["id"]
    True
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from hotel_menu.models import MenuCategory
from hotel_menu.services.database import session_scope
from hotel_menu.services.exceptions import (
    CategoryHierarchyError,
    CategoryNotFound,
    ValidationError,
)
from hotel_menu.services.logging_utils import get_service_logger, log_operation
from hotel_menu.services.tenant import TenantScope

logger = get_service_logger(__name__)

ERROR_OWN_PARENT = "A category cannot be its own parent."
ERROR_PARENT_NOT_ROOT = "Subcategories can only be placed under a top-level category."
ERROR_HAS_CHILDREN = "A category with subcategories cannot be moved under another category."


# ============================================================================
# Helpers
# ============================================================================


def _get_category_or_raise(scope: TenantScope, category_id: int, session: Session) -> MenuCategory:
    category = (
        session.query(MenuCategory)
        .filter(MenuCategory.id == category_id, MenuCategory.business_id == scope.business_id)
        .first()
    )
    if category is None:
        raise CategoryNotFound(category_id)
    return category


def _clean_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError(["Category name is required"])
    return cleaned


def _validate_parent(
    scope: TenantScope, parent_id: Optional[int], session: Session, category_id: Optional[int] = None
) -> Optional[MenuCategory]:
    """Check that parent_id may hold a child. Returns the parent, or None for roots."""
    if parent_id is None:
        return None
    if category_id is not None and parent_id == category_id:
        raise CategoryHierarchyError(ERROR_OWN_PARENT, category_id)

    parent = _get_category_or_raise(scope, parent_id, session)
    if parent.parent_id is not None:
        raise CategoryHierarchyError(ERROR_PARENT_NOT_ROOT, category_id)
    return parent


def _next_sort_order(scope: TenantScope, parent_id: Optional[int], session: Session) -> int:
    query = session.query(func.max(MenuCategory.sort_order)).filter(
        MenuCategory.business_id == scope.business_id
    )
    if parent_id is None:
        query = query.filter(MenuCategory.parent_id.is_(None))
    else:
        query = query.filter(MenuCategory.parent_id == parent_id)
    current = query.scalar()
    return 0 if current is None else current + 1


# ============================================================================
# Create / Read
# ============================================================================


def create_category(
    scope: TenantScope,
    name: str,
    parent_id: Optional[int] = None,
    description: Optional[str] = None,
    sort_order: Optional[int] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Create a root or child category.

    Args:
        scope: Owning business
        name: Category name (required, trimmed)
        parent_id: Root category to nest under, or None for a new root
        description: Optional description
        sort_order: Position among siblings (default: after the last sibling)
        session: Optional database session

    Returns:
        Dict[str, Any]: Created category as dictionary

    Raises:
        ValidationError: If name is blank
        CategoryNotFound: If parent_id is not a category of this business
        CategoryHierarchyError: If the parent is itself a child
    """
    if session is not None:
        return _create_category_impl(scope, name, parent_id, description, sort_order, session)
    with session_scope() as session:
        return _create_category_impl(scope, name, parent_id, description, sort_order, session)


def _create_category_impl(
    scope: TenantScope,
    name: str,
    parent_id: Optional[int],
    description: Optional[str],
    sort_order: Optional[int],
    session: Session,
) -> Dict[str, Any]:
    """Implementation of create_category."""
    cleaned = _clean_name(name)
    _validate_parent(scope, parent_id, session)

    if sort_order is None:
        sort_order = _next_sort_order(scope, parent_id, session)

    category = MenuCategory(
        business_id=scope.business_id,
        name=cleaned,
        description=description,
        parent_id=parent_id,
        sort_order=sort_order,
        is_active=True,
    )
    session.add(category)
    session.flush()

    log_operation(
        logger,
        operation="create_category",
        outcome="success",
        business_id=scope.business_id,
        category_id=category.id,
        parent_id=parent_id,
    )
    return category.to_dict()


def get_category(
    scope: TenantScope, category_id: int, session: Optional[Session] = None
) -> Dict[str, Any]:
    """Get one category with its children.

    Raises:
        CategoryNotFound: If the category is not in this business
    """
    if session is not None:
        return _get_category_or_raise(scope, category_id, session).to_dict(True)
    with session_scope() as session:
        return _get_category_or_raise(scope, category_id, session).to_dict(True)


def get_category_tree(scope: TenantScope, session: Optional[Session] = None) -> List[Dict[str, Any]]:
    """Get the business's root categories, each with its ordered children.

    Returns:
        List of root category dicts ordered by sort_order then id; each has a
        "children" list in the same order
    """
    if session is not None:
        return _get_category_tree_impl(scope, session)
    with session_scope() as session:
        return _get_category_tree_impl(scope, session)


def _get_category_tree_impl(scope: TenantScope, session: Session) -> List[Dict[str, Any]]:
    """Implementation of get_category_tree."""
    categories = (
        session.query(MenuCategory)
        .filter(MenuCategory.business_id == scope.business_id)
        .order_by(MenuCategory.sort_order, MenuCategory.id)
        .all()
    )

    tree = []
    children: Dict[int, List[Dict[str, Any]]] = {}
    for category in categories:
        if category.parent_id is None:
            tree.append(category.to_dict())
        else:
            children.setdefault(category.parent_id, []).append(category.to_dict())

    for root in tree:
        root["children"] = children.get(root["id"], [])
    return tree


# ============================================================================
# Update / Delete
# ============================================================================


def update_category(
    scope: TenantScope,
    category_id: int,
    name: str,
    description: Optional[str] = None,
    is_active: bool = True,
    parent_id: Optional[int] = None,
    session: Optional[Session] = None,
) -> Dict[str, Any]:
    """Replace a category's editable fields.

    ``parent_id=None`` makes the category a root.

    Raises:
        CategoryNotFound: If the category or the new parent is not in this business
        CategoryHierarchyError: If the move would self-parent, nest under a
            child, or push existing children to a third level
        ValidationError: If name is blank
    """
    if session is not None:
        return _update_category_impl(
            scope, category_id, name, description, is_active, parent_id, session
        )
    with session_scope() as session:
        return _update_category_impl(
            scope, category_id, name, description, is_active, parent_id, session
        )


def _update_category_impl(
    scope: TenantScope,
    category_id: int,
    name: str,
    description: Optional[str],
    is_active: bool,
    parent_id: Optional[int],
    session: Session,
) -> Dict[str, Any]:
    """Implementation of update_category."""
    category = _get_category_or_raise(scope, category_id, session)
    cleaned = _clean_name(name)
    _validate_parent(scope, parent_id, session, category_id=category_id)

    if parent_id is not None and category.children:
        raise CategoryHierarchyError(ERROR_HAS_CHILDREN, category_id)

    category.name = cleaned
    category.description = description
    category.is_active = is_active
    category.parent_id = parent_id

    session.flush()
    return category.to_dict()


def delete_category(scope: TenantScope, category_id: int, session: Optional[Session] = None) -> bool:
    """Delete a category and its children.

    Items in deleted categories are kept and become uncategorized.

    Raises:
        CategoryNotFound: If the category is not in this business
    """
    if session is not None:
        return _delete_category_impl(scope, category_id, session)
    with session_scope() as session:
        return _delete_category_impl(scope, category_id, session)


def _delete_category_impl(scope: TenantScope, category_id: int, session: Session) -> bool:
    """Implementation of delete_category."""
    category = _get_category_or_raise(scope, category_id, session)
    session.delete(category)
    session.flush()

    log_operation(
        logger,
        operation="delete_category",
        outcome="success",
        business_id=scope.business_id,
        category_id=category_id,
    )
    return True


def reorder_categories(
    scope: TenantScope, ordered_ids: List[int], session: Optional[Session] = None
) -> List[Dict[str, Any]]:
    """Set each category's sort_order to its position in ordered_ids.

    Raises:
        CategoryNotFound: If any ID is not a category of this business
    """
    if session is not None:
        return _reorder_categories_impl(scope, ordered_ids, session)
    with session_scope() as session:
        return _reorder_categories_impl(scope, ordered_ids, session)


def _reorder_categories_impl(
    scope: TenantScope, ordered_ids: List[int], session: Session
) -> List[Dict[str, Any]]:
    """Implementation of reorder_categories."""
    categories = [_get_category_or_raise(scope, cid, session) for cid in ordered_ids]
    for position, category in enumerate(categories):
        category.sort_order = position
    session.flush()
    return [c.to_dict() for c in categories]
