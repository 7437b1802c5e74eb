"""Menu Item Service - CRUD for menu items and their variants.

Items and variants carry optional schema features (the item and variant
``is_veg`` columns and the whole variants table), so every call probes the
schema first and only reads or writes columns that exist. Statements go
through Core against the model tables for the same reason: an ORM load would
select every mapped column.

Variants have no business column of their own. They are scoped through the
owning item, so a variant of another business's item is never found.

Example Usage:
    >>> from hotel_menu.services.tenant import TenantScope
    >>> from hotel_menu.services.menu_item_service import create_item, create_variant
    >>>
    >>> scope = TenantScope("b-1")
    >>> item = create_item(scope, category_id=1, name="Margherita", price_npr=700)
    >>> variant = create_variant(scope, item["id"], "Large", 950)
    >>> variant["price_npr"]
    950
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hotel_menu.models import MenuCategory, MenuItem, MenuItemVariant
from hotel_menu.services.database import session_scope
from hotel_menu.services.exceptions import (
    CapabilityUnavailableError,
    CategoryNotFound,
    DatabaseError,
    MenuItemNotFound,
    ValidationError,
    VariantNotFound,
)
from hotel_menu.services.logging_utils import get_service_logger, log_operation
from hotel_menu.services.menu_import.capability_probe import (
    CapabilityProbe,
    CapabilitySet,
    SchemaInspectorProbe,
)
from hotel_menu.services.tenant import TenantScope
from hotel_menu.utils.error_messages import friendly_error
from hotel_menu.utils.validators import is_non_negative_int

logger = get_service_logger(__name__)

categories_table = MenuCategory.__table__
items_table = MenuItem.__table__
variants_table = MenuItemVariant.__table__

ITEM_FIELDS = {
    "category_id",
    "name",
    "price_npr",
    "description",
    "image_url",
    "is_available",
    "is_veg",
    "sort_order",
}
VARIANT_FIELDS = {"name", "price_npr", "is_active", "is_veg", "sort_order"}


# ============================================================================
# Helpers
# ============================================================================


def _capabilities(session: Session, probe: Optional[CapabilityProbe]) -> CapabilitySet:
    return (probe or SchemaInspectorProbe()).probe(session)


def _require_variants(capabilities: CapabilitySet) -> None:
    if not capabilities.variants:
        raise CapabilityUnavailableError("variants")


def _item_columns(capabilities: CapabilitySet) -> list:
    columns = [
        items_table.c.id,
        items_table.c.uuid,
        items_table.c.business_id,
        items_table.c.category_id,
        items_table.c.name,
        items_table.c.price_npr,
        items_table.c.description,
        items_table.c.image_url,
        items_table.c.is_available,
        items_table.c.sort_order,
    ]
    if capabilities.item_veg:
        columns.append(items_table.c.is_veg)
    return columns


def _variant_columns(capabilities: CapabilitySet) -> list:
    columns = [
        variants_table.c.id,
        variants_table.c.uuid,
        variants_table.c.menu_item_id,
        variants_table.c.name,
        variants_table.c.price_npr,
        variants_table.c.is_active,
        variants_table.c.sort_order,
    ]
    if capabilities.variant_veg:
        columns.append(variants_table.c.is_veg)
    return columns


def _validate_fields(values: Dict[str, Any]) -> None:
    errors = []
    if "name" in values:
        values["name"] = (values["name"] or "").strip()
        if not values["name"]:
            errors.append("Name is required")
    if "price_npr" in values and not is_non_negative_int(values["price_npr"]):
        errors.append("price_npr must be a non-negative integer")
    if "sort_order" in values and not is_non_negative_int(values["sort_order"]):
        errors.append("sort_order must be a non-negative integer")
    if errors:
        raise ValidationError(errors)


def _check_category(scope: TenantScope, category_id: Optional[int], session: Session) -> None:
    if category_id is None:
        return
    found = session.execute(
        select(categories_table.c.id).where(
            categories_table.c.id == category_id,
            categories_table.c.business_id == scope.business_id,
        )
    ).first()
    if found is None:
        raise CategoryNotFound(category_id)


def _execute_write(session: Session, operation: str, statement):
    try:
        return session.execute(statement)
    except IntegrityError as e:
        log_operation(
            logger,
            operation=operation,
            outcome="integrity_error",
            level=logging.WARNING,
            error=str(e.orig),
        )
        raise DatabaseError(friendly_error(str(e.orig)), e) from e


def _load_item(
    scope: TenantScope, item_id: int, capabilities: CapabilitySet, session: Session
) -> Dict[str, Any]:
    row = session.execute(
        select(*_item_columns(capabilities)).where(
            items_table.c.id == item_id, items_table.c.business_id == scope.business_id
        )
    ).first()
    if row is None:
        raise MenuItemNotFound(item_id)
    return dict(row._mapping)


def _load_variant(
    scope: TenantScope, variant_id: int, capabilities: CapabilitySet, session: Session
) -> Dict[str, Any]:
    row = session.execute(
        select(*_variant_columns(capabilities))
        .join(items_table, items_table.c.id == variants_table.c.menu_item_id)
        .where(
            variants_table.c.id == variant_id,
            items_table.c.business_id == scope.business_id,
        )
    ).first()
    if row is None:
        raise VariantNotFound(variant_id)
    return dict(row._mapping)


# ============================================================================
# Items
# ============================================================================


def list_items(
    scope: TenantScope,
    category_id: Optional[int] = None,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> List[Dict[str, Any]]:
    """List a business's items, optionally only those in one category.

    Returns:
        Item dicts ordered by sort_order then id
    """
    if session is not None:
        return _list_items_impl(scope, category_id, session, capability_probe)
    with session_scope() as session:
        return _list_items_impl(scope, category_id, session, capability_probe)


def _list_items_impl(
    scope: TenantScope,
    category_id: Optional[int],
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> List[Dict[str, Any]]:
    """Implementation of list_items."""
    capabilities = _capabilities(session, capability_probe)
    stmt = select(*_item_columns(capabilities)).where(
        items_table.c.business_id == scope.business_id
    )
    if category_id is not None:
        stmt = stmt.where(items_table.c.category_id == category_id)
    stmt = stmt.order_by(items_table.c.sort_order, items_table.c.id)
    return [dict(row._mapping) for row in session.execute(stmt)]


def get_item(
    scope: TenantScope,
    item_id: int,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> Dict[str, Any]:
    """Get one item.

    Raises:
        MenuItemNotFound: If the item is not in this business
    """
    if session is not None:
        return _load_item(scope, item_id, _capabilities(session, capability_probe), session)
    with session_scope() as session:
        return _load_item(scope, item_id, _capabilities(session, capability_probe), session)


def create_item(
    scope: TenantScope,
    category_id: Optional[int],
    name: str,
    price_npr: int,
    description: Optional[str] = None,
    image_url: Optional[str] = None,
    is_available: bool = True,
    is_veg: bool = True,
    sort_order: Optional[int] = None,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> Dict[str, Any]:
    """Create a menu item.

    ``is_veg`` is stored only when the column exists.

    Args:
        scope: Owning business
        category_id: Category of this business, or None for uncategorized
        name: Item name (required, trimmed)
        price_npr: Price in whole rupees (non-negative integer)
        description: Optional description
        image_url: Optional image URL
        is_available: Whether the item can be ordered
        is_veg: Vegetarian flag
        sort_order: Position in the category (default: after the last item)
        session: Optional database session
        capability_probe: Schema probe (default: inspect the live schema)

    Returns:
        Dict[str, Any]: Created item as dictionary

    Raises:
        ValidationError: If name is blank or price is invalid
        CategoryNotFound: If category_id is not a category of this business
    """
    values = {
        "category_id": category_id,
        "name": name,
        "price_npr": price_npr,
        "description": description,
        "image_url": image_url,
        "is_available": is_available,
        "is_veg": is_veg,
    }
    if sort_order is not None:
        values["sort_order"] = sort_order

    if session is not None:
        return _create_item_impl(scope, values, session, capability_probe)
    with session_scope() as session:
        return _create_item_impl(scope, values, session, capability_probe)


def _create_item_impl(
    scope: TenantScope,
    values: Dict[str, Any],
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> Dict[str, Any]:
    """Implementation of create_item."""
    capabilities = _capabilities(session, capability_probe)
    _validate_fields(values)
    _check_category(scope, values["category_id"], session)

    if not capabilities.item_veg:
        values.pop("is_veg")
    if "sort_order" not in values:
        current = session.execute(
            select(func.max(items_table.c.sort_order)).where(
                items_table.c.business_id == scope.business_id,
                items_table.c.category_id == values["category_id"],
            )
        ).scalar()
        values["sort_order"] = 0 if current is None else current + 1

    result = _execute_write(
        session,
        "create_item",
        insert(items_table).values(business_id=scope.business_id, **values),
    )
    item_id = result.inserted_primary_key[0]

    log_operation(
        logger,
        operation="create_item",
        outcome="success",
        business_id=scope.business_id,
        item_id=item_id,
    )
    return _load_item(scope, item_id, capabilities, session)


def update_item(
    scope: TenantScope,
    item_id: int,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Update item attributes.

    Args:
        scope: Owning business
        item_id: Item ID
        session: Optional database session
        capability_probe: Schema probe (default: inspect the live schema)
        **kwargs: Fields to update (name, price_npr, description, image_url,
            is_available, is_veg, sort_order, category_id). Unknown fields
            are ignored; is_veg is ignored when the column does not exist.

    Returns:
        Dict[str, Any]: Updated item as dictionary

    Raises:
        MenuItemNotFound: If the item is not in this business
        ValidationError: If a value is invalid
        CategoryNotFound: If a new category_id is not in this business
    """
    if session is not None:
        return _update_item_impl(scope, item_id, session, capability_probe, kwargs)
    with session_scope() as session:
        return _update_item_impl(scope, item_id, session, capability_probe, kwargs)


def _update_item_impl(
    scope: TenantScope,
    item_id: int,
    session: Session,
    capability_probe: Optional[CapabilityProbe],
    changes: Dict[str, Any],
) -> Dict[str, Any]:
    """Implementation of update_item."""
    capabilities = _capabilities(session, capability_probe)
    _load_item(scope, item_id, capabilities, session)

    values = {k: v for k, v in changes.items() if k in ITEM_FIELDS}
    if not capabilities.item_veg:
        values.pop("is_veg", None)
    _validate_fields(values)
    if "category_id" in values:
        _check_category(scope, values["category_id"], session)

    if values:
        _execute_write(
            session,
            "update_item",
            update(items_table)
            .where(items_table.c.id == item_id, items_table.c.business_id == scope.business_id)
            .values(**values),
        )
    return _load_item(scope, item_id, capabilities, session)


def delete_item(scope: TenantScope, item_id: int, session: Optional[Session] = None) -> bool:
    """Delete an item and its variants.

    Raises:
        MenuItemNotFound: If the item is not in this business
    """
    if session is not None:
        return _delete_item_impl(scope, item_id, session)
    with session_scope() as session:
        return _delete_item_impl(scope, item_id, session)


def _delete_item_impl(scope: TenantScope, item_id: int, session: Session) -> bool:
    """Implementation of delete_item."""
    result = session.execute(
        delete(items_table).where(
            items_table.c.id == item_id, items_table.c.business_id == scope.business_id
        )
    )
    if result.rowcount == 0:
        raise MenuItemNotFound(item_id)

    log_operation(
        logger,
        operation="delete_item",
        outcome="success",
        business_id=scope.business_id,
        item_id=item_id,
    )
    return True


def reorder_items(
    scope: TenantScope,
    category_id: Optional[int],
    ordered_ids: List[int],
    session: Optional[Session] = None,
) -> None:
    """Place the listed items in category_id, in list order.

    Each item's sort_order becomes its position in ordered_ids. Items dragged
    in from another category are moved into category_id.

    Raises:
        CategoryNotFound: If category_id is not a category of this business
        MenuItemNotFound: If an ID is not an item of this business
    """
    if session is not None:
        return _reorder_items_impl(scope, category_id, ordered_ids, session)
    with session_scope() as session:
        return _reorder_items_impl(scope, category_id, ordered_ids, session)


def _reorder_items_impl(
    scope: TenantScope, category_id: Optional[int], ordered_ids: List[int], session: Session
) -> None:
    """Implementation of reorder_items."""
    _check_category(scope, category_id, session)

    for position, item_id in enumerate(ordered_ids):
        result = session.execute(
            update(items_table)
            .where(
                items_table.c.id == item_id,
                items_table.c.business_id == scope.business_id,
            )
            .values(category_id=category_id, sort_order=position)
        )
        if result.rowcount == 0:
            raise MenuItemNotFound(item_id)


# ============================================================================
# Variants
# ============================================================================


def list_variants(
    scope: TenantScope,
    item_id: int,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> List[Dict[str, Any]]:
    """List an item's variants ordered by sort_order then id.

    Returns an empty list when the variants table does not exist.

    Raises:
        MenuItemNotFound: If the item is not in this business
    """
    if session is not None:
        return _list_variants_impl(scope, item_id, session, capability_probe)
    with session_scope() as session:
        return _list_variants_impl(scope, item_id, session, capability_probe)


def _list_variants_impl(
    scope: TenantScope,
    item_id: int,
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> List[Dict[str, Any]]:
    """Implementation of list_variants."""
    capabilities = _capabilities(session, capability_probe)
    _load_item(scope, item_id, capabilities, session)
    if not capabilities.variants:
        return []

    stmt = (
        select(*_variant_columns(capabilities))
        .where(variants_table.c.menu_item_id == item_id)
        .order_by(variants_table.c.sort_order, variants_table.c.id)
    )
    return [dict(row._mapping) for row in session.execute(stmt)]


def create_variant(
    scope: TenantScope,
    item_id: int,
    name: str,
    price_npr: int,
    is_active: bool = True,
    is_veg: Optional[bool] = None,
    sort_order: Optional[int] = None,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> Dict[str, Any]:
    """Create a variant of an item.

    ``is_veg`` is tri-state (None inherits the item's flag) and is stored
    only when the column exists.

    Raises:
        CapabilityUnavailableError: If the variants table does not exist
        MenuItemNotFound: If the item is not in this business
        ValidationError: If name is blank or price is invalid
    """
    values = {"name": name, "price_npr": price_npr, "is_active": is_active, "is_veg": is_veg}
    if sort_order is not None:
        values["sort_order"] = sort_order

    if session is not None:
        return _create_variant_impl(scope, item_id, values, session, capability_probe)
    with session_scope() as session:
        return _create_variant_impl(scope, item_id, values, session, capability_probe)


def _create_variant_impl(
    scope: TenantScope,
    item_id: int,
    values: Dict[str, Any],
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> Dict[str, Any]:
    """Implementation of create_variant."""
    capabilities = _capabilities(session, capability_probe)
    _require_variants(capabilities)
    _load_item(scope, item_id, capabilities, session)
    _validate_fields(values)

    if not capabilities.variant_veg:
        values.pop("is_veg")
    if "sort_order" not in values:
        current = session.execute(
            select(func.max(variants_table.c.sort_order)).where(
                variants_table.c.menu_item_id == item_id
            )
        ).scalar()
        values["sort_order"] = 0 if current is None else current + 1

    result = _execute_write(
        session,
        "create_variant",
        insert(variants_table).values(menu_item_id=item_id, **values),
    )
    return _load_variant(scope, result.inserted_primary_key[0], capabilities, session)


def update_variant(
    scope: TenantScope,
    variant_id: int,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
    **kwargs,
) -> Dict[str, Any]:
    """Update variant attributes (name, price_npr, is_active, is_veg, sort_order).

    Raises:
        CapabilityUnavailableError: If the variants table does not exist
        VariantNotFound: If the variant's item is not in this business
        ValidationError: If a value is invalid
    """
    if session is not None:
        return _update_variant_impl(scope, variant_id, session, capability_probe, kwargs)
    with session_scope() as session:
        return _update_variant_impl(scope, variant_id, session, capability_probe, kwargs)


def _update_variant_impl(
    scope: TenantScope,
    variant_id: int,
    session: Session,
    capability_probe: Optional[CapabilityProbe],
    changes: Dict[str, Any],
) -> Dict[str, Any]:
    """Implementation of update_variant."""
    capabilities = _capabilities(session, capability_probe)
    _require_variants(capabilities)
    _load_variant(scope, variant_id, capabilities, session)

    values = {k: v for k, v in changes.items() if k in VARIANT_FIELDS}
    if not capabilities.variant_veg:
        values.pop("is_veg", None)
    _validate_fields(values)

    if values:
        _execute_write(
            session,
            "update_variant",
            update(variants_table).where(variants_table.c.id == variant_id).values(**values),
        )
    return _load_variant(scope, variant_id, capabilities, session)


def delete_variant(
    scope: TenantScope,
    variant_id: int,
    session: Optional[Session] = None,
    capability_probe: Optional[CapabilityProbe] = None,
) -> bool:
    """Delete a variant.

    Raises:
        CapabilityUnavailableError: If the variants table does not exist
        VariantNotFound: If the variant's item is not in this business
    """
    if session is not None:
        return _delete_variant_impl(scope, variant_id, session, capability_probe)
    with session_scope() as session:
        return _delete_variant_impl(scope, variant_id, session, capability_probe)


def _delete_variant_impl(
    scope: TenantScope,
    variant_id: int,
    session: Session,
    capability_probe: Optional[CapabilityProbe],
) -> bool:
    """Implementation of delete_variant."""
    capabilities = _capabilities(session, capability_probe)
    _require_variants(capabilities)
    _load_variant(scope, variant_id, capabilities, session)
    session.execute(delete(variants_table).where(variants_table.c.id == variant_id))
    return True
