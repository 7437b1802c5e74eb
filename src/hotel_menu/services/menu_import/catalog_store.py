"""
Catalog stores: the persistence boundary of the import engine.

The resolver talks to a ``CatalogStore`` and never knows whether it is
previewing or importing. Two implementations exist:

- ``InMemorySimulatedStore``: seeded from a ``CatalogSnapshot`` read at the
  start of the call. Creates hand out synthetic ``new-<n>`` IDs and nothing is
  written. Used for dry runs.
- ``LiveCommittedStore``: lookups and writes go to the database through a
  SQLAlchemy session and return real IDs. Each row is committed on its own.

Both match names case-insensitively and, when several stored records share a
natural key, use the one with the lowest ID. Keeping those rules identical is
what makes dry-run counts equal real-run counts.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotel_menu.models import MenuCategory, MenuItem, MenuItemVariant
from hotel_menu.services.exceptions import CatalogStoreError
from hotel_menu.services.tenant import TenantScope
from hotel_menu.utils.validators import natural_key

from .capability_probe import CapabilitySet

CatalogId = Union[int, str]

categories_table = MenuCategory.__table__
items_table = MenuItem.__table__
variants_table = MenuItemVariant.__table__


# ============================================================================
# Records
# ============================================================================


@dataclass
class CategoryRecord:
    id: CatalogId
    name: str
    parent_id: Optional[CatalogId] = None
    sort_order: int = 0


@dataclass
class ItemRecord:
    id: CatalogId
    category_id: Optional[CatalogId]
    name: str


@dataclass
class VariantRecord:
    id: CatalogId
    menu_item_id: CatalogId
    name: str


@dataclass
class CatalogSnapshot:
    """One business's catalog keys as read at the start of an import."""

    business_id: str
    categories: List[CategoryRecord] = field(default_factory=list)
    items: List[ItemRecord] = field(default_factory=list)
    variants: List[VariantRecord] = field(default_factory=list)


# ============================================================================
# Interface
# ============================================================================


class CatalogStore(ABC):
    """Find/create/update operations the catalog resolver needs."""

    @abstractmethod
    def find_category(
        self, scope: TenantScope, parent_id: Optional[CatalogId], name: str
    ) -> Optional[CategoryRecord]:
        """Category under ``parent_id`` (None = root) whose name matches."""

    @abstractmethod
    def max_category_sort_order(self, scope: TenantScope, parent_id: Optional[CatalogId]) -> int:
        """Highest sort_order among the parent's children, -1 when there are none."""

    @abstractmethod
    def create_category(
        self, scope: TenantScope, name: str, parent_id: Optional[CatalogId], sort_order: int
    ) -> CategoryRecord:
        """Create an active category."""

    @abstractmethod
    def find_item(self, scope: TenantScope, category_id: CatalogId, name: str) -> Optional[ItemRecord]:
        """Item in ``category_id`` whose name matches."""

    @abstractmethod
    def insert_item(
        self, scope: TenantScope, category_id: CatalogId, values: Dict[str, Any]
    ) -> ItemRecord:
        """Insert an item in ``category_id`` with the given column values."""

    @abstractmethod
    def update_item(self, scope: TenantScope, item_id: CatalogId, values: Dict[str, Any]) -> None:
        """Overwrite the given column values of an item."""

    @abstractmethod
    def find_variant(
        self, scope: TenantScope, menu_item_id: CatalogId, name: str
    ) -> Optional[VariantRecord]:
        """Variant of ``menu_item_id`` whose name matches."""

    @abstractmethod
    def insert_variant(
        self, scope: TenantScope, menu_item_id: CatalogId, values: Dict[str, Any]
    ) -> VariantRecord:
        """Insert a variant of ``menu_item_id``."""

    @abstractmethod
    def update_variant(
        self, scope: TenantScope, variant_id: CatalogId, values: Dict[str, Any]
    ) -> None:
        """Overwrite the given column values of a variant."""

    def commit_row(self) -> None:
        """Make the current row's changes permanent."""

    def rollback_row(self) -> None:
        """Discard the current row's uncommitted changes."""


def _first_match(records: Sequence, name: str):
    key = natural_key(name)
    for record in records:
        if natural_key(record.name) == key:
            return record
    return None


# ============================================================================
# Simulated store (dry run)
# ============================================================================


class InMemorySimulatedStore(CatalogStore):
    """
    Catalog store backed by in-memory maps.

    Keys carry the business ID, so a lookup scoped to another business finds
    nothing even though the maps were seeded from a single snapshot.
    """

    SYNTHETIC_PREFIX = "new-"

    def __init__(self, snapshot: CatalogSnapshot):
        self._categories: Dict[Tuple[str, Optional[CatalogId], str], CategoryRecord] = {}
        self._category_sort: Dict[Tuple[str, Optional[CatalogId]], int] = {}
        self._items: Dict[Tuple[str, CatalogId, str], ItemRecord] = {}
        self._item_values: Dict[CatalogId, Dict[str, Any]] = {}
        self._variants: Dict[Tuple[str, CatalogId, str], VariantRecord] = {}
        self._variant_values: Dict[CatalogId, Dict[str, Any]] = {}
        self._variant_owner: Dict[CatalogId, str] = {}
        self._next_id = 0

        business_id = snapshot.business_id
        for category in sorted(snapshot.categories, key=_id_order):
            self._index_category(business_id, category)
        for item in sorted(snapshot.items, key=_id_order):
            if item.category_id is not None:
                self._items.setdefault(
                    (business_id, item.category_id, natural_key(item.name)), item
                )
        for variant in sorted(snapshot.variants, key=_id_order):
            self._variants.setdefault(
                (business_id, variant.menu_item_id, natural_key(variant.name)), variant
            )
            self._variant_owner[variant.id] = business_id

    def _index_category(self, business_id: str, category: CategoryRecord) -> None:
        self._categories.setdefault(
            (business_id, category.parent_id, natural_key(category.name)), category
        )
        sort_key = (business_id, category.parent_id)
        self._category_sort[sort_key] = max(
            self._category_sort.get(sort_key, -1), category.sort_order
        )

    def _allocate_id(self) -> str:
        self._next_id += 1
        return f"{self.SYNTHETIC_PREFIX}{self._next_id}"

    def find_category(self, scope, parent_id, name):
        return self._categories.get((scope.business_id, parent_id, natural_key(name)))

    def max_category_sort_order(self, scope, parent_id):
        return self._category_sort.get((scope.business_id, parent_id), -1)

    def create_category(self, scope, name, parent_id, sort_order):
        record = CategoryRecord(
            id=self._allocate_id(), name=name, parent_id=parent_id, sort_order=sort_order
        )
        self._index_category(scope.business_id, record)
        return record

    def find_item(self, scope, category_id, name):
        return self._items.get((scope.business_id, category_id, natural_key(name)))

    def insert_item(self, scope, category_id, values):
        record = ItemRecord(id=self._allocate_id(), category_id=category_id, name=values["name"])
        self._items[(scope.business_id, category_id, natural_key(record.name))] = record
        self._item_values[record.id] = dict(values)
        return record

    def update_item(self, scope, item_id, values):
        self._item_values.setdefault(item_id, {}).update(values)

    def find_variant(self, scope, menu_item_id, name):
        return self._variants.get((scope.business_id, menu_item_id, natural_key(name)))

    def insert_variant(self, scope, menu_item_id, values):
        record = VariantRecord(
            id=self._allocate_id(), menu_item_id=menu_item_id, name=values["name"]
        )
        self._variants[(scope.business_id, menu_item_id, natural_key(record.name))] = record
        self._variant_values[record.id] = dict(values)
        self._variant_owner[record.id] = scope.business_id
        return record

    def update_variant(self, scope, variant_id, values):
        if self._variant_owner.get(variant_id) == scope.business_id:
            self._variant_values.setdefault(variant_id, {}).update(values)

    def pending_values(self, entity_id: CatalogId) -> Dict[str, Any]:
        """Column values an import would write for a simulated item or variant."""
        if entity_id in self._item_values:
            return dict(self._item_values[entity_id])
        return dict(self._variant_values.get(entity_id, {}))


def _id_order(record) -> Tuple[int, Any]:
    # Real IDs are ints; keep them ahead of any synthetic string IDs
    return (0, record.id) if isinstance(record.id, int) else (1, str(record.id))


# ============================================================================
# Live store (real import)
# ============================================================================


class LiveCommittedStore(CatalogStore):
    """
    Catalog store that reads and writes through a SQLAlchemy session.

    Statements use Core against the model tables and only name the columns
    they are given, so optional columns the schema lacks are never touched.
    Every failure surfaces as CatalogStoreError.
    """

    def __init__(self, session: Session):
        self.session = session

    def _execute(self, operation: str, statement):
        try:
            return self.session.execute(statement)
        except SQLAlchemyError as exc:
            raise CatalogStoreError(operation, exc) from exc

    def find_category(self, scope, parent_id, name):
        stmt = select(
            categories_table.c.id,
            categories_table.c.name,
            categories_table.c.parent_id,
            categories_table.c.sort_order,
        ).where(categories_table.c.business_id == scope.business_id)
        if parent_id is None:
            stmt = stmt.where(categories_table.c.parent_id.is_(None))
        else:
            stmt = stmt.where(categories_table.c.parent_id == parent_id)
        rows = self._execute("find_category", stmt.order_by(categories_table.c.id)).all()
        match = _first_match(rows, name)
        if match is None:
            return None
        return CategoryRecord(
            id=match.id, name=match.name, parent_id=match.parent_id, sort_order=match.sort_order
        )

    def max_category_sort_order(self, scope, parent_id):
        stmt = select(func.max(categories_table.c.sort_order)).where(
            categories_table.c.business_id == scope.business_id
        )
        if parent_id is None:
            stmt = stmt.where(categories_table.c.parent_id.is_(None))
        else:
            stmt = stmt.where(categories_table.c.parent_id == parent_id)
        value = self._execute("max_category_sort_order", stmt).scalar()
        return -1 if value is None else value

    def create_category(self, scope, name, parent_id, sort_order):
        result = self._execute(
            "create_category",
            insert(categories_table).values(
                business_id=scope.business_id,
                name=name,
                parent_id=parent_id,
                sort_order=sort_order,
                is_active=True,
            ),
        )
        return CategoryRecord(
            id=result.inserted_primary_key[0],
            name=name,
            parent_id=parent_id,
            sort_order=sort_order,
        )

    def find_item(self, scope, category_id, name):
        stmt = (
            select(items_table.c.id, items_table.c.category_id, items_table.c.name)
            .where(
                items_table.c.business_id == scope.business_id,
                items_table.c.category_id == category_id,
            )
            .order_by(items_table.c.id)
        )
        match = _first_match(self._execute("find_item", stmt).all(), name)
        if match is None:
            return None
        return ItemRecord(id=match.id, category_id=match.category_id, name=match.name)

    def insert_item(self, scope, category_id, values):
        result = self._execute(
            "insert_item",
            insert(items_table).values(
                business_id=scope.business_id, category_id=category_id, **values
            ),
        )
        return ItemRecord(
            id=result.inserted_primary_key[0], category_id=category_id, name=values["name"]
        )

    def update_item(self, scope, item_id, values):
        self._execute(
            "update_item",
            update(items_table)
            .where(items_table.c.id == item_id, items_table.c.business_id == scope.business_id)
            .values(**values),
        )

    def find_variant(self, scope, menu_item_id, name):
        stmt = (
            select(variants_table.c.id, variants_table.c.menu_item_id, variants_table.c.name)
            .join(items_table, items_table.c.id == variants_table.c.menu_item_id)
            .where(
                items_table.c.business_id == scope.business_id,
                variants_table.c.menu_item_id == menu_item_id,
            )
            .order_by(variants_table.c.id)
        )
        match = _first_match(self._execute("find_variant", stmt).all(), name)
        if match is None:
            return None
        return VariantRecord(id=match.id, menu_item_id=match.menu_item_id, name=match.name)

    def insert_variant(self, scope, menu_item_id, values):
        result = self._execute(
            "insert_variant",
            insert(variants_table).values(menu_item_id=menu_item_id, **values),
        )
        return VariantRecord(
            id=result.inserted_primary_key[0], menu_item_id=menu_item_id, name=values["name"]
        )

    def update_variant(self, scope, variant_id, values):
        owned_items = select(items_table.c.id).where(
            items_table.c.business_id == scope.business_id
        )
        self._execute(
            "update_variant",
            update(variants_table)
            .where(
                variants_table.c.id == variant_id,
                variants_table.c.menu_item_id.in_(owned_items),
            )
            .values(**values),
        )

    def commit_row(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            raise CatalogStoreError("commit", exc) from exc

    def rollback_row(self) -> None:
        self.session.rollback()


def load_catalog_snapshot(
    session: Session, scope: TenantScope, capabilities: CapabilitySet
) -> CatalogSnapshot:
    """
    Read the natural keys of one business's catalog.

    Variants are read only when the variant table exists.

    Raises:
        CatalogStoreError: The catalog could not be read
    """
    store = LiveCommittedStore(session)
    snapshot = CatalogSnapshot(business_id=scope.business_id)

    category_rows = store._execute(
        "load_categories",
        select(
            categories_table.c.id,
            categories_table.c.name,
            categories_table.c.parent_id,
            categories_table.c.sort_order,
        )
        .where(categories_table.c.business_id == scope.business_id)
        .order_by(categories_table.c.id),
    ).all()
    snapshot.categories = [
        CategoryRecord(id=r.id, name=r.name, parent_id=r.parent_id, sort_order=r.sort_order)
        for r in category_rows
    ]

    item_rows = store._execute(
        "load_items",
        select(items_table.c.id, items_table.c.category_id, items_table.c.name)
        .where(items_table.c.business_id == scope.business_id)
        .order_by(items_table.c.id),
    ).all()
    snapshot.items = [ItemRecord(id=r.id, category_id=r.category_id, name=r.name) for r in item_rows]

    if capabilities.variants:
        variant_rows = store._execute(
            "load_variants",
            select(variants_table.c.id, variants_table.c.menu_item_id, variants_table.c.name)
            .join(items_table, items_table.c.id == variants_table.c.menu_item_id)
            .where(items_table.c.business_id == scope.business_id)
            .order_by(variants_table.c.id),
        ).all()
        snapshot.variants = [
            VariantRecord(id=r.id, menu_item_id=r.menu_item_id, name=r.name) for r in variant_rows
        ]

    return snapshot
