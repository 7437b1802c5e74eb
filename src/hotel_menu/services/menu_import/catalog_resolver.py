"""
Catalog resolution for one import row.

For each valid row the resolver finds or creates the root category, then the
subcategory under it, then upserts the item and (optionally) its variant.
It works only through a ``CatalogStore``, so the same code drives both dry
runs and real imports.

Sort orders:
- New categories go after the highest sort_order among their siblings, using
  a running maximum kept per parent for the whole call.
- Items get a counter per category and variants a counter per item, both
  starting at 0 for each call and advanced by every row that touches them,
  inserts and updates alike. Re-importing a file therefore rewrites the
  order to match the file.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from hotel_menu.services.tenant import TenantScope

from .capability_probe import CapabilitySet
from .catalog_store import CatalogId, CatalogStore, CategoryRecord
from .row_parser import ImportRow


@dataclass
class RowOutcome:
    """What resolving one row did. Merged into the summary only if the row succeeds."""

    categories_created: int = 0
    item_inserted: bool = False
    item_updated: bool = False
    variant_inserted: bool = False
    variant_updated: bool = False
    warnings: List[str] = field(default_factory=list)


class CatalogResolver:
    """Resolve validated rows into category, item and variant writes."""

    def __init__(self, store: CatalogStore, scope: TenantScope, capabilities: CapabilitySet):
        self.store = store
        self.scope = scope
        self.capabilities = capabilities
        self._category_sort: Dict[Optional[CatalogId], int] = {}
        self._item_sort: Dict[CatalogId, int] = {}
        self._variant_sort: Dict[CatalogId, int] = {}

    def resolve(self, row: ImportRow) -> RowOutcome:
        """
        Apply one row to the store.

        Raises:
            CatalogStoreError: A store read or write failed
        """
        outcome = RowOutcome()

        target = self._resolve_category(None, row.category, outcome)
        if row.subcategory:
            target = self._resolve_category(target.id, row.subcategory, outcome)

        item_id = self._upsert_item(target.id, row, outcome)

        if row.variant_name:
            if self.capabilities.variants:
                self._upsert_variant(item_id, row, outcome)
            else:
                outcome.warnings.append(
                    f"Row {row.row_no}: variant columns were ignored because "
                    "the variants table is not available yet."
                )

        return outcome

    def _resolve_category(
        self, parent_id: Optional[CatalogId], name: str, outcome: RowOutcome
    ) -> CategoryRecord:
        existing = self.store.find_category(self.scope, parent_id, name)
        if existing is not None:
            return existing

        sort_order = self._next_category_sort(parent_id)
        created = self.store.create_category(self.scope, name, parent_id, sort_order)
        outcome.categories_created += 1
        return created

    def _next_category_sort(self, parent_id: Optional[CatalogId]) -> int:
        if parent_id not in self._category_sort:
            self._category_sort[parent_id] = self.store.max_category_sort_order(
                self.scope, parent_id
            )
        self._category_sort[parent_id] += 1
        return self._category_sort[parent_id]

    def _upsert_item(self, category_id: CatalogId, row: ImportRow, outcome: RowOutcome) -> CatalogId:
        sort_order = self._item_sort.get(category_id, 0)
        self._item_sort[category_id] = sort_order + 1

        values: Dict[str, Any] = {
            "name": row.name,
            "price_npr": row.price_npr,
            "description": row.description,
            "image_url": row.image_url,
            "is_available": True,
            "sort_order": sort_order,
        }
        if self.capabilities.item_veg:
            values["is_veg"] = row.is_veg

        existing = self.store.find_item(self.scope, category_id, row.name)
        if existing is not None:
            self.store.update_item(self.scope, existing.id, values)
            outcome.item_updated = True
            return existing.id

        created = self.store.insert_item(self.scope, category_id, values)
        outcome.item_inserted = True
        return created.id

    def _upsert_variant(self, item_id: CatalogId, row: ImportRow, outcome: RowOutcome) -> None:
        sort_order = self._variant_sort.get(item_id, 0)
        self._variant_sort[item_id] = sort_order + 1

        price = row.variant_price_npr if row.variant_price_npr is not None else row.price_npr
        values: Dict[str, Any] = {
            "name": row.variant_name,
            "price_npr": price,
            "sort_order": sort_order,
            "is_active": True,
        }
        if self.capabilities.variant_veg:
            # None means the variant inherits the item's flag
            values["is_veg"] = row.variant_is_veg

        existing = self.store.find_variant(self.scope, item_id, row.variant_name)
        if existing is not None:
            self.store.update_variant(self.scope, existing.id, values)
            outcome.variant_updated = True
            return

        self.store.insert_variant(self.scope, item_id, values)
        outcome.variant_inserted = True
