"""Tests for the simulated and live catalog stores."""

import pytest
from sqlalchemy import text

from hotel_menu.models import MenuCategory, MenuItem, MenuItemVariant
from hotel_menu.services.exceptions import CatalogStoreError
from hotel_menu.services.menu_import.capability_probe import CapabilitySet
from hotel_menu.services.menu_import.catalog_store import (
    CatalogSnapshot,
    CategoryRecord,
    InMemorySimulatedStore,
    ItemRecord,
    LiveCommittedStore,
    VariantRecord,
    load_catalog_snapshot,
)
from hotel_menu.services.tenant import TenantScope


@pytest.fixture
def seeded(test_db, scope, other_scope):
    """Two businesses with overlapping names."""
    session = test_db()
    pizza = MenuCategory(business_id=scope.business_id, name="Pizza", sort_order=3)
    classic = MenuCategory(business_id=scope.business_id, name="Classic", sort_order=0)
    classic.parent = pizza
    other_pizza = MenuCategory(business_id=other_scope.business_id, name="Pizza", sort_order=0)
    session.add_all([pizza, classic, other_pizza])
    session.flush()

    margherita = MenuItem(
        business_id=scope.business_id, category_id=classic.id, name="Margherita", price_npr=700
    )
    other_item = MenuItem(
        business_id=other_scope.business_id,
        category_id=other_pizza.id,
        name="Margherita",
        price_npr=500,
    )
    session.add_all([margherita, other_item])
    session.flush()

    large = MenuItemVariant(menu_item_id=margherita.id, name="Large", price_npr=950)
    other_large = MenuItemVariant(menu_item_id=other_item.id, name="Large", price_npr=650)
    session.add_all([large, other_large])
    session.commit()

    return {
        "pizza": pizza.id,
        "classic": classic.id,
        "other_pizza": other_pizza.id,
        "margherita": margherita.id,
        "other_item": other_item.id,
        "large": large.id,
        "other_large": other_large.id,
    }


class TestInMemorySimulatedStore:
    """Tests for the dry-run store."""

    @pytest.fixture
    def store(self, scope):
        """Simulated store seeded with Pizza / Classic / Margherita / Large."""
        snapshot = CatalogSnapshot(
            business_id=scope.business_id,
            categories=[
                CategoryRecord(id=1, name="Pizza", parent_id=None, sort_order=4),
                CategoryRecord(id=2, name="Classic", parent_id=1, sort_order=0),
            ],
            items=[ItemRecord(id=10, category_id=2, name="Margherita")],
            variants=[VariantRecord(id=20, menu_item_id=10, name="Large")],
        )
        return InMemorySimulatedStore(snapshot)

    def test_finds_seeded_records_case_insensitively(self, store, scope):
        """Test lookups ignore case and padding."""
        assert store.find_category(scope, None, " PIZZA ").id == 1
        assert store.find_category(scope, 1, "classic").id == 2
        assert store.find_item(scope, 2, "margherita").id == 10
        assert store.find_variant(scope, 10, "LARGE").id == 20

    def test_lookup_respects_parent(self, store, scope):
        """Test a child is not found among roots."""
        assert store.find_category(scope, None, "Classic") is None

    def test_other_business_sees_nothing(self, store, other_scope):
        """Test a snapshot only answers for its own business."""
        assert store.find_category(other_scope, None, "Pizza") is None
        assert store.find_item(other_scope, 2, "Margherita") is None
        assert store.max_category_sort_order(other_scope, None) == -1

    def test_synthetic_ids_share_one_counter(self, store, scope):
        """Test created records get new-N ids from a single counter."""
        category = store.create_category(scope, "Drinks", None, 5)
        item = store.insert_item(scope, category.id, {"name": "Lassi", "price_npr": 150})
        variant = store.insert_variant(scope, item.id, {"name": "Sweet", "price_npr": 150})
        assert [category.id, item.id, variant.id] == ["new-1", "new-2", "new-3"]

    def test_created_records_are_found(self, store, scope):
        """Test records created during the run are visible to later lookups."""
        category = store.create_category(scope, "Drinks", None, 5)
        assert store.find_category(scope, None, "drinks") is category
        assert store.max_category_sort_order(scope, None) == 5
        assert store.max_category_sort_order(scope, category.id) == -1

    def test_max_sort_order_from_snapshot(self, store, scope):
        """Test max sort order per parent, -1 when empty."""
        assert store.max_category_sort_order(scope, None) == 4
        assert store.max_category_sort_order(scope, 1) == 0

    def test_first_by_id_wins_for_duplicate_names(self, scope):
        """Test the lowest id wins among same-named categories."""
        snapshot = CatalogSnapshot(
            business_id=scope.business_id,
            categories=[
                CategoryRecord(id=7, name="pizza"),
                CategoryRecord(id=3, name="Pizza"),
            ],
        )
        store = InMemorySimulatedStore(snapshot)
        assert store.find_category(scope, None, "PIZZA").id == 3

    def test_pending_values_track_updates(self, store, scope):
        """Test updates are recorded, not applied."""
        store.update_item(scope, 10, {"price_npr": 800})
        assert store.pending_values(10) == {"price_npr": 800}


class TestLiveCommittedStore:
    """Tests for the database-backed store."""

    def test_find_category_is_scoped(self, test_db, seeded, scope, other_scope):
        """Test category lookups stay inside the business."""
        store = LiveCommittedStore(test_db())
        assert store.find_category(scope, None, "pizza").id == seeded["pizza"]
        assert store.find_category(other_scope, None, "pizza").id == seeded["other_pizza"]
        assert store.find_category(scope, seeded["pizza"], "CLASSIC").id == seeded["classic"]
        assert store.find_category(scope, None, "Classic") is None

    def test_max_category_sort_order(self, test_db, seeded, scope):
        """Test max sort order reads the database."""
        store = LiveCommittedStore(test_db())
        assert store.max_category_sort_order(scope, None) == 3
        assert store.max_category_sort_order(scope, seeded["classic"]) == -1

    def test_create_category_returns_real_id(self, test_db, scope):
        """Test created categories get database ids."""
        session = test_db()
        store = LiveCommittedStore(session)
        record = store.create_category(scope, "Drinks", None, 0)
        store.commit_row()

        category = session.get(MenuCategory, record.id)
        assert category.name == "Drinks"
        assert category.business_id == scope.business_id
        assert category.is_active is True

    def test_find_variant_is_scoped_through_item(self, test_db, seeded, scope, other_scope):
        """Test variant lookups are scoped by the owning item's business."""
        store = LiveCommittedStore(test_db())
        assert store.find_variant(scope, seeded["margherita"], "large").id == seeded["large"]
        assert store.find_variant(other_scope, seeded["margherita"], "large") is None

    def test_update_item_ignores_other_business(self, test_db, seeded, other_scope):
        """Test an update with the wrong business changes nothing."""
        session = test_db()
        store = LiveCommittedStore(session)
        store.update_item(other_scope, seeded["margherita"], {"price_npr": 1})
        store.commit_row()
        assert session.get(MenuItem, seeded["margherita"]).price_npr == 700

    def test_update_variant_ignores_other_business(self, test_db, seeded, other_scope):
        """Test a variant update with the wrong business changes nothing."""
        session = test_db()
        store = LiveCommittedStore(session)
        store.update_variant(other_scope, seeded["large"], {"price_npr": 1})
        store.commit_row()
        assert session.get(MenuItemVariant, seeded["large"]).price_npr == 950

    def test_insert_item_omits_missing_columns(self, legacy_db, scope):
        """Test inserts work on the schema without is_veg."""
        session = legacy_db()
        store = LiveCommittedStore(session)
        category = store.create_category(scope, "Pizza", None, 0)
        item = store.insert_item(
            scope,
            category.id,
            {"name": "Margherita", "price_npr": 700, "is_available": True, "sort_order": 0},
        )
        store.commit_row()
        row = session.execute(
            text("SELECT name, price_npr FROM menu_items WHERE id = :id"), {"id": item.id}
        ).one()
        assert tuple(row) == ("Margherita", 700)

    def test_failures_raise_catalog_store_error(self, legacy_db, scope):
        """Test database errors come back as CatalogStoreError."""
        store = LiveCommittedStore(legacy_db())
        with pytest.raises(CatalogStoreError) as exc_info:
            store.find_variant(scope, 1, "Large")
        assert exc_info.value.operation == "find_variant"
        assert "menu_item_variants" in exc_info.value.detail
        store.rollback_row()


class TestLoadCatalogSnapshot:
    """Tests for load_catalog_snapshot()."""

    def test_snapshot_is_scoped(self, test_db, seeded, scope):
        """Test the snapshot holds only the business's records."""
        snapshot = load_catalog_snapshot(test_db(), scope, CapabilitySet.full())
        assert snapshot.business_id == scope.business_id
        assert sorted(c.name for c in snapshot.categories) == ["Classic", "Pizza"]
        assert [i.id for i in snapshot.items] == [seeded["margherita"]]
        assert [v.id for v in snapshot.variants] == [seeded["large"]]

    def test_variants_skipped_without_table(self, legacy_db, scope):
        """Test no variants are read when the table is missing."""
        snapshot = load_catalog_snapshot(legacy_db(), scope, CapabilitySet.legacy())
        assert snapshot.variants == []

    def test_unknown_business_is_empty(self, test_db, seeded):
        """Test an unknown business gets an empty snapshot."""
        snapshot = load_catalog_snapshot(test_db(), TenantScope("nobody"), CapabilitySet.full())
        assert snapshot.categories == []
        assert snapshot.items == []
