"""Tests for database setup and schema upgrades."""

from sqlalchemy import inspect, text

from hotel_menu.services.database import (
    create_database_engine,
    init_database,
    session_scope,
    upgrade_menu_schema,
)
from hotel_menu.services.menu_import import CapabilitySet, SchemaInspectorProbe, import_menu


class TestUpgradeMenuSchema:
    """Tests for upgrade_menu_schema()."""

    def test_legacy_schema_is_upgraded(self, legacy_db, db_engine, scope):
        """Test the original schema gains every optional feature."""
        legacy_db.remove()
        applied = upgrade_menu_schema(db_engine)

        assert applied == [
            "created table menu_item_variants",
            "added column menu_items.is_veg",
        ]
        with session_scope() as session:
            assert SchemaInspectorProbe().probe(session) == CapabilitySet.full()

    def test_existing_rows_default_to_veg(self, legacy_db, db_engine, scope):
        """Test rows that predate is_veg read as vegetarian."""
        import_menu(scope.business_id, "category,name,price_npr\nPizza,Margherita,700\n")
        legacy_db.remove()

        upgrade_menu_schema(db_engine)

        with db_engine.connect() as conn:
            assert conn.execute(text("SELECT is_veg FROM menu_items")).scalar() == 1

    def test_variant_veg_column_is_added(self, pre_variant_veg_db, db_engine):
        """Test an existing variants table gains is_veg."""
        pre_variant_veg_db.remove()
        applied = upgrade_menu_schema(db_engine)
        assert "added column menu_item_variants.is_veg" in applied
        columns = {c["name"] for c in inspect(db_engine).get_columns("menu_item_variants")}
        assert "is_veg" in columns

    def test_current_schema_needs_nothing(self, test_db, db_engine):
        """Test an up-to-date schema is left alone."""
        assert upgrade_menu_schema(db_engine) == []


class TestEngineSetup:
    """Tests for engine creation and table setup."""

    def test_init_database_creates_tables(self):
        """Test init_database creates all menu tables."""
        engine = create_database_engine("sqlite:///:memory:")
        init_database(engine)
        tables = set(inspect(engine).get_table_names())
        assert {"menu_categories", "menu_items", "menu_item_variants"} <= tables
        engine.dispose()

    def test_sqlite_foreign_keys_enabled(self):
        """Test SQLite connections enforce foreign keys."""
        engine = create_database_engine("sqlite:///:memory:")
        with engine.connect() as conn:
            assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1
        engine.dispose()
