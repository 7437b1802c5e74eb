"""Pytest configuration and fixtures for service layer tests."""

import pytest
from sqlalchemy import create_engine, text
from sqlalchemy.orm import scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

import hotel_menu.services.database as db_module
from hotel_menu.models.base import Base
from hotel_menu.services.tenant import TenantScope

# menu_items as first deployed: no is_veg column
LEGACY_MENU_ITEMS_DDL = """
CREATE TABLE menu_items (
    id INTEGER NOT NULL PRIMARY KEY,
    uuid VARCHAR(36) NOT NULL UNIQUE,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    business_id VARCHAR(36) NOT NULL,
    category_id INTEGER REFERENCES menu_categories (id) ON DELETE SET NULL,
    name VARCHAR(200) NOT NULL,
    price_npr INTEGER NOT NULL,
    description TEXT,
    image_url TEXT,
    is_available BOOLEAN NOT NULL,
    sort_order INTEGER NOT NULL
)
"""

# menu_item_variants before the variant is_veg override
PRE_VARIANT_VEG_DDL = """
CREATE TABLE menu_item_variants (
    id INTEGER NOT NULL PRIMARY KEY,
    uuid VARCHAR(36) NOT NULL UNIQUE,
    created_at DATETIME NOT NULL,
    updated_at DATETIME NOT NULL,
    menu_item_id INTEGER NOT NULL REFERENCES menu_items (id) ON DELETE CASCADE,
    name VARCHAR(200) NOT NULL,
    price_npr INTEGER NOT NULL,
    is_active BOOLEAN NOT NULL,
    sort_order INTEGER NOT NULL
)
"""


@pytest.fixture(scope="function")
def db_engine():
    """In-memory SQLite engine shared by every session of one test."""
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture(scope="function")
def test_db(db_engine):
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates all tables in the in-memory database
    2. Points the global session factory at it
    3. Drops all tables after the test completes
    """
    Base.metadata.create_all(db_engine)

    session_factory = sessionmaker(bind=db_engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    original_get_session = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(db_engine)

    db_module.get_session_factory = original_get_session


def _rebuild_legacy_tables(engine, variants_ddl=None):
    with engine.begin() as conn:
        conn.execute(text("DROP TABLE menu_item_variants"))
        conn.execute(text("DROP TABLE menu_items"))
        conn.execute(text(LEGACY_MENU_ITEMS_DDL))
        if variants_ddl is not None:
            conn.execute(text(variants_ddl))


@pytest.fixture(scope="function")
def legacy_db(test_db, db_engine):
    """Database with the original schema: no is_veg columns, no variants table."""
    _rebuild_legacy_tables(db_engine)
    return test_db


@pytest.fixture(scope="function")
def pre_variant_veg_db(test_db, db_engine):
    """Database with a variants table but no variant is_veg column.

    The item is_veg column is absent too, as on deployments that added
    variants before either veg migration.
    """
    _rebuild_legacy_tables(db_engine, PRE_VARIANT_VEG_DDL)
    return test_db


@pytest.fixture
def scope():
    """Tenant scope used by most tests."""
    return TenantScope("biz-1")


@pytest.fixture
def other_scope():
    """A second business, for isolation tests."""
    return TenantScope("biz-2")


@pytest.fixture
def write_csv(tmp_path):
    """Write CSV text to a temp file and return its path."""

    def _write(text, name="menu.csv", encoding="utf-8"):
        path = tmp_path / name
        path.write_text(text, encoding=encoding)
        return str(path)

    return _write
