"""
Database connection and session management for the hotel menu catalog.

This module provides:
- Database engine creation and configuration
- Session factory for database operations
- Database initialization (create tables)
- Schema upgrades for deployments that predate optional menu features
- SQLite pragmas (foreign keys, WAL)
"""

import logging
import sqlite3
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models.base import Base
from ..utils.config import get_config

logger = logging.getLogger(__name__)

# Global engine and session factory
_engine: Optional[Engine] = None
_SessionFactory: Optional[sessionmaker] = None


@event.listens_for(Engine, "connect")
def _set_sqlite_pragma(dbapi_connection, connection_record):
    """
    Set SQLite pragmas on connection.

    Foreign keys must be on for ON DELETE CASCADE / SET NULL to apply.
    Non-SQLite connections are left alone.
    """
    if not isinstance(dbapi_connection, sqlite3.Connection):
        return

    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


def create_database_engine(database_url: Optional[str] = None, echo: bool = False) -> Engine:
    """
    Create and configure the database engine.

    Args:
        database_url: Optional database URL. If None, uses config default.
        echo: If True, log all SQL statements (useful for debugging)

    Returns:
        Configured SQLAlchemy Engine
    """
    config = get_config()
    if database_url is None:
        if config.uses_default_sqlite:
            config.ensure_directories()
        database_url = config.database_url

    logger.info(f"Creating database engine: {database_url}")

    if ":memory:" in database_url or "mode=memory" in database_url:
        # For in-memory databases (testing), use StaticPool
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False, "timeout": config.db_timeout},
        )
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def init_database(engine: Optional[Engine] = None) -> None:
    """
    Initialize the database by creating all tables.

    Safe to call multiple times - existing tables won't be recreated. Existing
    tables are not altered either; use upgrade_menu_schema() for that.

    Args:
        engine: Optional engine to use. If None, uses global engine.
    """
    if engine is None:
        engine = get_engine()

    logger.info("Initializing database tables")
    # Import all models to ensure they're registered with Base
    from .. import models  # noqa: F401

    Base.metadata.create_all(engine)
    logger.info("Database tables initialized successfully")


def upgrade_menu_schema(engine: Optional[Engine] = None) -> List[str]:
    """
    Bring an older database up to the current menu schema.

    Creates missing tables (including menu_item_variants) and adds the
    optional is_veg columns where they are absent. Existing data is kept.

    Args:
        engine: Optional engine to use. If None, uses global engine.

    Returns:
        Human-readable list of the steps that were applied (empty if none)
    """
    if engine is None:
        engine = get_engine()

    from .. import models  # noqa: F401

    inspector = inspect(engine)
    existing_tables = set(inspector.get_table_names())
    applied: List[str] = []

    missing = [t for t in Base.metadata.sorted_tables if t.name not in existing_tables]
    if missing:
        Base.metadata.create_all(engine, tables=missing)
        applied.extend(f"created table {t.name}" for t in missing)

    # Tables created just now already have every column
    true_literal = "1" if engine.dialect.name == "sqlite" else "true"
    column_steps = [
        ("menu_items", "is_veg", f"BOOLEAN NOT NULL DEFAULT {true_literal}"),
        ("menu_item_variants", "is_veg", "BOOLEAN"),
    ]
    with engine.begin() as conn:
        for table, column, ddl in column_steps:
            if table not in existing_tables:
                continue
            columns = {c["name"].lower() for c in inspector.get_columns(table)}
            if column in columns:
                continue
            conn.execute(text(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}"))
            applied.append(f"added column {table}.{column}")

    for step in applied:
        logger.info(f"Schema upgrade: {step}")
    return applied


def get_engine() -> Engine:
    """
    Get the global database engine, creating it on first use.

    Returns:
        Database engine
    """
    global _engine

    if _engine is None:
        _engine = create_database_engine()

    return _engine


def get_session_factory() -> sessionmaker:
    """
    Get the global session factory.

    Returns:
        Session factory (sessionmaker)
    """
    global _SessionFactory

    if _SessionFactory is None:
        engine = get_engine()
        _SessionFactory = sessionmaker(bind=engine, expire_on_commit=False)

    return _SessionFactory


def get_session() -> Session:
    """
    Create a new database session.

    Returns:
        New Session instance
    """
    session_factory = get_session_factory()
    return session_factory()


@contextmanager
def session_scope():
    """
    Provide a transactional scope for database operations.

    This context manager handles session lifecycle automatically:
    - Creates a new session
    - Commits on success
    - Rolls back on exception
    - Always closes the session

    Yields:
        Database session

    Example:
        with session_scope() as session:
            session.add(MenuCategory(business_id="b-1", name="Pizza"))
            # Commit happens automatically if no exception
    """
    session = get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
