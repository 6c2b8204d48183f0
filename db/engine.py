"""
db.engine - Engine bootstrap and the process's default CatalogStore.

Designed so the connection string can be swapped to MySQL/Postgres
by changing config.DB_URL; no other code needs to change.
"""

from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from db.catalog import catalog_tables
from db.linkage import LinkageScheme
from db.models import Base
from db.store import CatalogStore

_store: CatalogStore | None = None


def make_engine(db_url: str) -> Engine:
    """Create an engine; SQLite gets pragmas for concurrent writers."""
    if db_url.startswith("sqlite"):
        engine = create_engine(
            db_url, echo=False, future=True,
            connect_args={"check_same_thread": False, "timeout": 30},
        )

        @event.listens_for(engine, "connect")
        def _sqlite_pragmas(dbapi_conn, _rec):
            # Hand transaction control to SQLAlchemy (see _sqlite_begin)
            dbapi_conn.isolation_level = None
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA journal_mode=WAL")
            cur.execute("PRAGMA synchronous=NORMAL")
            cur.execute("PRAGMA busy_timeout=30000")
            cur.close()

        # Take the write lock up front; busy_timeout then queues writers
        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN IMMEDIATE")

        return engine

    return create_engine(db_url, echo=False, future=True,
                         pool_size=10, max_overflow=10, pool_pre_ping=True)


def create_schema(engine: Engine, linkage: LinkageScheme) -> None:
    """Emit CREATE TABLE for the fixed tables and one scheme's EAV tables."""
    Base.metadata.create_all(engine)
    catalog_tables(linkage).metadata.create_all(engine)


def init_db(
    db_url: str,
    *,
    linkage: LinkageScheme | None = None,
    create_tables: bool = False,
) -> CatalogStore:
    """
    Create the engine and the default store.

    *linkage* pins the scheme (skipping detection); *create_tables*
    emits CREATE TABLE for it (ENTITY_ID when not pinned).
    """
    global _store

    engine = make_engine(db_url)
    if create_tables:
        create_schema(engine, linkage or LinkageScheme.ENTITY_ID)
    _store = CatalogStore(engine, linkage=linkage)
    return _store


def get_store() -> CatalogStore:
    """Return the default store.  init_db() must have run."""
    if _store is None:
        raise RuntimeError("Database not initialised - call init_db() first")
    return _store
