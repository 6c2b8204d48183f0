"""
import_engine.writers - Chunk writers for every flush destination.

Two upsert strategies produce the same rows:

  native   SQLAlchemy's dialect insert with ON CONFLICT / ON DUPLICATE
           KEY UPDATE, executed as one executemany per chunk.
  raw      a generated multi-row INSERT ... VALUES (...), (...) text
           statement with bound parameters and the same conflict tail.

Both need the destination's unique key to exist.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Table, insert, select, text
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import Connection

from db.catalog import CatalogTables
from db.models import MediaGallery, PriceIndex, StockItem

EAV_KEY = ("attribute_id", "store_id")          # + link column
EAV_UPDATE = ("value",)

STOCK_TABLE = StockItem.__table__
STOCK_KEY = ("product_id", "stock_id")
STOCK_UPDATE = ("qty", "is_in_stock", "manage_stock",
                "min_qty", "min_sale_qty", "max_sale_qty")

PRICE_TABLE = PriceIndex.__table__
PRICE_KEY = ("entity_id", "customer_group_id", "website_id")
PRICE_UPDATE = ("price", "final_price", "min_price", "max_price", "tier_price")

GALLERY_TABLE = MediaGallery.__table__

_ON_CONFLICT_DIALECTS = {"sqlite": sqlite.insert, "postgresql": postgresql.insert}
_DUPLICATE_KEY_DIALECTS = {"mysql", "mariadb"}


class UnsupportedDialect(Exception):
    pass


# ── Generic upsert ─────────────────────────────────────────────────────

def upsert(
    conn: Connection,
    table: Table,
    params: list[dict],
    keys: tuple,
    updates: tuple,
    *,
    raw_sql: bool = False,
) -> int:
    """Insert-or-update *params* keyed by *keys*; return rows sent."""
    if not params:
        return 0
    if raw_sql:
        _upsert_raw(conn, table, params, keys, updates)
    else:
        _upsert_native(conn, table, params, keys, updates)
    return len(params)


def _upsert_native(conn, table, params, keys, updates) -> None:
    dialect = conn.dialect.name
    if dialect in _ON_CONFLICT_DIALECTS:
        stmt = _ON_CONFLICT_DIALECTS[dialect](table)
        stmt = stmt.on_conflict_do_update(
            index_elements=list(keys),
            set_={c: stmt.excluded[c] for c in updates},
        )
    elif dialect in _DUPLICATE_KEY_DIALECTS:
        stmt = mysql.insert(table)
        stmt = stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in updates})
    else:
        raise UnsupportedDialect(f"no native upsert for dialect {dialect!r}")
    conn.execute(stmt, params)


def _upsert_raw(conn, table, params, keys, updates) -> None:
    dialect = conn.dialect.name
    quote = conn.dialect.identifier_preparer.quote
    columns = list(params[0].keys())

    bind: dict[str, object] = {}
    groups = []
    for i, row in enumerate(params):
        names = []
        for j, col in enumerate(columns):
            name = f"p{i}_{j}"
            bind[name] = _raw_value(row[col], dialect)
            names.append(f":{name}")
        groups.append(f"({', '.join(names)})")

    sql = (f"INSERT INTO {quote(table.name)} "
           f"({', '.join(quote(c) for c in columns)}) VALUES {', '.join(groups)}")
    conn.execute(text(sql + _conflict_clause(dialect, quote, keys, updates)), bind)


def _conflict_clause(dialect: str, quote, keys, updates) -> str:
    if dialect in _ON_CONFLICT_DIALECTS:
        return (f" ON CONFLICT ({', '.join(quote(k) for k in keys)}) DO UPDATE SET "
                + ", ".join(f"{quote(c)}=excluded.{quote(c)}" for c in updates))
    if dialect == "mysql":
        return (" AS new ON DUPLICATE KEY UPDATE "
                + ", ".join(f"{quote(c)}=new.{quote(c)}" for c in updates))
    if dialect == "mariadb":
        # MariaDB has no row alias
        return (" ON DUPLICATE KEY UPDATE "
                + ", ".join(f"{quote(c)}=VALUES({quote(c)})" for c in updates))
    raise UnsupportedDialect(f"no raw upsert for dialect {dialect!r}")


def _raw_value(value, dialect: str):
    # Same text SQLAlchemy's DateTime type stores on SQLite
    if dialect == "sqlite" and isinstance(value, datetime):
        return value.strftime("%Y-%m-%d %H:%M:%S.%f")
    return value


# ── Destination writers ────────────────────────────────────────────────

def write_eav(conn: Connection, rows: list, *, tables: CatalogTables,
              backend_type: str, raw_sql: bool = False) -> int:
    link = tables.link_column
    params = [
        {link: r.link_id, "attribute_id": r.attribute_id,
         "store_id": r.store_id, "value": r.value}
        for r in rows
    ]
    return upsert(conn, tables.value_table(backend_type), params,
                  (link,) + EAV_KEY, EAV_UPDATE, raw_sql=raw_sql)


def write_stock(conn: Connection, rows: list, *, raw_sql: bool = False) -> int:
    return upsert(conn, STOCK_TABLE, [r.as_params() for r in rows],
                  STOCK_KEY, STOCK_UPDATE, raw_sql=raw_sql)


def write_price(conn: Connection, rows: list, *, raw_sql: bool = False) -> int:
    return upsert(conn, PRICE_TABLE, [r.as_params() for r in rows],
                  PRICE_KEY, PRICE_UPDATE, raw_sql=raw_sql)


def write_gallery(conn: Connection, rows: list, *, tables: CatalogTables) -> int:
    """
    Insert media rows plus their value_to_entity links.

    Paths already linked to the same product are left alone, so a
    re-import does not duplicate gallery entries.  Returns rows inserted.
    """
    link_table = tables.gallery_link
    link_col = link_table.c[tables.link_column]

    link_ids = sorted({r.link_id for r in rows})
    stmt = (
        select(link_col, GALLERY_TABLE.c.value)
        .select_from(GALLERY_TABLE)
        .join(link_table, link_table.c.value_id == GALLERY_TABLE.c.value_id)
        .where(link_col.in_(link_ids))
    )
    existing = {(int(link_id), value) for link_id, value in conn.execute(stmt)}

    links = []
    for r in rows:
        if (r.link_id, r.value) in existing:
            continue
        result = conn.execute(insert(GALLERY_TABLE).values(
            attribute_id=r.attribute_id, value=r.value,
            media_type=r.media_type, disabled=r.disabled,
        ))
        links.append({"value_id": result.inserted_primary_key[0],
                      tables.link_column: r.link_id})

    if links:
        conn.execute(insert(link_table), links)
    return len(links)
