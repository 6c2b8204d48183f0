import pytest

from db import LinkageScheme
from import_engine import ImportOptions, run_import
from import_engine import writers
from services import get_product, product_to_json

FIRST = (
    "sku,name,description,price,status,special_from_date,qty,is_in_stock,"
    "price_index,final_price,image\n"
    "A,Alpha,Long text,9.5,1,2024-01-02 03:04:05,7,1,9.5,8,a.jpg\n"
    "B,Beta,,12,2,2024-02-03,0,0,12,,b.jpg|b2.jpg\n"
)
SECOND = (
    "sku,name,price,status,qty\n"
    "A,Alpha Two,10.25,0,3\n"
    "C,Gamma,1,1,1\n"
)


def _snapshot(store):
    return {sku: product_to_json(get_product(store, sku)) for sku in ("A", "B", "C")}


@pytest.mark.parametrize("linkage", [LinkageScheme.ENTITY_ID, LinkageScheme.ROW_ID],
                         ids=["entity_id", "row_id"])
def test_raw_and_native_writes_are_equivalent(make_store, linkage):
    native = make_store(linkage, name="native")
    raw = make_store(linkage, name="raw")

    for csv in (FIRST, SECOND):
        r_native = run_import(native, csv, ImportOptions(raw_sql=False))
        r_raw = run_import(raw, csv, ImportOptions(raw_sql=True))
        assert r_native.eav_counts == r_raw.eav_counts
        assert r_native.warnings == r_raw.warnings
        assert (r_native.created, r_native.updated) == (r_raw.created, r_raw.updated)

    assert _snapshot(native) == _snapshot(raw)


def test_raw_mode_datetime_round_trips(store):
    run_import(store, "sku,special_from_date\nA,2024-05-06 07:08:09\n",
               ImportOptions(raw_sql=True))
    value = get_product(store, "A")["attributes"]["special_from_date"]
    assert value.as_str() == "2024-05-06 07:08:09"


# ── Conflict clauses ───────────────────────────────────────────────────

def _quote(name):
    return f"`{name}`"


def test_mysql_upsert_uses_row_alias():
    clause = writers._conflict_clause("mysql", _quote, ("entity_id",), ("value", "qty"))
    assert clause == " AS new ON DUPLICATE KEY UPDATE `value`=new.`value`, `qty`=new.`qty`"


def test_mariadb_upsert_keeps_values_function():
    clause = writers._conflict_clause("mariadb", _quote, ("entity_id",), ("value",))
    assert clause == " ON DUPLICATE KEY UPDATE `value`=VALUES(`value`)"


def test_sqlite_upsert_names_the_conflict_target():
    clause = writers._conflict_clause("sqlite", _quote, ("entity_id", "store_id"), ("value",))
    assert clause == (" ON CONFLICT (`entity_id`, `store_id`) DO UPDATE SET "
                      "`value`=excluded.`value`")


def test_unknown_dialect_has_no_raw_upsert():
    with pytest.raises(writers.UnsupportedDialect, match="oracle"):
        writers._conflict_clause("oracle", _quote, ("id",), ("value",))
