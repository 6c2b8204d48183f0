from sqlalchemy import insert, select

from db.catalog import VERSION_MAX, VERSION_MIN
from import_engine import ImportOptions, run_import
from services import get_product
from conftest import count_rows


def _preexisting(store, *entity_ids):
    """Insert product rows whose entity ids are ahead of their row ids."""
    product = store.tables.product
    with store.engine.begin() as conn:
        conn.execute(insert(product), [
            {"entity_id": eid, "sku": f"OLD-{eid}", "type_id": "simple",
             "attribute_set_id": 4, "created_in": VERSION_MIN, "updated_in": VERSION_MAX}
            for eid in entity_ids
        ])


def test_new_entities_link_to_their_own_rows(row_store):
    """Each attribute value resolves back to its own SKU, not a neighbour."""
    _preexisting(row_store, 100, 101)

    skus = [f"RV-{i}" for i in range(7)]
    csv = "sku,name\n" + "".join(f"{s},Name {s}\n" for s in skus)
    result = run_import(row_store, csv, ImportOptions(batch_size=3))
    assert result.created == 7

    tables = row_store.tables
    product, varchar = tables.product, tables.value_table("varchar")
    with row_store.engine.connect() as conn:
        linked = dict(conn.execute(
            select(varchar.c.value, product.c.sku)
            .join(product, product.c.row_id == varchar.c.row_id)
            .where(varchar.c.attribute_id == 73)
        ).all())

    assert linked == {f"Name {s}": s for s in skus}


def test_entity_ids_come_from_the_sequence(row_store):
    _preexisting(row_store, 100, 101)
    run_import(row_store, "sku\nA\nB\n")

    a, b = get_product(row_store, "A"), get_product(row_store, "B")
    assert (a["entity_id"], b["entity_id"]) == (102, 103)
    assert a["link_id"] == 3
    assert b["link_id"] == 4
    assert count_rows(row_store, row_store.tables.sequence) == 2


def test_new_rows_span_every_version(row_store):
    run_import(row_store, "sku\nA\n")

    product = row_store.tables.product
    with row_store.engine.connect() as conn:
        created_in, updated_in = conn.execute(
            select(product.c.created_in, product.c.updated_in)
            .where(product.c.sku == "A")
        ).one()
    assert (created_in, updated_in) == (VERSION_MIN, VERSION_MAX)


def test_satellites_use_the_row_id(row_store):
    _preexisting(row_store, 50)
    run_import(row_store, "sku,qty,image\nA,3,a.jpg\n")

    product = get_product(row_store, "A")
    assert product["link_id"] == 2
    assert product["stock"][0]["qty"] == 3
    assert [m["value"] for m in product["media"]] == ["a.jpg"]
    assert count_rows(row_store, row_store.tables.gallery_link, row_id=2) == 1
