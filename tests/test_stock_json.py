import pytest

from import_engine import StockItemInput, import_stock_json, run_import
from services import get_product


def test_updates_known_skus_and_skips_the_rest(store):
    run_import(store, "sku,qty\nA,1\nB,2\n")

    items = [
        StockItemInput(sku="A", qty=50, is_in_stock=1, min_sale_qty=2),
        StockItemInput(sku="GHOST", qty=1),
        StockItemInput(sku=""),
        StockItemInput(sku="B", is_in_stock=0),
    ]
    result = import_stock_json(store, items, batch_size=1)

    assert result.imported == 2
    assert result.skipped == 2
    assert result.warnings == ("sku=GHOST: product not found", "empty sku, skipping")

    a = get_product(store, "A")["stock"][0]
    assert (a["qty"], a["is_in_stock"], a["min_sale_qty"]) == (50, 1, 2)
    b = get_product(store, "B")["stock"][0]
    assert (b["qty"], b["is_in_stock"]) == (0, 0)


def test_never_creates_products(store):
    result = import_stock_json(store, [StockItemInput(sku="NEW", qty=3)])
    assert result.imported == 0
    assert get_product(store, "NEW") is None


def test_works_under_row_linkage(row_store):
    run_import(row_store, "sku\nR1\n")
    result = import_stock_json(row_store, [StockItemInput(sku="R1", qty=4)])

    assert result.imported == 1
    assert get_product(row_store, "R1")["stock"][0]["qty"] == 4


def test_from_dict_validates_types():
    item = StockItemInput.from_dict({"sku": " A ", "qty": 3, "is_in_stock": True})
    assert item == StockItemInput(sku="A", qty=3.0, is_in_stock=1)

    with pytest.raises(ValueError, match="qty"):
        StockItemInput.from_dict({"sku": "A", "qty": "three"})
    with pytest.raises(ValueError, match="is_in_stock"):
        StockItemInput.from_dict({"sku": "A", "is_in_stock": -1})
    with pytest.raises(ValueError):
        StockItemInput.from_dict(["A"])


@pytest.mark.parametrize("qty", [1e8, -1e9, 10**400, float("nan"), float("inf")])
def test_from_dict_rejects_unstorable_qty(qty):
    with pytest.raises(ValueError, match="qty out of range"):
        StockItemInput.from_dict({"sku": "A", "qty": qty})
