import io


def test_import_raw_body(client):
    resp = client.post("/api/v1/products/import", data="sku,name,qty\nA,Alpha,3\n",
                       content_type="text/csv")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["created"] == 1
    assert data["eav_counts"]["varchar"] == 1
    assert data["eav_counts"]["stock"] == 1
    assert "total_time_ms" in data


def test_import_multipart_with_options(client):
    resp = client.post(
        "/api/v1/products/import?store_id=3&raw_sql=1&attribute_set=7",
        data={"csv_file": (io.BytesIO(b"sku,name\nA,Scoped\n"), "products.csv")},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200

    product = client.get("/api/v1/products/A?store_id=3").get_json()
    assert product["attributes"]["name"] == "Scoped"
    assert product["attribute_set_id"] == 7

    default_view = client.get("/api/v1/products/A").get_json()
    assert "name" not in default_view["attributes"]


def test_import_missing_sku_column_is_400(client):
    resp = client.post("/api/v1/products/import", data="name\nAlpha\n",
                       content_type="text/csv")
    assert resp.status_code == 400
    assert "sku" in resp.get_json()["error"]


def test_import_empty_body_is_400(client):
    resp = client.post("/api/v1/products/import", data="", content_type="text/csv")
    assert resp.status_code == 400


def test_import_bad_query_param_is_400(client):
    resp = client.post("/api/v1/products/import?batch_size=lots",
                       data="sku\nA\n", content_type="text/csv")
    assert resp.status_code == 400
    assert "batch_size" in resp.get_json()["error"]


def test_import_reports_warnings(client):
    resp = client.post("/api/v1/products/import",
                       data="sku,status,colour\nA,high,red\n", content_type="text/csv")
    assert resp.status_code == 200
    assert resp.get_json()["warnings"] == [
        'column "colour": unknown, skipping',
        'sku=A attr=status: invalid int "high"',
    ]


def test_get_product(client):
    client.post("/api/v1/products/import",
                data="sku,name,price,image\nA/1,Alpha,9.5,a.jpg\n", content_type="text/csv")

    resp = client.get("/api/v1/products/A/1")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["sku"] == "A/1"
    assert data["attributes"] == {"name": "Alpha", "price": 9.5}
    assert [m["value"] for m in data["media"]] == ["a.jpg"]


def test_get_unknown_product_is_404(client):
    resp = client.get("/api/v1/products/NOPE")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not found"}


def test_stock_import(client):
    client.post("/api/v1/products/import", data="sku\nA\n", content_type="text/csv")

    resp = client.post("/api/v1/stock/import", json={
        "items": [{"sku": "A", "qty": 12, "is_in_stock": 1}, {"sku": "B", "qty": 1}],
        "batch_size": 10,
    })
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["imported"] == 1
    assert data["skipped"] == 1
    assert data["warnings"] == ["sku=B: product not found"]
    assert isinstance(data["request_duration_ms"], int)
    assert resp.headers["X-Request-Duration-ms"] == str(data["request_duration_ms"])

    stock = client.get("/api/v1/products/A").get_json()["stock"]
    assert stock[0]["qty"] == 12


def test_stock_import_requires_items(client):
    for body in ({}, {"items": []}, {"items": "A"}):
        resp = client.post("/api/v1/stock/import", json=body)
        assert resp.status_code == 400
        assert resp.get_json()["error"] == "items array is required and must not be empty"


def test_stock_import_rejects_bad_item(client):
    resp = client.post("/api/v1/stock/import", json={"items": [{"sku": "A", "qty": "x"}]})
    assert resp.status_code == 400
    assert "qty" in resp.get_json()["error"]
