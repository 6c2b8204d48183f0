import pytest
from sqlalchemy import func, insert, select

from db import (
    CatalogStore, EavAttribute, LinkageScheme, create_schema, get_store, make_engine,
)
from db.models import PRODUCT_ENTITY_TYPE_ID
from main import create_app


# attribute_code → (attribute_id, backend_type)
ATTRIBUTES = {
    "name":              (73, "varchar"),
    "description":       (74, "text"),
    "price":             (75, "decimal"),
    "status":            (76, "int"),
    "special_from_date": (77, "datetime"),
    "url_key":           (78, "varchar"),
    "weight":            (79, "decimal"),
    "sku":               (80, "static"),
    "media_gallery":     (87, "static"),
}


def seed_attributes(store: CatalogStore, attributes: dict = ATTRIBUTES) -> None:
    with store.engine.begin() as conn:
        conn.execute(insert(EavAttribute.__table__), [
            {"attribute_id": attr_id, "entity_type_id": PRODUCT_ENTITY_TYPE_ID,
             "attribute_code": code, "backend_type": backend}
            for code, (attr_id, backend) in attributes.items()
        ])


@pytest.fixture
def make_store(tmp_path):
    """Factory: a fresh SQLite catalog laid out for *linkage*, seeded."""
    stores = []

    def _make(linkage=LinkageScheme.ENTITY_ID, seed=True, name="catalog"):
        engine = make_engine(f"sqlite:///{tmp_path / name}.sqlite")
        create_schema(engine, linkage)
        store = CatalogStore(engine)
        if seed:
            seed_attributes(store)
        stores.append(store)
        return store

    yield _make
    for store in stores:
        store.dispose()


@pytest.fixture
def store(make_store):
    return make_store(LinkageScheme.ENTITY_ID)


@pytest.fixture
def row_store(make_store):
    return make_store(LinkageScheme.ROW_ID)


@pytest.fixture(params=[LinkageScheme.ENTITY_ID, LinkageScheme.ROW_ID],
                ids=["entity_id", "row_id"])
def any_store(request, make_store):
    """Runs the test once per linkage scheme."""
    return make_store(request.param)


@pytest.fixture
def app(tmp_path):
    app = create_app(f"sqlite:///{tmp_path / 'app'}.sqlite",
                     linkage=LinkageScheme.ENTITY_ID, create_tables=True)
    app.config.update(TESTING=True)
    seed_attributes(get_store())
    yield app
    get_store().dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


# ── Helpers ────────────────────────────────────────────────────────────

def count_rows(store: CatalogStore, table, **where) -> int:
    """Row count of *table* (a Table) filtered by column equality."""
    stmt = select(func.count()).select_from(table)
    for column, value in where.items():
        stmt = stmt.where(table.c[column] == value)
    with store.engine.connect() as conn:
        return conn.execute(stmt).scalar_one()
