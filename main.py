#!/usr/bin/env python3
"""
Catalog importer - Bulk product import service
===============================================

Single-command run:  python main.py

CLI (through Flask's click integration):
    flask --app main products-import -f products.csv [--store N] [--raw-sql]
    flask --app main init-db [--linkage entity_id|row_id]

See config.py for all environment-variable tunables.
"""

from __future__ import annotations

import logging
import sys

import click
from flask import Flask

import config
from db import LinkageScheme, create_schema, get_store, init_db
from api import api_bp
from import_engine import ImportFailed, ImportOptions, format_report, run_import

logger = logging.getLogger(__name__)


def create_app(
    db_url: str | None = None,
    *,
    linkage: LinkageScheme | None = None,
    create_tables: bool = False,
) -> Flask:
    """Flask application factory."""
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    app = Flask(__name__)

    # ── Initialise database ─────────────────────────────────────────
    if linkage is None and config.LINKAGE:
        linkage = LinkageScheme.parse(config.LINKAGE)
    init_db(db_url or config.DB_URL, linkage=linkage, create_tables=create_tables)
    logger.info(f"Database: {db_url or config.DB_URL}")

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    # ── CLI commands ────────────────────────────────────────────────
    app.cli.add_command(products_import_command)
    app.cli.add_command(init_db_command)

    return app


@click.command("products-import")
@click.option("-f", "--file", "path", required=True,
              type=click.Path(exists=True, dir_okay=False),
              help="CSV file path")
@click.option("--store", "store_id", type=int, default=None,
              help="Store id for attribute values (default 0)")
@click.option("--batch-size", type=int, default=None,
              help="Rows per lookup and write chunk (default 500)")
@click.option("--attribute-set", type=int, default=None,
              help="Attribute set for new products (default 4)")
@click.option("--raw-sql", is_flag=True, default=False,
              help="Use generated multi-row INSERT statements")
def products_import_command(path, store_id, batch_size, attribute_set, raw_sql):
    """Import products from a CSV file."""
    options = ImportOptions.from_config(
        store_id=store_id, batch_size=batch_size,
        attribute_set=attribute_set, raw_sql=raw_sql or None,
    )
    try:
        with open(path, "rb") as fh:
            result = run_import(get_store(), fh, options)
    except ImportFailed as exc:
        click.echo(f"Import failed: {exc}", err=True)
        sys.exit(1)

    for warning in result.warnings:
        click.echo(f"  [warn] {warning}")
    click.echo(format_report(result, raw_sql=options.raw_sql))


@click.command("init-db")
@click.option("--linkage", type=click.Choice(["entity_id", "row_id"]),
              default="entity_id", show_default=True,
              help="Which EAV linkage scheme to create")
def init_db_command(linkage):
    """Create the catalog tables for one linkage scheme."""
    store = get_store()
    scheme = LinkageScheme.parse(linkage)
    create_schema(store.engine, scheme)
    store.reset_detection()
    click.echo(f"Created {scheme.value} catalog tables")


def main():
    print("=" * 56)
    print("  Catalog importer")
    print("=" * 56)

    app = create_app()

    print(f"\n  http://{config.HOST}:{config.PORT}/api/v1")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
