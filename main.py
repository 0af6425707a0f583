#!/usr/bin/env python3
"""
CSVPages - CSV to page import service
=====================================

Single-command run:  python main.py

See config.py for all environment-variable tunables.
"""

import logging
import sys
from flask import Flask, jsonify

import config
import schema
from db import init_db, get_session, Page
from services import PagesService
from api import api_bp


def create_app() -> Flask:
    """Flask application factory."""

    app = Flask(__name__)
    app.secret_key = config.SECRET
    app.config["MAX_CONTENT_LENGTH"] = config.MAX_UPLOAD_BYTES

    # ── Load field schema + templates ───────────────────────────────
    if not config.SCHEMA_PATH.exists():
        print(f"FATAL: schema not found: {config.SCHEMA_PATH}")
        sys.exit(1)

    stats = schema.load(config.SCHEMA_PATH)
    print(f"  Schema: {stats['fields']} fields, {stats['templates']} templates")

    # ── Initialise database ─────────────────────────────────────────
    init_db(config.DB_URL)
    print(f"  Database: {config.DB_URL}")

    # ── Register blueprints ─────────────────────────────────────────
    app.register_blueprint(api_bp)

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    return app


def _seed_if_empty():
    """Import the seed CSV when the seed parent has no children yet."""
    session = get_session()
    try:
        parent = PagesService.get_by_path(session, config.SEED_PARENT)
        if parent is None:
            print(f"\n  Seed parent {config.SEED_PARENT} does not exist - skipping seed.")
            return
        count = session.query(Page).filter(Page.parent_id == parent.id).count()
    finally:
        session.close()

    if count > 0:
        print(f"\n  {config.SEED_PARENT} has {count} pages.")
        return

    if not config.SEED_CSV_PATH.exists():
        print(f"\n  No seed CSV at {config.SEED_CSV_PATH} - starting empty.")
        return

    print(f"\n  {config.SEED_PARENT} is empty → importing {config.SEED_CSV_PATH.name} …")
    from import_engine import run_import, RunConfig, Outcome

    report = run_import(config.SEED_CSV_PATH,
                        RunConfig(template=config.SEED_TEMPLATE, parent=config.SEED_PARENT))

    print(f"  Done: {report.imported} imported, "
          f"{report.count(Outcome.SKIPPED)} skipped / {report.total_rows} rows")
    if report.errors:
        print("  First errors (max 10):")
        for msg in report.errors[:10]:
            print(f"    Row {msg.row}: {msg.reason}")


def main():
    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )

    print("=" * 56)
    print("  CSVPages - CSV to page importer")
    print("=" * 56)

    app = create_app()
    _seed_if_empty()

    print(f"\n  http://{config.HOST}:{config.PORT}/api/v1/import")
    print(f"  Files stored in: {config.FILES_DIR}")
    print("=" * 56)

    app.run(host=config.HOST, port=config.PORT, debug=config.DEBUG)


if __name__ == "__main__":
    main()
