"""Create the database and tables.

Run from the repository root: `python -m scripts.init_db [--seed]`.
"""

from __future__ import annotations

import argparse
import importlib
import logging
from pathlib import Path

from config import get_settings_module

from src.attendance_ledger.attendance_ledger.database.bootstrap import apply_schema, ensure_demo_employees
from src.attendance_ledger.attendance_ledger.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--seed", action="store_true", help="also insert one demo employee per role")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    count = apply_schema(conn, schema_path=schema_path)
    if args.seed:
        ensure_demo_employees(conn)

    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(statements={count})"
    )


if __name__ == "__main__":
    main()
