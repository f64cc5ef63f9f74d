"""Create the database and tables from ``database/schema.sql``.

Usage: ``APP_ENV=development python scripts/init_db.py [--seed]``
"""

from __future__ import annotations

import argparse
import importlib

from intern_attendance.database.bootstrap import describe_target, init_database
from intern_attendance.settings import get_settings_module


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--seed", action="store_true", help="also upsert the demo profiles")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    tables = init_database(db_config, seed=args.seed)
    print(f"OK: schema ready on {describe_target(db_config)} ({', '.join(tables)})")


if __name__ == "__main__":
    main()
