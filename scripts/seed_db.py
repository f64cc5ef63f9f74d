"""Upsert the demo admin and intern profiles (keyed by email)."""

from __future__ import annotations

import importlib

from intern_attendance.database.bootstrap import DEMO_PROFILES, describe_target, ensure_demo_users
from intern_attendance.settings import get_settings_module


def main() -> None:
    db_config = dict(importlib.import_module(get_settings_module()).DB_CONFIG)
    ensure_demo_users(db_config)
    for name, email, password, _, _, role in DEMO_PROFILES:
        print(f"  {role.value:<6} {email:<24} {password}  ({name})")
    print(f"OK: {len(DEMO_PROFILES)} demo profiles on {describe_target(db_config)}")


if __name__ == "__main__":
    main()
