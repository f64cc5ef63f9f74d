from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from ..core.constants import ADMIN_INTERN_ID
from ..core.enums import Role
from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor, fetchall

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"

DEMO_PROFILES = (
    ("Admin User", "admin@iih.ng", "admin123", ADMIN_INTERN_ID, "+234-800-123-4567", Role.ADMIN),
    ("Adeolu Adebayo", "adeolu@example.com", "intern123", "IIH001", "+234-801-234-5678", Role.INTERN),
    ("Fatima Ibrahim", "fatima@example.com", "intern123", "IIH002", "+234-802-345-6789", Role.INTERN),
    ("Chinedu Okafor", "chinedu@example.com", "intern123", "IIH003", "+234-803-456-7890", Role.INTERN),
)


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a schema file on ';' outside quotes, dropping ``--`` comment lines."""
    lines = [ln for ln in sql.splitlines() if not ln.lstrip().startswith("--")]
    buf: list[str] = []
    quote = ""
    escape = False
    for ch in "\n".join(lines):
        if escape:
            escape = False
        elif ch == "\\" and quote:
            escape = True
        elif quote:
            if ch == quote:
                quote = ""
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def ensure_database_exists(db_config: dict) -> None:
    config = DBConfig.from_dict(db_config)
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path = SCHEMA_PATH) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    with db_cursor(DatabaseConnection(DBConfig.from_dict(db_config)), dictionary=False) as (_, cur):
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
    logger.info("Schema applied from %s", schema_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo admin and interns, keyed by email."""
    with db_cursor(DatabaseConnection(DBConfig.from_dict(db_config))) as (_, cur):
        for name, email, password, intern_id, phone, role in DEMO_PROFILES:
            cur.execute(
                """
                INSERT INTO profiles(name, email, password_hash, intern_id, role, phone_number, is_active)
                VALUES(%s,%s,%s,%s,%s,%s,1)
                ON DUPLICATE KEY UPDATE
                    name=VALUES(name), password_hash=VALUES(password_hash), intern_id=VALUES(intern_id),
                    role=VALUES(role), phone_number=VALUES(phone_number), is_active=1
                """,
                (name, email, generate_password_hash(password), intern_id, role.value, phone),
            )
    logger.info("Demo profiles ready (%d)", len(DEMO_PROFILES))


def list_tables(db_config: dict) -> list[str]:
    with db_cursor(DatabaseConnection(DBConfig.from_dict(db_config)), dictionary=False) as (_, cur):
        cur.execute("SHOW TABLES")
        return [row[0] for row in fetchall(cur)]


def describe_target(db_config: dict) -> str:
    """``user@host:port/database`` for log and console lines (no password)."""
    return (
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


def init_database(db_config: dict, *, seed: bool = False) -> list[str]:
    """Apply the bundled schema (and optionally the demo profiles); returns the table names."""
    apply_schema(db_config)
    if seed:
        ensure_demo_users(db_config)
    return list_tables(db_config)
