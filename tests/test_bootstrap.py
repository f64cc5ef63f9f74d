from pathlib import Path

from intern_attendance.database import bootstrap
from intern_attendance.database.bootstrap import _strip_create_db_and_use, iter_sql_statements

SCHEMA = Path(__file__).resolve().parents[1] / "database" / "schema.sql"


def test_split_ignores_semicolons_in_quotes_and_comments():
    sql = """
    -- comment; with semicolon
    INSERT INTO t VALUES ('a;b');
    CREATE TABLE x (id INT)
    """
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('a;b')", "CREATE TABLE x (id INT)"]


def test_strip_create_database_and_use():
    sql = "CREATE DATABASE IF NOT EXISTS foo;\nUSE foo;\nCREATE TABLE t (id INT);"
    assert list(iter_sql_statements(_strip_create_db_and_use(sql))) == ["CREATE TABLE t (id INT)"]


def test_schema_file_has_ledger_tables():
    statements = list(iter_sql_statements(_strip_create_db_and_use(SCHEMA.read_text(encoding="utf-8"))))
    joined = "\n".join(statements)
    for table in ("profiles", "attendance_records", "pending_sign_ins"):
        assert f"CREATE TABLE IF NOT EXISTS {table}" in joined


def test_split_honours_backslash_escapes():
    sql = "INSERT INTO t VALUES ('it\\'s; ok');\nSELECT 1"
    assert list(iter_sql_statements(sql)) == ["INSERT INTO t VALUES ('it\\'s; ok')", "SELECT 1"]


def test_bundled_schema_path_exists():
    assert bootstrap.SCHEMA_PATH == SCHEMA
    assert SCHEMA.is_file()


def test_describe_target_hides_password():
    cfg = {"host": "db", "port": 3307, "user": "app", "password": "s3cret", "database": "interns"}
    assert bootstrap.describe_target(cfg) == "app@db:3307/interns"


def test_init_database_applies_schema_then_seeds(monkeypatch):
    calls = []
    monkeypatch.setattr(bootstrap, "apply_schema", lambda cfg: calls.append("schema"))
    monkeypatch.setattr(bootstrap, "ensure_demo_users", lambda cfg: calls.append("seed"))
    monkeypatch.setattr(bootstrap, "list_tables", lambda cfg: ["attendance_records", "pending_sign_ins", "profiles"])

    assert bootstrap.init_database({}, seed=True) == ["attendance_records", "pending_sign_ins", "profiles"]
    assert calls == ["schema", "seed"]

    calls.clear()
    bootstrap.init_database({})
    assert calls == ["schema"]
