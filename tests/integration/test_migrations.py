import sqlite3
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = str(Path(__file__).parent.parent.parent / "migrations")


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "test_db.sqlite")


def _tables(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    try:
        rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
        return {r[0] for r in rows}
    finally:
        conn.close()


def test_migrator_applies_initial(temp_db_path):
    applied = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["001_initial.sql"]
    assert {"_migrations", "members", "threads", "comments", "settings", "payments"} <= _tables(
        temp_db_path
    )


def test_down_section_not_executed(temp_db_path):
    SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()
    assert "members" in _tables(temp_db_path)


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR)
    migrator.run_migrations()

    assert migrator.run_migrations() == []
    assert migrator.pending() == []

    conn = sqlite3.connect(temp_db_path)
    cursor = conn.execute("SELECT count(*) FROM _migrations WHERE filename='001_initial.sql'")
    assert cursor.fetchone()[0] == 1
    conn.close()


def test_failed_migration_raises(temp_db_path, tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_ok.sql").write_text("CREATE TABLE a (id INTEGER);")
    (migrations / "002_bad.sql").write_text("CREATE TABLE (;")

    migrator = SQLiteMigrator(temp_db_path, str(migrations))
    with pytest.raises(RuntimeError, match="002_bad.sql"):
        migrator.run_migrations()
    assert migrator.pending() == ["002_bad.sql"]
