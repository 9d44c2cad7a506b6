import sqlite3
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator

MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")


@pytest.fixture
def temp_db_path(tmp_path):
    return str(tmp_path / "data" / "test_db.sqlite")


def _tables(db_path: str) -> set[str]:
    conn = sqlite3.connect(db_path)
    rows = conn.execute("SELECT name FROM sqlite_master WHERE type='table'").fetchall()
    conn.close()
    return {r[0] for r in rows}


def test_migrator_applies_initial(temp_db_path):
    applied = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()

    assert applied == ["001_initial.sql"]
    assert {"_migrations", "leads", "drip_sends", "page_views", "affiliate_clicks"} <= _tables(
        temp_db_path
    )


def test_migrator_is_idempotent(temp_db_path):
    migrator = SQLiteMigrator(temp_db_path, MIGRATIONS_DIR)
    migrator.run_migrations()

    assert migrator.run_migrations() == []
    assert migrator.pending() == []

    conn = sqlite3.connect(temp_db_path)
    count = conn.execute("SELECT COUNT(*) FROM _migrations").fetchone()[0]
    conn.close()
    assert count == 1


def test_down_section_not_executed(temp_db_path):
    SQLiteMigrator(temp_db_path, MIGRATIONS_DIR).run_migrations()
    assert "leads" in _tables(temp_db_path)


def test_failed_migration_raises(tmp_path):
    migrations = tmp_path / "migrations"
    migrations.mkdir()
    (migrations / "001_bad.sql").write_text("CREATE TABLE broken (;")

    migrator = SQLiteMigrator(str(tmp_path / "bad.db"), str(migrations))
    with pytest.raises(RuntimeError, match="001_bad.sql"):
        migrator.run_migrations()
    assert migrator.pending() == ["001_bad.sql"]
