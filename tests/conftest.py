from datetime import UTC, datetime
from pathlib import Path

import pytest

from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite_db import SQLiteAnalyticsRepo, SQLiteLeadRepo
from src.rules.loader import load_rules
from src.rules.models import Rules

PROJECT_ROOT = Path(__file__).resolve().parent.parent
MIGRATIONS_DIR = PROJECT_ROOT / "migrations"
RULES_PATH = PROJECT_ROOT / "rules.yaml"

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=UTC)


class FixedClock:
    """TimePort with a settable now."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def now_utc(self) -> datetime:
        return self.now


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Temporary SQLite file with all migrations applied."""
    path = str(tmp_path / "finsite.db")
    SQLiteMigrator(path, str(MIGRATIONS_DIR)).run_migrations()
    return path


@pytest.fixture
def lead_repo(db_path: str) -> SQLiteLeadRepo:
    return SQLiteLeadRepo(db_path)


@pytest.fixture
def analytics_repo(db_path: str) -> SQLiteAnalyticsRepo:
    return SQLiteAnalyticsRepo(db_path)


@pytest.fixture
def rules() -> Rules:
    """The real rules file from the project root."""
    return load_rules(RULES_PATH)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()
