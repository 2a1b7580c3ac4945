from pathlib import Path

import pytest

from mailing_list.adapters.sqlite.migrator import SQLiteMigrator
from mailing_list.adapters.sqlite.store import SQLiteSubscriptionStore

PROJECT_ROOT = Path(__file__).parent.parent
MIGRATIONS_DIR = str(PROJECT_ROOT / "migrations")


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "mailing_list.db")


@pytest.fixture
def migrations_dir() -> str:
    return MIGRATIONS_DIR


@pytest.fixture
def migrated_db_path(db_path) -> str:
    """Temporary SQLite database with all migrations applied."""
    SQLiteMigrator(db_path, MIGRATIONS_DIR).run_migrations()
    return db_path


@pytest.fixture
def store(migrated_db_path) -> SQLiteSubscriptionStore:
    return SQLiteSubscriptionStore(migrated_db_path)
