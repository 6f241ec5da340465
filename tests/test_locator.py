"""Tests for active-project lookup."""
import sqlite3

import pytest

from pmdesk.projects import (
    Project,
    SqliteProjectLocator,
    StaticProjectLocator,
    default_locator,
)

SCHEMA = """
CREATE TABLE projects (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL,
  path TEXT NOT NULL UNIQUE,
  description TEXT,
  is_active INTEGER DEFAULT 0
);
"""


@pytest.fixture
def project_db(tmp_path):
    db_path = tmp_path / "app.db"
    conn = sqlite3.connect(db_path)
    conn.executescript(SCHEMA)
    conn.executemany(
        "INSERT INTO projects (id, name, path, is_active) VALUES (?, ?, ?, ?)",
        [("p1", "alpha", "/work/alpha", 0), ("p2", "beta", "/work/beta", 1)],
    )
    conn.commit()
    conn.close()
    return db_path


class TestSqliteLocator:
    def test_returns_active(self, project_db):
        assert SqliteProjectLocator(project_db).get_active_project() == Project("beta", "/work/beta")

    def test_no_active_project(self, project_db):
        conn = sqlite3.connect(project_db)
        conn.execute("UPDATE projects SET is_active = 0")
        conn.commit()
        conn.close()
        assert SqliteProjectLocator(project_db).get_active_project() is None

    def test_missing_db(self, tmp_path):
        assert SqliteProjectLocator(tmp_path / "nope.db").get_active_project() is None

    def test_missing_table(self, tmp_path):
        db_path = tmp_path / "empty.db"
        sqlite3.connect(db_path).close()
        assert SqliteProjectLocator(db_path).get_active_project() is None

    def test_does_not_create_db(self, tmp_path):
        SqliteProjectLocator(tmp_path / "nope.db").get_active_project()
        assert not (tmp_path / "nope.db").exists()


class TestDefaultLocator:
    def test_static_without_db(self):
        loc = default_locator()
        assert isinstance(loc, StaticProjectLocator)
        assert loc.get_active_project() is None

    def test_sqlite_when_configured(self, project_db, monkeypatch):
        monkeypatch.setenv("PMDESK_DB", str(project_db))
        loc = default_locator()
        assert isinstance(loc, SqliteProjectLocator)
        assert loc.get_active_project().name == "beta"


class TestProject:
    def test_exists(self, tmp_path):
        assert Project("x", str(tmp_path)).exists
        assert not Project("x", str(tmp_path / "gone")).exists

    def test_to_dict(self):
        assert Project("x", "/p").to_dict() == {"name": "x", "path": "/p"}
