"""Project Locator — which project is the operator looking at right now.

The project store itself belongs to the surrounding app; we only read the
`projects` table (one row flagged `is_active = 1`).
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Project:
    name: str
    path: str

    @property
    def exists(self) -> bool:
        return Path(self.path).is_dir()

    def to_dict(self) -> dict:
        return {"name": self.name, "path": self.path}


class ProjectLocator(Protocol):
    def get_active_project(self) -> Optional[Project]: ...


class StaticProjectLocator:
    """Always returns the same project (or none)."""

    def __init__(self, project: Optional[Project] = None):
        self.project = project

    def get_active_project(self) -> Optional[Project]:
        return self.project


class SqliteProjectLocator:
    """Reads the active project from the app's SQLite database."""

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)

    def get_active_project(self) -> Optional[Project]:
        if not self.db_path.exists():
            logger.warning("Project database %s not found", self.db_path)
            return None
        try:
            conn = sqlite3.connect(f"file:{self.db_path}?mode=ro", uri=True)
        except sqlite3.Error as e:
            logger.warning("Cannot open project database %s: %s", self.db_path, e)
            return None
        try:
            conn.row_factory = sqlite3.Row
            row = conn.execute(
                "SELECT name, path FROM projects WHERE is_active = 1 LIMIT 1"
            ).fetchone()
        except sqlite3.Error as e:
            logger.warning("Cannot read active project from %s: %s", self.db_path, e)
            return None
        finally:
            conn.close()
        if row is None:
            return None
        return Project(name=row["name"], path=row["path"])


def default_locator() -> ProjectLocator:
    from ..config import get_config

    db_path = get_config().projects.db_path
    if db_path:
        return SqliteProjectLocator(Path(db_path).expanduser())
    return StaticProjectLocator()
