"""Active-project lookup."""

from .locator import (
    Project,
    ProjectLocator,
    SqliteProjectLocator,
    StaticProjectLocator,
    default_locator,
)

__all__ = [
    "Project",
    "ProjectLocator",
    "SqliteProjectLocator",
    "StaticProjectLocator",
    "default_locator",
]
