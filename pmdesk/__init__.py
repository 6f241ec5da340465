"""PM Desk — project-status questions answered by an installed CLI agent."""

__version__ = "0.1.0"
