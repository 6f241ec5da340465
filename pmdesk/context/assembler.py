"""Context Assembler — work log + top-level layout of a project, as one text blob.

Partial context is better than no answer: a missing or unreadable work log and
a failed directory listing each degrade to a marker line instead of raising.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

WORK_LOG_NAME = "AGENT_WORK_LOG.md"
IGNORED_ENTRIES = frozenset({"node_modules"})
MAX_ENTRIES = 20

NO_HISTORY = "No history recorded yet."
LOG_UNREADABLE = "Could not be read."
LISTING_UNAVAILABLE = "Unavailable (failed to read the project directory)."


def _work_log_section(root: Path) -> str:
    log_path = root / WORK_LOG_NAME
    if not log_path.is_file():
        return f"\n## {WORK_LOG_NAME}: {NO_HISTORY}\n"
    try:
        content = log_path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        logger.warning("Cannot read %s: %s", log_path, e)
        return f"\n## {WORK_LOG_NAME}: {LOG_UNREADABLE}\n"
    return f"\n## {WORK_LOG_NAME} contents:\n{content}\n"


def list_entries(root: Path, limit: int = MAX_ENTRIES) -> list[str]:
    """Visible top-level entries as `[dir] name` / `[file] name`, sorted by name."""
    with os.scandir(root) as it:
        entries = sorted(
            (e for e in it if not e.name.startswith(".") and e.name not in IGNORED_ENTRIES),
            key=lambda e: e.name,
        )
    lines = []
    for entry in entries[:limit]:
        try:
            is_dir = entry.is_dir()
        except OSError:
            is_dir = False
        lines.append(f"{'[dir]' if is_dir else '[file]'} {entry.name}")
    return lines


def _structure_section(root: Path) -> str:
    try:
        lines = list_entries(root)
    except OSError as e:
        logger.warning("Cannot list %s: %s", root, e)
        return f"\n## Project structure: {LISTING_UNAVAILABLE}\n"
    return "\n## Project structure:\n" + "\n".join(lines) + "\n"


def assemble(project_path: str | os.PathLike) -> str:
    root = Path(project_path)
    return _work_log_section(root) + _structure_section(root)
