"""Strip terminal control sequences from captured CLI output."""

from __future__ import annotations

import re

# OSC (ESC ] ... BEL|ST), CSI (ESC [ params intermediates final), then any
# two-byte Fe escape.
ANSI_RE = re.compile(
    r"\x1b\][^\x07\x1b]*(?:\x07|\x1b\\)"
    r"|\x1b\[[0-?]*[ -/]*[@-~]"
    r"|\x1b[@-Z\\-_]"
)


def sanitize(text: str) -> str:
    """Remove escape sequences and trim; text without any is returned as-is."""
    cleaned, n = ANSI_RE.subn("", text)
    if n == 0:
        return text
    # Removing one sequence can splice the halves of another together.
    while n:
        cleaned, n = ANSI_RE.subn("", cleaned)
    return cleaned.strip()
