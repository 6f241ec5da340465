"""Shared fixtures: isolated config and throwaway fake agent CLIs."""

import stat
import sys
import textwrap

import pytest

from pmdesk.config import reset_config

_ENV_KEYS = ("PMDESK_TIMEOUT", "PMDESK_DB", "PMDESK_HOST", "PMDESK_PORT", "LOG_LEVEL")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Never read the developer's ~/.config/pmdesk or environment overrides."""
    monkeypatch.setenv("PMDESK_CONFIG", str(tmp_path / "no-such-config.yaml"))
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()


@pytest.fixture
def make_tool(tmp_path):
    """Write an executable Python script acting as an agent CLI; returns its path."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> str:
        path = bin_dir / name
        path.write_text(f"#!{sys.executable}\n" + textwrap.dedent(body))
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def project_dir(tmp_path):
    root = tmp_path / "project"
    root.mkdir()
    (root / "src").mkdir()
    (root / "README.md").write_text("# demo\n")
    (root / "package.json").write_text("{}\n")
    return root


ECHO_STDIN = """
import sys
sys.stdout.buffer.write(sys.stdin.buffer.read())
"""

FAIL_BOOM = """
import sys
sys.stdin.read()
sys.stderr.write("boom")
sys.exit(2)
"""

