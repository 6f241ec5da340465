"""Tests for CLI discovery: probing and ranked resolution."""
import asyncio
import shutil
import sys

import pytest

from pmdesk.agents import tools
from pmdesk.agents.tools import (
    CANDIDATES,
    CLAUDE,
    OPENCODE,
    ProbeResult,
    ToolCandidate,
    ToolResolver,
    install_hint,
    probe,
)


def fake_probe(available, calls=None):
    async def _probe(name):
        if calls is not None:
            calls.append(name)
        await asyncio.sleep(0)
        return name in available

    return _probe


class TestCandidates:
    def test_claude_is_primary(self):
        assert CLAUDE.rank < OPENCODE.rank
        assert CANDIDATES[0] is CLAUDE

    def test_argv(self):
        assert CLAUDE.argv() == ["claude", "--print", "--dangerously-skip-permissions"]
        assert OPENCODE.argv() == ["opencode", "run", "-"]

    def test_install_hint_names_both(self):
        hint = install_hint()
        assert "claude" in hint and "opencode" in hint

    def test_lookup_command(self, monkeypatch):
        monkeypatch.setattr(tools.sys, "platform", "win32")
        assert tools.lookup_command() == "where"
        monkeypatch.setattr(tools.sys, "platform", "linux")
        assert tools.lookup_command() == "which"


class TestResolverConstruction:
    def test_duplicate_ranks_rejected(self):
        dup = ToolCandidate(id="other", command="other", args=(), rank=0)
        with pytest.raises(ValueError):
            ToolResolver(candidates=(CLAUDE, dup))

    def test_duplicate_ids_rejected(self):
        dup = ToolCandidate(id="claude", command="claude2", args=(), rank=5)
        with pytest.raises(ValueError):
            ToolResolver(candidates=(CLAUDE, dup))

    def test_candidates_sorted_by_rank(self):
        r = ToolResolver(candidates=(OPENCODE, CLAUDE))
        assert [c.id for c in r.candidates] == ["claude", "opencode"]


@pytest.mark.asyncio
class TestResolve:
    async def test_none_available(self):
        r = ToolResolver(probe_fn=fake_probe(set()))
        assert await r.resolve() is None

    async def test_both_available_picks_primary(self):
        r = ToolResolver(probe_fn=fake_probe({"claude", "opencode"}))
        assert await r.resolve() is CLAUDE

    async def test_only_secondary(self):
        r = ToolResolver(probe_fn=fake_probe({"opencode"}))
        assert await r.resolve() is OPENCODE

    async def test_deterministic_across_calls(self):
        r = ToolResolver(probe_fn=fake_probe({"claude", "opencode"}))
        picks = [await r.resolve() for _ in range(5)]
        assert all(p is CLAUDE for p in picks)

    async def test_one_probe_per_candidate_per_call(self):
        calls = []
        r = ToolResolver(probe_fn=fake_probe({"opencode"}, calls))
        results = await r.probe_all()
        assert results == [ProbeResult("claude", False), ProbeResult("opencode", True)]
        assert sorted(calls) == ["claude", "opencode"]

    async def test_reprobes_every_call(self):
        available = set()
        r = ToolResolver(probe_fn=fake_probe(available))
        assert await r.resolve() is None
        available.add("opencode")
        assert await r.resolve() is OPENCODE

    async def test_probes_run_concurrently(self):
        inflight = 0
        peak = 0

        async def slow_probe(name):
            nonlocal inflight, peak
            inflight += 1
            peak = max(peak, inflight)
            await asyncio.sleep(0.05)
            inflight -= 1
            return False

        await ToolResolver(probe_fn=slow_probe).resolve()
        assert peak == 2

    async def test_status_matches_resolve(self):
        r = ToolResolver(probe_fn=fake_probe({"opencode"}))
        status = await r.status()
        assert status == {
            "claude": False,
            "opencode": True,
            "any_installed": True,
            "current": "opencode",
        }
        assert (await r.resolve()).id == status["current"]

    async def test_status_nothing_installed(self):
        status = await ToolResolver(probe_fn=fake_probe(set())).status()
        assert status["any_installed"] is False
        assert status["current"] is None


needs_which = pytest.mark.skipif(
    sys.platform == "win32" or shutil.which("which") is None, reason="needs `which`"
)


@pytest.mark.asyncio
class TestProbe:
    @needs_which
    async def test_finds_existing_executable(self):
        assert await probe(sys.executable) is True

    @needs_which
    async def test_missing_command(self):
        assert await probe("pmdesk-no-such-command-4242") is False

    async def test_lookup_unavailable_means_not_found(self, monkeypatch):
        monkeypatch.setattr(tools, "lookup_command", lambda: "/nonexistent/lookup-tool")
        assert await probe("claude") is False

    @pytest.mark.skipif(sys.platform == "win32", reason="shebang script")
    async def test_lookup_timeout_means_not_found(self, monkeypatch, make_tool):
        slow = make_tool("slow-which", "import time\ntime.sleep(30)\n")
        monkeypatch.setattr(tools, "lookup_command", lambda: slow)
        assert await probe("claude", timeout=0.5) is False
