"""
CLI Tools — the agent CLIs we know how to drive, and which one is installed.
==========================================================================
Candidates are compiled in and ranked; the lowest available rank wins.
Nothing is cached: installs can come and go while the server runs, so every
resolution re-probes the search path.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import sys
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, Optional

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5.0


@dataclass(frozen=True)
class ToolCandidate:
    """An external agent CLI and its fixed invocation mode."""

    id: str
    command: str
    args: tuple[str, ...]
    rank: int  # lower wins

    def argv(self) -> list[str]:
        return [self.command, *self.args]


# Prompt goes to stdin for both; claude needs --print to stay non-interactive.
CLAUDE = ToolCandidate(
    id="claude",
    command="claude",
    args=("--print", "--dangerously-skip-permissions"),
    rank=0,
)
OPENCODE = ToolCandidate(
    id="opencode",
    command="opencode",
    args=("run", "-"),
    rank=1,
)
CANDIDATES: tuple[ToolCandidate, ...] = (CLAUDE, OPENCODE)


@dataclass(frozen=True)
class ProbeResult:
    candidate_id: str
    available: bool


def lookup_command() -> str:
    return "where" if sys.platform == "win32" else "which"


async def probe(name: str, timeout: float = PROBE_TIMEOUT) -> bool:
    """True if the platform lookup command finds `name` on the search path."""
    try:
        proc = await asyncio.create_subprocess_exec(
            lookup_command(),
            name,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )
    except OSError as e:
        logger.debug("probe %s: lookup failed to start: %s", name, e)
        return False

    try:
        code = await asyncio.wait_for(proc.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        with contextlib.suppress(ProcessLookupError):
            proc.kill()
        await proc.wait()
        logger.warning("probe %s: lookup timed out after %ss", name, timeout)
        return False
    return code == 0


ProbeFn = Callable[[str], Awaitable[bool]]


class ToolResolver:
    """Picks the best installed candidate. Stateless: re-probes on every call."""

    def __init__(
        self,
        candidates: Iterable[ToolCandidate] = CANDIDATES,
        probe_fn: Optional[ProbeFn] = None,
        probe_timeout: float = PROBE_TIMEOUT,
    ):
        cands = tuple(sorted(candidates, key=lambda c: c.rank))
        ranks = [c.rank for c in cands]
        if len(set(ranks)) != len(ranks):
            raise ValueError(f"Candidate ranks must be distinct: {ranks}")
        ids = [c.id for c in cands]
        if len(set(ids)) != len(ids):
            raise ValueError(f"Candidate ids must be distinct: {ids}")
        self.candidates = cands
        self.probe_timeout = probe_timeout
        self._probe_fn = probe_fn

    async def _probe(self, name: str) -> bool:
        if self._probe_fn is not None:
            return bool(await self._probe_fn(name))
        return await probe(name, timeout=self.probe_timeout)

    async def probe_all(self) -> list[ProbeResult]:
        """Probe every candidate concurrently; one result per candidate, rank order."""
        found = await asyncio.gather(*(self._probe(c.command) for c in self.candidates))
        return [ProbeResult(c.id, ok) for c, ok in zip(self.candidates, found)]

    def _pick(self, results: list[ProbeResult]) -> Optional[ToolCandidate]:
        for cand, res in zip(self.candidates, results):
            if res.available:
                return cand
        return None

    async def resolve(self) -> Optional[ToolCandidate]:
        results = await self.probe_all()
        tool = self._pick(results)
        logger.info(
            "CLI resolution: %s -> %s",
            ", ".join(f"{r.candidate_id}={r.available}" for r in results),
            tool.id if tool else "none",
        )
        return tool

    async def status(self) -> dict:
        """Availability of every candidate plus the one resolve() would pick."""
        results = await self.probe_all()
        tool = self._pick(results)
        data: dict = {r.candidate_id: r.available for r in results}
        data["any_installed"] = tool is not None
        data["current"] = tool.id if tool else None
        return data


def install_hint(candidates: Iterable[ToolCandidate] = CANDIDATES) -> str:
    names = [c.id for c in candidates]
    if len(names) > 1:
        listed = ", ".join(names[:-1]) + " or " + names[-1]
    else:
        listed = "".join(names)
    return f"No CLI tool available. Please install either {listed}."
