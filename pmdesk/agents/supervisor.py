"""
Process Supervisor — run one agent CLI under a hard wall-clock deadline.
=======================================================================
One call, one child:
- prompt written to stdin, then stdin closed (the CLIs block until EOF)
- stdout/stderr drained concurrently from spawn, so a chatty tool never
  stalls on a full pipe
- the deadline is measured from the spawn attempt and never renewed;
  on expiry the process group is killed, reaped, and partial output dropped

Usage:
    outcome = await run_tool(CLAUDE, prompt, cwd="/path/to/project", timeout=120)
    if isinstance(outcome, Success):
        print(outcome.text)
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import os
import signal
import subprocess
import sys
import time
from dataclasses import dataclass
from typing import ClassVar, Union

from .sanitize import sanitize
from .tools import ToolCandidate

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 120.0
_READ_CHUNK = 64 * 1024


# ── Outcomes ─────────────────────────────────────────────────────


@dataclass(frozen=True)
class Success:
    text: str
    kind: ClassVar[str] = "success"
    ok: ClassVar[bool] = True


@dataclass(frozen=True)
class ToolNotFound:
    kind: ClassVar[str] = "tool_not_found"
    ok: ClassVar[bool] = False


@dataclass(frozen=True)
class NonZeroExit:
    code: int
    stderr: str
    kind: ClassVar[str] = "non_zero_exit"
    ok: ClassVar[bool] = False


@dataclass(frozen=True)
class Timeout:
    seconds: float
    kind: ClassVar[str] = "timeout"
    ok: ClassVar[bool] = False


@dataclass(frozen=True)
class SpawnError:
    message: str
    kind: ClassVar[str] = "spawn_error"
    ok: ClassVar[bool] = False


InvocationOutcome = Union[Success, ToolNotFound, NonZeroExit, Timeout, SpawnError]


@dataclass(frozen=True)
class InvocationRequest:
    tool: ToolCandidate
    prompt: str
    cwd: str
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self):
        if not self.timeout > 0:
            raise ValueError(f"timeout must be > 0, got {self.timeout!r}")


# ── Process plumbing ─────────────────────────────────────────────


async def _spawn(request: InvocationRequest) -> asyncio.subprocess.Process:
    argv = request.tool.argv()
    common = dict(
        cwd=request.cwd,
        env=dict(os.environ),
        stdin=asyncio.subprocess.PIPE,
        stdout=asyncio.subprocess.PIPE,
        stderr=asyncio.subprocess.PIPE,
    )
    if sys.platform == "win32":
        # npm installs .cmd shims that only resolve through the shell
        return await asyncio.create_subprocess_shell(subprocess.list2cmdline(argv), **common)
    return await asyncio.create_subprocess_exec(*argv, start_new_session=True, **common)


def _kill(proc: asyncio.subprocess.Process) -> None:
    """Hard kill: the whole process group on POSIX, the process on Windows."""
    if proc.returncode is not None:
        return
    try:
        if sys.platform == "win32":
            proc.kill()
        else:
            os.killpg(proc.pid, signal.SIGKILL)
    except (ProcessLookupError, PermissionError):
        with contextlib.suppress(ProcessLookupError):
            proc.kill()


async def _drain(stream: asyncio.StreamReader) -> str:
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    parts: list[str] = []
    while True:
        chunk = await stream.read(_READ_CHUNK)
        if not chunk:
            break
        parts.append(decoder.decode(chunk))
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


async def _feed(stdin: asyncio.StreamWriter, prompt: str, tool_id: str) -> None:
    try:
        try:
            stdin.write(prompt.encode("utf-8"))
            await stdin.drain()
        except (BrokenPipeError, ConnectionResetError):
            # Tool quit without reading; its exit status tells the story.
            logger.debug("%s closed stdin before reading the full prompt", tool_id)
        stdin.close()
        with contextlib.suppress(BrokenPipeError, ConnectionResetError):
            await stdin.wait_closed()
    except asyncio.CancelledError:
        # a graceful close waits for a reader that may never come
        stdin.transport.abort()
        raise


# ── Entry points ─────────────────────────────────────────────────


async def invoke(request: InvocationRequest) -> InvocationOutcome:
    """Run the request's tool to completion or deadline. Never raises for tool failures."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + request.timeout
    tool_id = request.tool.id

    try:
        proc = await _spawn(request)
    except (OSError, ValueError) as e:
        logger.warning("Failed to start %s in %s: %s", tool_id, request.cwd, e)
        return SpawnError(str(e) or e.__class__.__name__)

    started = time.monotonic()
    logger.info("Started %s (pid %s) in %s", tool_id, proc.pid, request.cwd)

    # The feeder runs on its own so a tool that never reads stdin cannot
    # hold the deadline hostage.
    feed_task = asyncio.ensure_future(_feed(proc.stdin, request.prompt, tool_id))
    out_task = asyncio.ensure_future(_drain(proc.stdout))
    err_task = asyncio.ensure_future(_drain(proc.stderr))

    async def _finish() -> tuple[int, str, str]:
        code = await proc.wait()
        return code, await out_task, await err_task

    try:
        remaining = max(deadline - loop.time(), 0)
        code, out, err = await asyncio.wait_for(_finish(), timeout=remaining)
    except asyncio.TimeoutError:
        _kill(proc)
        await proc.wait()
        logger.warning(
            "%s timed out after %.0fs (pid %s killed)", tool_id, request.timeout, proc.pid
        )
        return Timeout(request.timeout)
    finally:
        if proc.returncode is None:
            _kill(proc)
            await proc.wait()
        for task in (feed_task, out_task, err_task):
            task.cancel()
        await asyncio.gather(feed_task, out_task, err_task, return_exceptions=True)

    elapsed = time.monotonic() - started
    if code != 0:
        logger.warning("%s exited with code %s after %.1fs", tool_id, code, elapsed)
        return NonZeroExit(code, err)
    logger.info("%s answered in %.1fs (%d chars)", tool_id, elapsed, len(out))
    return Success(sanitize(out))


async def run_tool(
    tool: ToolCandidate, prompt: str, cwd: str, timeout: float = DEFAULT_TIMEOUT
) -> InvocationOutcome:
    return await invoke(InvocationRequest(tool=tool, prompt=prompt, cwd=cwd, timeout=timeout))
