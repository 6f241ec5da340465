"""
PM Ask — answer a free-form question about a project's status.
==============================================================
The single public entry point of the engine. Resolves the installed agent CLI,
builds the project context, runs the CLI under a deadline, and turns whatever
happened into an AskResult. Nothing escapes: every failure comes back as
``success=False`` with a human-readable error.
"""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Optional

from .agents.supervisor import (
    InvocationOutcome,
    NonZeroExit,
    SpawnError,
    Success,
    Timeout,
    ToolNotFound,
    run_tool,
)
from .agents.tools import ToolResolver, install_hint
from .config import get_config
from .context import assemble, compose
from .projects.locator import Project, ProjectLocator, default_locator

logger = logging.getLogger(__name__)

QUESTION_REQUIRED = "Question is required"


@dataclass
class AskResult:
    success: bool
    answer: Optional[str] = None
    error: Optional[str] = None
    kind: str = ""
    tool: Optional[str] = None
    project: Optional[Project] = None

    def to_dict(self) -> dict:
        d: dict = {"success": self.success}
        if self.answer is not None:
            d["answer"] = self.answer
        if self.error is not None:
            d["error"] = self.error
        d["kind"] = self.kind
        d["tool"] = self.tool
        d["project"] = self.project.to_dict() if self.project else None
        return d


def describe_failure(outcome: InvocationOutcome, tool_id: str = "") -> str:
    """User-facing message for a failed outcome."""
    if isinstance(outcome, ToolNotFound):
        return install_hint()
    if isinstance(outcome, Timeout):
        return (
            f"CLI timeout - {tool_id or 'the tool'} did not answer within "
            f"{outcome.seconds:g}s. It is running but too slow, not broken; "
            "try again or ask a narrower question."
        )
    if isinstance(outcome, NonZeroExit):
        return f"CLI exited with code {outcome.code}: {outcome.stderr}"
    if isinstance(outcome, SpawnError):
        return f"Failed to start CLI: {outcome.message}"
    raise TypeError(f"Not a failure outcome: {outcome!r}")


def _result(outcome: InvocationOutcome, tool_id: Optional[str], project: Optional[Project]) -> AskResult:
    if isinstance(outcome, Success):
        return AskResult(True, answer=outcome.text, kind=outcome.kind, tool=tool_id, project=project)
    return AskResult(
        False,
        error=describe_failure(outcome, tool_id or ""),
        kind=outcome.kind,
        tool=tool_id,
        project=project,
    )


async def answer_question(
    question: str,
    project_path: Optional[str | os.PathLike] = None,
    *,
    locator: Optional[ProjectLocator] = None,
    resolver: Optional[ToolResolver] = None,
    timeout: Optional[float] = None,
) -> AskResult:
    if not question or not question.strip():
        return AskResult(False, error=QUESTION_REQUIRED, kind="invalid")

    project: Optional[Project] = None
    try:
        cfg = get_config()
        if project_path is None:
            project = (locator or default_locator()).get_active_project()
            if project and project.path and project.exists:
                project_path = project.path
            else:
                if project:
                    logger.warning(
                        "Active project %r has no usable path (%r); using cwd", project.name, project.path
                    )
                project_path = os.getcwd()
        project_path = os.fspath(project_path)

        resolver = resolver or ToolResolver(probe_timeout=cfg.invocation.probe_timeout_sec)
        tool = await resolver.resolve()
        if tool is None:
            logger.warning("PM ask: no CLI tool installed")
            return _result(ToolNotFound(), None, project)

        context = await asyncio.to_thread(assemble, project_path)
        prompt = compose(question, context)
        logger.debug("PM ask prompt (%d chars) for %s", len(prompt), project_path)

        outcome = await run_tool(
            tool,
            prompt,
            cwd=project_path,
            timeout=timeout if timeout is not None else cfg.invocation.timeout_sec,
        )
        return _result(outcome, tool.id, project)
    except Exception as e:
        logger.exception("Error in PM ask")
        return AskResult(False, error=f"Failed to process question: {e}", kind="error", project=project)
