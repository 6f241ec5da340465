"""
PM API — ask the installed agent CLI about the active project.
Thin HTTP adapter over pmdesk.ask; status mapping lives here, nowhere else.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ...agents.tools import ToolResolver
from ...ask import QUESTION_REQUIRED, answer_question
from ...config import get_config

logger = logging.getLogger(__name__)
router = APIRouter()


class AskRequest(BaseModel):
    """PM question request."""

    question: str = ""


def _resolver(request: Request) -> Optional[ToolResolver]:
    return getattr(request.app.state, "resolver", None)


@router.post("/api/pm/ask")
async def pm_ask(body: AskRequest, request: Request):
    """Answer a question about the active project's status."""
    if not body.question.strip():
        return JSONResponse({"error": QUESTION_REQUIRED}, status_code=400)

    state = request.app.state
    result = await answer_question(
        body.question,
        locator=getattr(state, "locator", None),
        resolver=_resolver(request),
        timeout=getattr(state, "timeout", None),
    )
    project = result.project.to_dict() if result.project else None
    if not result.success:
        logger.warning("PM ask failed (%s): %s", result.kind, result.error)
        return JSONResponse(
            {
                "success": False,
                "error": "Failed to process question",
                "details": result.error,
                "kind": result.kind,
            },
            status_code=500,
        )
    return JSONResponse(
        {
            "success": True,
            "question": body.question,
            "answer": result.answer,
            "tool": result.tool,
            "project": project,
        }
    )


@router.get("/api/check-cli")
async def check_cli(request: Request):
    """Which agent CLIs are installed, and which one questions would use."""
    resolver = _resolver(request) or ToolResolver(
        probe_timeout=get_config().invocation.probe_timeout_sec
    )
    return JSONResponse(await resolver.status())
