"""PM Desk — FastAPI web server."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import get_config
from .log_config import setup_logging
from .web.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    cfg = get_config()
    setup_logging(level=cfg.logging.level)
    logger.info("Starting PM Desk on %s:%s", cfg.server.host, cfg.server.port)
    logger.warning(
        "No admission control: every question spawns its own agent CLI; "
        "concurrent questions run concurrently without limit"
    )
    yield
    logger.info("PM Desk stopped")


def create_app(resolver=None, locator=None, timeout: Optional[float] = None) -> FastAPI:
    """Build the app. Overrides are for embedding and tests; None means defaults."""
    app = FastAPI(title="PM Desk", lifespan=lifespan)
    app.state.resolver = resolver
    app.state.locator = locator
    app.state.timeout = timeout
    app.include_router(router)
    return app


app = create_app()
