"""
FastAPI application entry point for the address verification service.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from backend.config import get_settings
from backend.dependencies import get_session, get_store_client
from backend.feed import SnapshotFeed
from backend.pages import router as pages_router
from backend.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    session = get_session()
    if session.identity is None and session.bootstrap() is None:
        logger.warning("No session identity, verification operations stay inert")
    app.state.admin_feed = SnapshotFeed(get_store_client(), session).open()
    try:
        yield
    finally:
        app.state.admin_feed.close()


def create_app() -> FastAPI:
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
    )
    app = FastAPI(
        title="Address Fix Pro", version="0.1.0", lifespan=lifespan
    )
    app.include_router(router, prefix=settings.api_prefix)
    app.include_router(pages_router)
    return app


app = create_app()
