"""
FastAPI app wiring for ContactRecall.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

import core.config as config
from core.db import dispose_db, init_db
from core.services import shared
from app.middleware import configure_middleware
from app.routes.ask import router as ask_router
from app.routes.health import router as health_router
from app.routes.root import router as root_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize on startup, cleanup on shutdown."""
    init_db()
    shared.init_http_client()
    config.logger.info(
        "ContactRecall ready",
        extra={"user_id_header": config.USER_ID_HEADER, "db_backend": config.DB_BACKEND},
    )
    try:
        yield
    finally:
        await shared.cleanup_http_client()
        dispose_db()


app = FastAPI(title=config.SERVICE_NAME, version=config.SERVICE_VERSION, lifespan=lifespan)
configure_middleware(app)

app.include_router(ask_router)
app.include_router(health_router)
app.include_router(root_router)
