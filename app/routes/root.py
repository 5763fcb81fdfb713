"""
Root endpoint with service metadata.
"""

from __future__ import annotations

from fastapi import APIRouter

import core.config as config


router = APIRouter()


@router.get("/")
async def root():
    """Root endpoint with service info."""
    return {
        "service": config.SERVICE_NAME,
        "version": config.SERVICE_VERSION,
        "description": "Keyword-routed contact memory with embedding search",
        "embedding_model": config.EMBEDDING_MODEL,
        "extraction_model": config.EXTRACTION_MODEL if config.FIELD_EXTRACTOR != "none" else None,
        "headers": {
            "user_id": config.USER_ID_HEADER,
            "conversation_id": config.CONVERSATION_ID_HEADER,
        },
        "endpoints": {
            "ask": "/ask",
            "health": "/health",
            "health_deps": "/health/deps",
        },
    }
