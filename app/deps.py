"""
Dependency helpers for the FastAPI app.
"""

from __future__ import annotations

from typing import Optional

from fastapi import Request

import core.config as config
from core.context import RequestContext


def get_request_context(request: Request) -> Optional[RequestContext]:
    """Build the caller identity from headers; None when the user header is missing."""
    user_id = (request.headers.get(config.USER_ID_HEADER) or "").strip()
    if not user_id:
        return None
    conversation_id = (request.headers.get(config.CONVERSATION_ID_HEADER) or "").strip()
    return RequestContext.from_values(
        user_id=user_id,
        conversation_id=conversation_id or None,
        request_id=request.headers.get("x-request-id"),
    )
