"""
The /ask endpoint.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

import core.config as config
from app.deps import get_request_context
from core.context import (
    RequestContext,
    reset_current_request_context,
    set_current_request_context,
)
from core.errors import ValidationIssue
from core.services.router import dispatch
from core.services.shared import log_extra


router = APIRouter()


def _missing_input_response() -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": f"Missing {config.USER_ID_HEADER} header or 'query' in body"},
    )


async def _read_query(request: Request) -> Optional[str]:
    try:
        body = await request.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        return None
    return query


@router.post("/ask")
async def ask(
    request: Request,
    context: Optional[RequestContext] = Depends(get_request_context),
):
    """Classify the query by keyword and run the matching intent."""
    query = await _read_query(request)
    if context is None or query is None:
        return _missing_input_response()

    token = set_current_request_context(context)
    try:
        config.logger.debug(
            "ask_request",
            extra=log_extra(
                user_id=context.user_id,
                conversation_id=context.conversation_id,
                query=query,
            ),
        )
        return await dispatch(query, context)
    except ValidationIssue as exc:
        config.logger.info(
            "ask_validation_error",
            extra=log_extra(field=exc.field, error_type=exc.error_type),
        )
        return JSONResponse(status_code=400, content={"error": str(exc)})
    except Exception as exc:
        config.logger.exception("Error in /ask route", extra=log_extra())
        return JSONResponse(status_code=500, content={"error": str(exc)})
    finally:
        reset_current_request_context(token)
