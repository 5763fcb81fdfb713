"""
Request-scoped context objects for core services.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import contextvars
import uuid

import core.config as config


@dataclass(frozen=True)
class RequestContext:
    user_id: str
    conversation_id: str = "default"
    request_id: Optional[str] = None

    @staticmethod
    def from_values(
        user_id: str,
        conversation_id: Optional[str] = None,
        request_id: Optional[str] = None,
    ) -> "RequestContext":
        return RequestContext(
            user_id=user_id,
            conversation_id=conversation_id or config.DEFAULT_CONVERSATION_ID,
            request_id=request_id or uuid.uuid4().hex,
        )


_CURRENT_REQUEST_CONTEXT: contextvars.ContextVar[Optional["RequestContext"]] = contextvars.ContextVar(
    "contactrecall_request_context",
    default=None,
)


def get_current_request_context() -> Optional["RequestContext"]:
    return _CURRENT_REQUEST_CONTEXT.get()


def set_current_request_context(context: Optional["RequestContext"]) -> contextvars.Token:
    return _CURRENT_REQUEST_CONTEXT.set(context)


def reset_current_request_context(token: contextvars.Token) -> None:
    _CURRENT_REQUEST_CONTEXT.reset(token)


__all__ = [
    "RequestContext",
    "get_current_request_context",
    "set_current_request_context",
    "reset_current_request_context",
]
