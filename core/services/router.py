"""
Keyword intent router for /ask queries.

Intents are tried in INTENT_RULES order and the first keyword found in the
lower-cased query wins, so "store and search x" is a store request. There is
no tokenization or confidence scoring.
"""

from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable, Optional

from core.context import RequestContext
from core.services.history import handle_history
from core.services.search import handle_ask, handle_search
from core.services.shared import log_extra, logger
from core.services.status import handle_status_update
from core.services.store import handle_store
from core.validators import validate_identity, validate_query


class Intent(str, Enum):
    status_update = "status_update"
    store = "store"
    search = "search"
    history = "history"
    ask = "ask"


Handler = Callable[[str, RequestContext], Awaitable[dict]]

INTENT_RULES: tuple[tuple[Intent, Optional[str]], ...] = (
    (Intent.status_update, "emailed"),
    (Intent.store, "store"),
    (Intent.search, "search"),
    (Intent.history, "history"),
    (Intent.ask, None),
)

HANDLERS: dict[Intent, Handler] = {
    Intent.status_update: handle_status_update,
    Intent.store: handle_store,
    Intent.search: handle_search,
    Intent.history: handle_history,
    Intent.ask: handle_ask,
}


def classify(query: str) -> Intent:
    lower = query.lower()
    for intent, keyword in INTENT_RULES:
        if keyword is None or keyword in lower:
            return intent
    return Intent.ask


async def dispatch(query: str, context: RequestContext) -> dict:
    validate_query(query)
    validate_identity(context.user_id, context.conversation_id)
    intent = classify(query)
    logger.info(
        "ask_dispatch",
        extra=log_extra(
            intent=intent.value,
            user_id=context.user_id,
            conversation_id=context.conversation_id,
        ),
    )
    return await HANDLERS[intent](query, context)
