"""
History intent.
"""

from __future__ import annotations

import asyncio

from core.context import RequestContext
from core.services import records


async def handle_history(query: str, context: RequestContext) -> dict:
    """Every record in the scope, oldest first, with contact fields."""
    history = await asyncio.to_thread(
        records.list_history,
        context.user_id,
        context.conversation_id,
    )
    return {
        "history": history,
        "note": f"Full history for user={context.user_id}, convo={context.conversation_id}",
    }
