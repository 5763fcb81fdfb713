"""
Search and ask intents: embed the query, score every record in the
(user, conversation) scope and return the best matches.
"""

from __future__ import annotations

import asyncio
import re
from typing import List, Optional

import core.config as config
from core.codec import decode
from core.context import RequestContext
from core.services import embeddings, records
from core.services.shared import log_extra, logger
from core.similarity import cosine, rank

SEARCH_KEYWORD_RE = re.compile("search", re.IGNORECASE)


def strip_search_keyword(query: str) -> str:
    return SEARCH_KEYWORD_RE.sub("", query, count=1).strip()


def score_rows(query_vector: List[float], rows: List[dict]) -> List[dict]:
    """Score rows against the query; unscorable rows carry score None."""
    scored = []
    for row in rows:
        stored_vector = decode(row.get("embedding"))
        scored.append(
            {
                "id": row["id"],
                "content": row["content"],
                "created_at": row["created_at"],
                "score": cosine(query_vector, stored_vector),
            }
        )
    return scored


async def _ranked_matches(
    text: str,
    context: RequestContext,
    limit: int,
) -> Optional[List[dict]]:
    """Top matches for `text`, or None when the scope holds no records."""
    query_vector = await embeddings.embed_text(text)
    rows = await asyncio.to_thread(
        records.list_scoped_embeddings,
        context.user_id,
        context.conversation_id,
    )
    if not rows:
        return None
    scored = score_rows(query_vector, rows)
    ranked = rank(scored, limit)
    unscorable = sum(1 for item in scored if item["score"] is None)
    if unscorable:
        logger.warning("unscorable_records_skipped", extra=log_extra(count=unscorable))
    return ranked


async def handle_search(query: str, context: RequestContext) -> dict:
    search_text = strip_search_keyword(query)
    if not search_text:
        return {"error": "No search text found after removing 'search'."}

    limit = config.SEARCH_LIMIT
    results = await _ranked_matches(search_text, context, limit)
    if results is None:
        return {
            "results": [],
            "note": "No messages found for that user/conversation.",
        }
    logger.info("search_complete", extra=log_extra(count=len(results)))
    return {
        "results": results,
        "note": f'Top {limit} matches for "{search_text}".',
    }


async def handle_ask(query: str, context: RequestContext) -> dict:
    answer = await _ranked_matches(query, context, config.ASK_LIMIT)
    if answer is None:
        return {
            "answer": [],
            "note": "No stored data found for that user/conversation.",
        }
    logger.info("ask_complete", extra=log_extra(count=len(answer)))
    return {
        "answer": answer,
        "note": "Strictly returning existing messages from DB, no AI text generation.",
    }
