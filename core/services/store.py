"""
Store intent: parse contact fields and insert, merge by email, or skip.
"""

from __future__ import annotations

import asyncio
import re
from collections import defaultdict
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Optional

import core.config as config
from core.codec import encode
from core.context import RequestContext
from core.models import CONTACT_FIELDS
from core.services import embeddings, extractor, records
from core.services.shared import log_extra, logger, utc_timestamp

STORE_PREFIX_RE = re.compile(r"^store[:\s]*", re.IGNORECASE)


@dataclass
class ParsedFields:
    content: str = ""
    name: Optional[str] = None
    email: Optional[str] = None
    linkedin: Optional[str] = None
    company: Optional[str] = None
    last_contacted: Optional[str] = None

    def contact_fields(self) -> dict:
        return {key: getattr(self, key) for key in CONTACT_FIELDS}

    @property
    def has_contact_details(self) -> bool:
        return bool(self.name or self.linkedin or self.company)


def parse_fields(store_text: str) -> ParsedFields:
    """Parse `store name=...; email=...` text.

    The leading `store` keyword is dropped and the rest is kept verbatim as
    content. Segments split on `;` then on the first `=`; unknown keys and
    empty values are ignored.
    """
    text = STORE_PREFIX_RE.sub("", (store_text or "").strip(), count=1).strip()
    parsed = ParsedFields(content=text)
    for part in text.split(";"):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        key = key.strip().lower()
        value = value.strip()
        if key in CONTACT_FIELDS and value:
            setattr(parsed, key, value)
    return parsed


class KeyedLocks:
    """Per-key asyncio locks; entries are dropped once nobody holds or waits."""

    def __init__(self):
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = defaultdict(int)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._users[key] += 1
        try:
            async with lock:
                yield
        finally:
            self._users[key] -= 1
            if self._users[key] <= 0:
                self._users.pop(key, None)
                self._locks.pop(key, None)


email_locks = KeyedLocks()


@asynccontextmanager
async def _merge_region(email: str) -> AsyncIterator[None]:
    if not config.STORE_MERGE_LOCKING:
        yield
        return
    async with email_locks.hold(email.lower()):
        yield


async def handle_store(query: str, context: RequestContext) -> dict:
    structured = await extractor.extract_fields_text(query)
    parsed = parse_fields(structured)

    if not (parsed.email or parsed.has_contact_details or parsed.content):
        return {"error": "Nothing to store: no fields or content extracted."}

    if not parsed.email and parsed.has_contact_details:
        logger.info("store_skipped_missing_email", extra=log_extra(user_id=context.user_id))
        return {
            "status": "skipped",
            "message": "Missing email for contact. Insert skipped.",
        }

    vector = await embeddings.embed_text(parsed.content)
    embedding = encode(vector)

    if not parsed.email:
        message_id = await asyncio.to_thread(
            records.insert_message,
            user_id=context.user_id,
            conversation_id=context.conversation_id,
            content=parsed.content,
            embedding=embedding,
            created_at=utc_timestamp(),
        )
        logger.info("store_inserted_log", extra=log_extra(id=message_id))
        return {
            "status": "ok",
            "action": "inserted",
            "id": message_id,
            "message": f"Stored general message log [id={message_id}].",
        }

    async with _merge_region(parsed.email):
        # Stamped under the lock so a waiting store never writes an older time.
        created_at = utc_timestamp()
        existing_id = await asyncio.to_thread(records.first_id_by_email, parsed.email)
        if existing_id is not None:
            await asyncio.to_thread(
                records.merge_message,
                existing_id,
                user_id=context.user_id,
                conversation_id=context.conversation_id,
                content=parsed.content,
                embedding=embedding,
                created_at=created_at,
                **parsed.contact_fields(),
            )
            logger.info("store_merged", extra=log_extra(id=existing_id))
            return {
                "status": "ok",
                "action": "updated",
                "id": existing_id,
                "message": f"Updated existing record (partial) for email={parsed.email}.",
            }

        message_id = await asyncio.to_thread(
            records.insert_message,
            user_id=context.user_id,
            conversation_id=context.conversation_id,
            content=parsed.content,
            embedding=embedding,
            created_at=created_at,
            **parsed.contact_fields(),
        )
    logger.info("store_inserted", extra=log_extra(id=message_id))
    return {
        "status": "ok",
        "action": "inserted",
        "id": message_id,
        "message": f"Inserted new record for email={parsed.email} [id={message_id}].",
    }
