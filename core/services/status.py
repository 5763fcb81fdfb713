"""
Status-update intent: "emailed jo@x.com successfully" flips
connected_already on the matching record.
"""

from __future__ import annotations

import asyncio
import re
from typing import Optional

from core.context import RequestContext
from core.services import records
from core.services.shared import log_extra, logger

EMAIL_RE = re.compile(r"[A-Za-z0-9._%+\-]+@[A-Za-z0-9.\-]+\.[A-Za-z]{2,}")

SUCCESS_MARKERS = ("successfully", "delivered", "completed")
FAILURE_MARKERS = ("failed", "fail")


def extract_email(text: str) -> Optional[str]:
    match = EMAIL_RE.search(text or "")
    return match.group(0) if match else None


def classify_outcome(lower: str) -> Optional[bool]:
    """True for success, False for failure, None when neither is stated.

    An explicit "connected_already ... true/false" wins. "unsuccessful" is
    checked before the success markers because "unsuccessfully" contains
    "successfully".
    """
    if "connected_already" in lower:
        tail = lower.split("connected_already", 1)[1]
        if "true" in tail:
            return True
        if "false" in tail:
            return False
    if "unsuccessful" in lower:
        return False
    if any(marker in lower for marker in SUCCESS_MARKERS):
        return True
    if any(marker in lower for marker in FAILURE_MARKERS):
        return False
    return None


async def handle_status_update(query: str, context: RequestContext) -> dict:
    email = extract_email(query)
    if not email:
        return {"error": "No email found in your statement."}

    outcome = classify_outcome(query.lower())
    if outcome is None:
        return {
            "status": "unknown",
            "message": "Could not tell whether the email succeeded or failed.",
        }
    value = "true" if outcome else "false"

    message_id = await asyncio.to_thread(records.first_id_by_email, email)
    if message_id is None:
        return {"status": "not_found", "message": f"No record found for email={email}."}

    await asyncio.to_thread(records.set_connected_already, message_id, value)
    logger.info("status_updated", extra=log_extra(id=message_id, connected_already=value))
    return {
        "status": "ok",
        "message": f"Set connected_already='{value}' for email={email}",
    }
