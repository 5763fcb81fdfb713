"""
Field extractor: asks a chat model to rewrite messy "store" requests as a
single `store name=...; email=...; ...` line.
"""

from __future__ import annotations

import httpx

import core.config as config
from core.errors import ExtractionProviderError
from core.services.shared import (
    RETRYABLE_STATUS_CODES,
    async_sleep_backoff,
    log_extra,
    logger,
    openai_client,
)

EXTRACTION_SYSTEM_PROMPT = """
You are a helpful parser that extracts contact information from natural language.
When the user has written something like "store some info for John, his email is john@xyz.com",
you must convert it into a single line format like:

store name=John; email=john@xyz.com; company=...; last_contacted=...;

Include whichever fields you find (name, email, linkedin, company, last_contacted).
If any field is not found, omit it. Do not add extra text, just the line above.
Remember: never skip email if the user provided it explicitly.
"""


def _raise_extraction_unavailable(detail: str) -> None:
    logger.warning("Field extractor unavailable", extra=log_extra(detail=detail))
    raise ExtractionProviderError(f"field extractor unavailable: {detail}")


async def extract_fields_text(raw_text: str) -> str:
    """Return the structured `store key=value; ...` rendering of `raw_text`.

    With FIELD_EXTRACTOR=none the raw text is returned unchanged and parsed as-is.
    """
    if config.FIELD_EXTRACTOR == "none":
        return raw_text

    payload = {
        "model": config.EXTRACTION_MODEL,
        "temperature": config.EXTRACTION_TEMPERATURE,
        "messages": [
            {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
            {"role": "user", "content": raw_text},
        ],
    }
    async with openai_client() as client:
        for attempt in range(config.EXTRACTION_RETRY_MAX + 1):
            try:
                response = await client.post(
                    "/chat/completions",
                    json=payload,
                    timeout=config.EXTRACTION_TIMEOUT_SECONDS,
                )
            except httpx.RequestError as exc:
                if attempt >= config.EXTRACTION_RETRY_MAX:
                    _raise_extraction_unavailable(str(exc))
                await async_sleep_backoff(attempt)
                continue

            if response.status_code in RETRYABLE_STATUS_CODES:
                if attempt >= config.EXTRACTION_RETRY_MAX:
                    _raise_extraction_unavailable(f"status {response.status_code}")
                await async_sleep_backoff(attempt)
                continue
            if response.status_code >= 400:
                _raise_extraction_unavailable(f"status {response.status_code}")

            data = response.json()
            try:
                content = data["choices"][0]["message"]["content"]
            except (KeyError, IndexError, TypeError) as exc:
                raise ExtractionProviderError("field extractor returned no message") from exc
            structured = (content or "").strip()
            logger.debug("fields_extracted", extra=log_extra(structured=structured))
            return structured

    _raise_extraction_unavailable("no attempts made")
