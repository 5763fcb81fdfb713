"""
Embedding provider (OpenAI embeddings endpoint).
"""

from __future__ import annotations

from typing import List

import httpx

import core.config as config
from core.errors import EmbeddingProviderError
from core.services.shared import (
    RETRYABLE_STATUS_CODES,
    async_sleep_backoff,
    embedding_circuit_breaker,
    logger,
    openai_client,
)
from core.validators import validate_embedding_text


def _raise_embedding_unavailable(detail: str) -> None:
    logger.warning("Embedding provider unavailable", extra={"detail": detail})
    raise EmbeddingProviderError(f"embedding provider unavailable: {detail}")


def _extract_vector(data: dict) -> List[float]:
    try:
        vector = data["data"][0]["embedding"]
    except (KeyError, IndexError, TypeError):
        vector = None
    if not vector or not isinstance(vector, list):
        raise EmbeddingProviderError("Embedding generation failed or returned invalid data")
    return vector


async def embed_text(text: str) -> List[float]:
    """Generate an embedding for `text` using the configured provider."""
    validate_embedding_text(text)
    if config.EMBEDDING_PROVIDER == "none":
        _raise_embedding_unavailable("embedding provider disabled")
    if embedding_circuit_breaker.is_open():
        _raise_embedding_unavailable("circuit breaker open")

    async with openai_client() as client:
        for attempt in range(config.EMBEDDING_RETRY_MAX + 1):
            try:
                response = await client.post(
                    "/embeddings",
                    json={
                        "model": config.EMBEDDING_MODEL,
                        "input": text,
                    },
                    timeout=config.EMBEDDING_TIMEOUT_SECONDS,
                )
            except httpx.RequestError as exc:
                if attempt >= config.EMBEDDING_RETRY_MAX:
                    embedding_circuit_breaker.record_failure(str(exc))
                    _raise_embedding_unavailable(str(exc))
                await async_sleep_backoff(attempt)
                continue

            if response.status_code in RETRYABLE_STATUS_CODES:
                if attempt >= config.EMBEDDING_RETRY_MAX:
                    embedding_circuit_breaker.record_failure(f"status {response.status_code}")
                    _raise_embedding_unavailable(f"status {response.status_code}")
                await async_sleep_backoff(attempt)
                continue
            if response.status_code >= 400:
                embedding_circuit_breaker.record_failure(f"status {response.status_code}")
                _raise_embedding_unavailable(f"status {response.status_code}")

            vector = _extract_vector(response.json())
            embedding_circuit_breaker.record_success()
            return vector

    _raise_embedding_unavailable("no attempts made")
