"""
Shared helpers for ContactRecall services: HTTP client, retry backoff,
circuit breaker and log payloads.
"""

from __future__ import annotations

import asyncio
import random
import threading
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional

import httpx

import core.config as config
from core.context import get_current_request_context

logger = config.logger

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

http_client: Optional[httpx.AsyncClient] = None  # Reusable HTTP client for OpenAI API


def _openai_headers() -> dict:
    headers = {"Content-Type": "application/json"}
    if config.OPENAI_API_KEY:
        headers["Authorization"] = f"Bearer {config.OPENAI_API_KEY}"
    return headers


def init_http_client() -> None:
    """Initialize HTTP client for OpenAI API calls."""
    global http_client
    http_client = httpx.AsyncClient(
        base_url=config.OPENAI_BASE_URL,
        timeout=httpx.Timeout(config.EMBEDDING_TIMEOUT_SECONDS),
        limits=httpx.Limits(max_keepalive_connections=10, max_connections=100),
        headers=_openai_headers(),
    )
    logger.info("HTTP client initialized")


async def cleanup_http_client() -> None:
    """Clean up HTTP client on shutdown."""
    global http_client
    if http_client:
        await http_client.aclose()
        http_client = None
        logger.info("HTTP client closed")


@asynccontextmanager
async def openai_client() -> AsyncIterator[httpx.AsyncClient]:
    """Yield the pooled client, or a short-lived one when the app has not started it."""
    if http_client is not None:
        yield http_client
        return
    async with httpx.AsyncClient(
        base_url=config.OPENAI_BASE_URL,
        timeout=httpx.Timeout(config.EMBEDDING_TIMEOUT_SECONDS),
        headers=_openai_headers(),
    ) as client:
        yield client


async def async_sleep_backoff(attempt: int) -> None:
    base = config.EMBEDDING_RETRY_BACKOFF_SECONDS * (2 ** attempt)
    jitter = random.uniform(0, config.EMBEDDING_RETRY_JITTER_SECONDS)
    await asyncio.sleep(base + jitter)


def utc_timestamp() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. 2024-05-01T12:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def log_extra(**fields) -> dict:
    context = get_current_request_context()
    if context is not None:
        fields.setdefault("request_id", context.request_id)
    return fields


class EmbeddingCircuitBreaker:
    def __init__(self, failure_threshold: int, cooldown_seconds: int):
        self._failure_threshold = max(1, failure_threshold)
        self._cooldown_seconds = max(1, cooldown_seconds)
        self._lock = threading.Lock()
        self._consecutive_failures = 0
        self._cooldown_until = 0.0
        self._last_error: Optional[str] = None
        self._last_failure_ts: Optional[float] = None
        self._last_success_ts: Optional[float] = None

    def is_open(self) -> bool:
        with self._lock:
            return time.time() < self._cooldown_until

    def record_success(self) -> None:
        with self._lock:
            self._consecutive_failures = 0
            self._cooldown_until = 0.0
            self._last_success_ts = time.time()

    def record_failure(self, error: str) -> None:
        with self._lock:
            self._consecutive_failures += 1
            self._last_error = error
            self._last_failure_ts = time.time()
            if self._consecutive_failures >= self._failure_threshold:
                self._cooldown_until = time.time() + self._cooldown_seconds

    def reset(self) -> None:
        with self._lock:
            self._consecutive_failures = 0
            self._cooldown_until = 0.0
            self._last_error = None

    def status(self) -> dict:
        with self._lock:
            return {
                "open": time.time() < self._cooldown_until,
                "consecutive_failures": self._consecutive_failures,
                "cooldown_until_epoch": int(self._cooldown_until) if self._cooldown_until else None,
                "last_error": self._last_error,
                "last_failure_epoch": int(self._last_failure_ts) if self._last_failure_ts else None,
                "last_success_epoch": int(self._last_success_ts) if self._last_success_ts else None,
            }


embedding_circuit_breaker = EmbeddingCircuitBreaker(
    failure_threshold=config.EMBEDDING_FAILURE_THRESHOLD,
    cooldown_seconds=config.EMBEDDING_COOLDOWN_SECONDS,
)
