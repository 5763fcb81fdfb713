"""
Shared configuration for ContactRecall core.
"""

from __future__ import annotations

import logging
import os

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").strip().upper()

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))
logger = logging.getLogger("contactrecall")


def _get_bool(env_name: str, default: bool) -> bool:
    value = os.environ.get(env_name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(env_name: str, default: int) -> int:
    value = os.environ.get(env_name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(env_name: str, default: float) -> float:
    value = os.environ.get(env_name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


SERVICE_NAME = "ContactRecall"
SERVICE_VERSION = "0.1.0"

# Server
HOST = os.environ.get("HOST", "0.0.0.0")
PORT = _get_int("PORT", 3000)

# Database settings
DB_BACKEND = os.environ.get("DB_BACKEND", "sqlite").strip().lower()
SQLITE_PATH = os.environ.get("SQLITE_PATH", "/data/contactrecall.db")
DATABASE_URL = os.environ.get("DATABASE_URL")
AUTO_MIGRATE_ON_STARTUP = _get_bool("AUTO_MIGRATE_ON_STARTUP", True)

# OpenAI settings
OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY")
OPENAI_BASE_URL = os.environ.get("OPENAI_BASE_URL", "https://api.openai.com/v1").rstrip("/")

# Embedding settings
EMBEDDING_PROVIDER = os.environ.get("EMBEDDING_PROVIDER", "openai").strip().lower()
EMBEDDING_MODEL = os.environ.get("EMBEDDING_MODEL", "text-embedding-ada-002")
EMBEDDING_TIMEOUT_SECONDS = _get_float("EMBEDDING_TIMEOUT_SECONDS", 30.0)
EMBEDDING_RETRY_MAX = _get_int("EMBEDDING_RETRY_MAX", 2)
EMBEDDING_RETRY_BACKOFF_SECONDS = _get_float("EMBEDDING_RETRY_BACKOFF_SECONDS", 0.5)
EMBEDDING_RETRY_JITTER_SECONDS = _get_float("EMBEDDING_RETRY_JITTER_SECONDS", 0.25)
EMBEDDING_FAILURE_THRESHOLD = _get_int("EMBEDDING_FAILURE_THRESHOLD", 5)
EMBEDDING_COOLDOWN_SECONDS = _get_int("EMBEDDING_COOLDOWN_SECONDS", 60)
EMBEDDING_HEALTHCHECK_ENABLED = _get_bool("EMBEDDING_HEALTHCHECK_ENABLED", True)

# Field extraction (store intent)
FIELD_EXTRACTOR = os.environ.get("FIELD_EXTRACTOR", "openai").strip().lower()
EXTRACTION_MODEL = os.environ.get("EXTRACTION_MODEL", "gpt-3.5-turbo")
EXTRACTION_TEMPERATURE = _get_float("EXTRACTION_TEMPERATURE", 0.2)
EXTRACTION_TIMEOUT_SECONDS = _get_float("EXTRACTION_TIMEOUT_SECONDS", 30.0)
EXTRACTION_RETRY_MAX = _get_int("EXTRACTION_RETRY_MAX", 2)

# Request identity
USER_ID_HEADER = os.environ.get("USER_ID_HEADER", "x-uid").strip().lower()
CONVERSATION_ID_HEADER = os.environ.get("CONVERSATION_ID_HEADER", "x-conversation-id").strip().lower()
DEFAULT_CONVERSATION_ID = os.environ.get("DEFAULT_CONVERSATION_ID", "default")

# Ranking and input limits
SEARCH_LIMIT = _get_int("SEARCH_LIMIT", 5)
ASK_LIMIT = _get_int("ASK_LIMIT", 3)
MAX_QUERY_LENGTH = _get_int("MAX_QUERY_LENGTH", 4000)
MAX_SHORT_TEXT_LENGTH = _get_int("MAX_SHORT_TEXT_LENGTH", 255)
MAX_EMBEDDING_TEXT_LENGTH = _get_int("MAX_EMBEDDING_TEXT_LENGTH", 8000)

# Serialize select+update on the same email within this process
STORE_MERGE_LOCKING = _get_bool("STORE_MERGE_LOCKING", True)


def validate_and_prepare_config() -> None:
    """Validate configuration and apply derived settings at startup."""
    global DATABASE_URL

    errors = []
    if DB_BACKEND not in {"postgres", "sqlite"}:
        errors.append("DB_BACKEND must be 'postgres' or 'sqlite'")

    if not DATABASE_URL:
        if DB_BACKEND == "sqlite":
            if not SQLITE_PATH:
                errors.append("SQLITE_PATH environment variable is required for sqlite")
            else:
                DATABASE_URL = f"sqlite:///{SQLITE_PATH}"
        else:
            errors.append("DATABASE_URL environment variable is required")
    else:
        is_sqlite_url = DATABASE_URL.lower().startswith("sqlite")
        if DB_BACKEND == "sqlite" and not is_sqlite_url:
            errors.append("DATABASE_URL must be a sqlite URL when DB_BACKEND=sqlite")
        if DB_BACKEND == "postgres" and is_sqlite_url:
            errors.append("DATABASE_URL must be a postgres URL when DB_BACKEND=postgres")

    if EMBEDDING_PROVIDER not in {"openai", "none"}:
        errors.append("EMBEDDING_PROVIDER must be 'openai' or 'none'")
    if FIELD_EXTRACTOR not in {"openai", "none"}:
        errors.append("FIELD_EXTRACTOR must be 'openai' or 'none'")
    if not OPENAI_API_KEY and (EMBEDDING_PROVIDER == "openai" or FIELD_EXTRACTOR == "openai"):
        errors.append("OPENAI_API_KEY environment variable is required")

    if not USER_ID_HEADER:
        errors.append("USER_ID_HEADER must not be empty")
    if SEARCH_LIMIT <= 0 or ASK_LIMIT <= 0:
        errors.append("SEARCH_LIMIT and ASK_LIMIT must be positive")

    if EMBEDDING_PROVIDER == "none":
        logger.warning("EMBEDDING_PROVIDER=none; store, search and ask requests will fail.")

    if errors:
        raise RuntimeError("Configuration invalid: " + "; ".join(errors))
