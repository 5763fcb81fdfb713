"""
Shared validation helpers for ContactRecall services.
"""

from __future__ import annotations

from core.config import (
    MAX_EMBEDDING_TEXT_LENGTH,
    MAX_QUERY_LENGTH,
    MAX_SHORT_TEXT_LENGTH,
)
from core.errors import ValidationIssue


def validate_required_text(value: str, field: str, max_len: int) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationIssue(f"{field} must be a non-empty string", field=field, error_type="required")
    if len(value) > max_len:
        raise ValidationIssue(f"{field} exceeds max length {max_len}", field=field, error_type="max_length")


def validate_query(query: str) -> None:
    validate_required_text(query, "query", MAX_QUERY_LENGTH)


def validate_identity(user_id: str, conversation_id: str) -> None:
    validate_required_text(user_id, "user_id", MAX_SHORT_TEXT_LENGTH)
    validate_required_text(conversation_id, "conversation_id", MAX_SHORT_TEXT_LENGTH)


def validate_embedding_text(text: str) -> None:
    validate_required_text(text, "text", MAX_EMBEDDING_TEXT_LENGTH)
