"""
Record store access: exact-match queries, inserts and partial updates on
the messages table.

These functions are synchronous; async handlers call them through
asyncio.to_thread.
"""

from __future__ import annotations

from typing import Optional

from core.db import DB
from core.models import Message

BACKFILL_FIELDS = ("name", "linkedin", "company", "last_contacted")


def _session():
    if DB.SessionLocal is None:
        raise RuntimeError("Database not initialized - SessionLocal is None")
    return DB.SessionLocal()


def insert_message(
    *,
    user_id: str,
    conversation_id: str,
    content: str,
    embedding: bytes,
    created_at: str,
    name: Optional[str] = None,
    email: Optional[str] = None,
    linkedin: Optional[str] = None,
    company: Optional[str] = None,
    last_contacted: Optional[str] = None,
) -> int:
    """Insert a record and return its store-assigned id."""
    db = _session()
    try:
        message = Message(
            user_id=user_id,
            conversation_id=conversation_id,
            name=name,
            email=email,
            linkedin=linkedin,
            company=company,
            last_contacted=last_contacted,
            content=content,
            embedding=embedding,
            created_at=created_at,
        )
        db.add(message)
        db.commit()
        db.refresh(message)
        return message.id
    finally:
        db.close()


def first_id_by_email(email: str) -> Optional[int]:
    """Id of the first record carrying `email`, or None."""
    db = _session()
    try:
        row = (
            db.query(Message.id)
            .filter(Message.email == email)
            .order_by(Message.id.asc())
            .first()
        )
        return row[0] if row else None
    finally:
        db.close()


def merge_message(
    message_id: int,
    *,
    user_id: str,
    conversation_id: str,
    content: str,
    embedding: bytes,
    created_at: str,
    **contact_fields: Optional[str],
) -> bool:
    """Partial-fill merge into an existing record.

    Ownership, content, embedding and created_at are always overwritten;
    name/linkedin/company/last_contacted are only filled where currently NULL.
    """
    db = _session()
    try:
        message = db.query(Message).filter(Message.id == message_id).first()
        if message is None:
            return False
        message.user_id = user_id
        message.conversation_id = conversation_id
        message.content = content
        message.embedding = embedding
        message.created_at = created_at
        for field in BACKFILL_FIELDS:
            value = contact_fields.get(field)
            if getattr(message, field) is None and value is not None:
                setattr(message, field, value)
        db.commit()
        return True
    finally:
        db.close()


def set_connected_already(message_id: int, value: str) -> bool:
    db = _session()
    try:
        updated = (
            db.query(Message)
            .filter(Message.id == message_id)
            .update({Message.connected_already: value}, synchronize_session=False)
        )
        db.commit()
        return updated > 0
    finally:
        db.close()


def list_scoped_embeddings(user_id: str, conversation_id: str) -> list[dict]:
    """All records for the pair, in store order, with their raw embeddings."""
    db = _session()
    try:
        rows = (
            db.query(Message.id, Message.content, Message.created_at, Message.embedding)
            .filter(
                Message.user_id == user_id,
                Message.conversation_id == conversation_id,
            )
            .order_by(Message.id.asc())
            .all()
        )
        return [
            {
                "id": row.id,
                "content": row.content,
                "created_at": row.created_at,
                "embedding": row.embedding,
            }
            for row in rows
        ]
    finally:
        db.close()


def list_history(user_id: str, conversation_id: str) -> list[dict]:
    db = _session()
    try:
        rows = (
            db.query(Message)
            .filter(
                Message.user_id == user_id,
                Message.conversation_id == conversation_id,
            )
            .order_by(Message.created_at.asc(), Message.id.asc())
            .all()
        )
        return [row.to_history_dict() for row in rows]
    finally:
        db.close()

