import asyncio

import pytest

from core.codec import encode
from core.context import RequestContext
from core.models import Message
from core.services import records
from core.services.history import handle_history
from core.services.status import classify_outcome, extract_email, handle_status_update


def _insert(created_at: str, content: str, email=None, user_id="user-1", conversation_id="default", **fields) -> int:
    return records.insert_message(
        user_id=user_id,
        conversation_id=conversation_id,
        content=content,
        embedding=encode([1.0, 0.0]),
        created_at=created_at,
        email=email,
        **fields,
    )


def _run(handler, query: str, user_id="user-1", conversation_id="default") -> dict:
    context = RequestContext.from_values(user_id, conversation_id)
    return asyncio.run(handler(query, context))


def test_history_sorted_by_created_at(server_db):
    late = _insert("2024-03-01T00:00:00.000Z", "late")
    early = _insert("2024-01-01T00:00:00.000Z", "early", email="jo@x.com", name="Jo")
    middle = _insert("2024-02-01T00:00:00.000Z", "middle")
    _insert("2023-01-01T00:00:00.000Z", "other convo", conversation_id="other")

    result = _run(handle_history, "history")

    assert [row["id"] for row in result["history"]] == [early, middle, late]
    assert result["history"][0]["name"] == "Jo"
    assert result["history"][0]["email"] == "jo@x.com"
    assert "connected_already" in result["history"][0]
    assert "embedding" not in result["history"][0]
    assert result["note"] == "Full history for user=user-1, convo=default"


def test_history_empty_scope(server_db):
    assert _run(handle_history, "history")["history"] == []


@pytest.mark.parametrize(
    "text, expected",
    [
        ("emailed jo@x.com successfully", True),
        ("emailed jo@x.com, delivered", True),
        ("emailed jo@x.com completed", True),
        ("emailed jo@x.com connected_already = true", True),
        ("emailed jo@x.com failed", False),
        ("emailed jo@x.com but it fail", False),
        ("emailed jo@x.com unsuccessfully", False),
        ("emailed jo@x.com connected_already false", False),
        ("emailed jo@x.com yesterday", None),
    ],
)
def test_classify_outcome(text, expected):
    assert classify_outcome(text) is expected


def test_extract_email_takes_first_match():
    assert extract_email("emailed a.b+c@mail.example.com and z@y.io") == "a.b+c@mail.example.com"
    assert extract_email("emailed nobody") is None


def test_status_update_sets_true_and_leaves_other_fields(server_db, db_session):
    message_id = _insert(
        "2024-01-01T00:00:00.000Z",
        "name=Jo; email=jo@x.com",
        email="jo@x.com",
        name="Jo",
        company="Acme",
    )

    result = _run(handle_status_update, "Emailed jo@x.com successfully")

    assert result == {
        "status": "ok",
        "message": "Set connected_already='true' for email=jo@x.com",
    }
    message = db_session.query(Message).filter(Message.id == message_id).one()
    assert message.connected_already == "true"
    assert message.name == "Jo"
    assert message.company == "Acme"
    assert message.content == "name=Jo; email=jo@x.com"
    assert message.created_at == "2024-01-01T00:00:00.000Z"


def test_status_update_sets_false(server_db, load_message):
    message_id = _insert("2024-01-01T00:00:00.000Z", "email=jo@x.com", email="jo@x.com")
    result = _run(handle_status_update, "emailed jo@x.com failed")
    assert result["status"] == "ok"
    assert load_message(message_id)["connected_already"] == "false"


def test_status_update_not_found(server_db):
    result = _run(handle_status_update, "emailed jo@x.com successfully")
    assert result == {
        "status": "not_found",
        "message": "No record found for email=jo@x.com.",
    }


def test_status_update_without_email(server_db):
    result = _run(handle_status_update, "emailed someone successfully")
    assert result == {"error": "No email found in your statement."}


def test_status_update_unknown_outcome(server_db, load_message):
    message_id = _insert("2024-01-01T00:00:00.000Z", "email=jo@x.com", email="jo@x.com")
    result = _run(handle_status_update, "emailed jo@x.com today")
    assert result["status"] == "unknown"
    assert load_message(message_id)["connected_already"] is None
