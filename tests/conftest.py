import os

os.environ.setdefault("DB_BACKEND", "sqlite")
os.environ.setdefault("FIELD_EXTRACTOR", "none")
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("EMBEDDING_RETRY_MAX", "0")

import re

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.db import DB
from core.models import Base, Message
from core.services import embeddings
from core.services.shared import embedding_circuit_breaker


# Each known word owns one dimension; the last dimension is a small constant
# so that no text embeds to a zero vector.
VOCAB = [
    "project", "updates", "quarter", "roadmap", "status", "report",
    "pizza", "recipe", "basil", "dinner", "cooking",
    "jo", "acme", "contact", "email", "meeting", "notes",
]


def fake_vector(text: str) -> list[float]:
    vector = [0.0] * (len(VOCAB) + 1)
    for token in re.findall(r"[a-z]+", text.lower()):
        if token in VOCAB:
            vector[VOCAB.index(token)] += 1.0
    vector[-1] = 0.1
    return vector


@pytest.fixture(autouse=True)
def fake_embeddings(monkeypatch):
    calls = []

    async def _embed(text: str) -> list[float]:
        calls.append(text)
        return fake_vector(text)

    monkeypatch.setattr(embeddings, "embed_text", _embed)
    embedding_circuit_breaker.reset()
    return calls


@pytest.fixture
def server_db(tmp_path):
    db_path = tmp_path / "contactrecall.sqlite"
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(engine)
    previous_engine = DB.engine
    previous_session = DB.SessionLocal
    DB.engine = engine
    DB.SessionLocal = sessionmaker(bind=engine)
    try:
        yield engine
    finally:
        DB.engine = previous_engine
        DB.SessionLocal = previous_session
        engine.dispose()


@pytest.fixture
def db_session(server_db):
    session = DB.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def embed_vector():
    return fake_vector


@pytest.fixture
def load_message(server_db):
    def _load(message_id: int):
        session = DB.SessionLocal()
        try:
            message = session.query(Message).filter(Message.id == message_id).first()
            return message.to_history_dict() if message else None
        finally:
            session.close()

    return _load
