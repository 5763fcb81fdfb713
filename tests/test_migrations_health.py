import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.orm import sessionmaker
from starlette.testclient import TestClient

import core.config as config
from app.main import app
from core.db import DB, _ensure_schema_up_to_date, _get_schema_revisions


@pytest.fixture
def migrated_db(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'migrated.sqlite'}"
    monkeypatch.setattr(config, "DATABASE_URL", url)
    monkeypatch.setattr(config, "AUTO_MIGRATE_ON_STARTUP", True)
    engine = create_engine(url, connect_args={"check_same_thread": False})
    previous_engine = DB.engine
    previous_session = DB.SessionLocal
    DB.engine = engine
    DB.SessionLocal = sessionmaker(bind=engine)
    try:
        _ensure_schema_up_to_date(engine)
        yield engine
    finally:
        DB.engine = previous_engine
        DB.SessionLocal = previous_session
        engine.dispose()


def test_migrations_create_messages_table(migrated_db):
    inspector = inspect(migrated_db)
    assert "messages" in inspector.get_table_names()
    columns = {column["name"] for column in inspector.get_columns("messages")}
    assert {
        "id",
        "user_id",
        "conversation_id",
        "name",
        "email",
        "linkedin",
        "company",
        "last_contacted",
        "content",
        "embedding",
        "created_at",
        "connected_already",
    } <= columns
    index_names = {index["name"] for index in inspector.get_indexes("messages")}
    assert {"ix_messages_user_conversation", "ix_messages_email"} <= index_names

    current_rev, head_rev = _get_schema_revisions(migrated_db)
    assert current_rev == head_rev == "0001_messages"


def test_schema_behind_without_auto_migrate_fails(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'stale.sqlite'}"
    monkeypatch.setattr(config, "DATABASE_URL", url)
    monkeypatch.setattr(config, "AUTO_MIGRATE_ON_STARTUP", False)
    engine = create_engine(url)
    try:
        with pytest.raises(RuntimeError, match="schema out of date"):
            _ensure_schema_up_to_date(engine)
    finally:
        engine.dispose()


def test_health_reports_database_and_embedding_status(migrated_db):
    response = TestClient(app).get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["database"]["schema_up_to_date"] is True
    assert body["embedding_provider"]["circuit_breaker"]["open"] is False


def test_health_deps_probes_embedding_provider(migrated_db, fake_embeddings):
    response = TestClient(app).get("/health/deps")
    assert response.status_code == 200
    assert response.json()["embedding_provider"]["status"] == "ok"
    assert fake_embeddings == ["healthcheck"]


def test_health_without_database_is_503(monkeypatch):
    monkeypatch.setattr(DB, "engine", None)
    response = TestClient(app).get("/health")
    assert response.status_code == 503
