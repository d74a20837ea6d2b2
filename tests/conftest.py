"""
Shared pytest configuration and fixtures.

Tests run against a temporary SQLite database per test and a fake embedding
service, so no MySQL server or OpenAI key is needed.
"""

import os
import tempfile

# Settings are read on import, so the environment must be prepared first
_BOOTSTRAP_DIR = tempfile.mkdtemp(prefix="vector_ai_tests_")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_BOOTSTRAP_DIR, 'bootstrap.db')}"
os.environ["LOG_TO_FILE"] = "false"
os.environ["LOG_TO_CONSOLE"] = "false"
os.environ["EMBEDDING_REQUEST_DELAY_SECONDS"] = "0"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("API_KEY", None)

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, text

from vector_ai.config.database import close_connection, connect_db
from vector_ai.config.settings import settings
from vector_ai.main import app


SCHEMA_STATEMENTS = [
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name VARCHAR(100) NOT NULL, email VARCHAR(255), bio TEXT)",
    "CREATE UNIQUE INDEX uq_users_email ON users (email)",
    "CREATE INDEX idx_users_name ON users (name)",
    "CREATE TABLE audit_log (event VARCHAR(50), happened_at VARCHAR(30))",
    "CREATE TABLE empty_things (id INTEGER PRIMARY KEY, title VARCHAR(50))",
]

USERS = [
    {"id": 1, "name": "Alice", "email": "alice@example.com", "bio": "x" * 150},
    {"id": 2, "name": "Bob", "email": "bob@example.com", "bio": None},
    {"id": 3, "name": "Carol", "email": "carol@example.com", "bio": "Likes databases"},
]

FAKE_VECTOR = [0.1, 0.2, 0.3]


class FakeEmbeddingService:
    """Deterministic stand-in for EmbeddingService."""

    model_name = "fake-embedding-model"

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.calls = []

    def is_configured(self):
        return True

    def embed_query(self, text):
        self.calls.append(text)
        if self.fail_on and self.fail_on in text:
            raise RuntimeError("embedding API unavailable")
        return list(FAKE_VECTOR)


@pytest.fixture
def database_url(tmp_path, monkeypatch):
    """Seed a fresh SQLite database and point the settings at it."""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        for statement in SCHEMA_STATEMENTS:
            conn.execute(text(statement))
        conn.execute(
            text("INSERT INTO users (id, name, email, bio) VALUES (:id, :name, :email, :bio)"),
            USERS
        )
        conn.execute(
            text("INSERT INTO audit_log (event, happened_at) VALUES ('login', '2024-01-01')")
        )
    engine.dispose()

    monkeypatch.setattr(settings, "DATABASE_URL", url)
    return url


@pytest.fixture
def raw_engine(database_url):
    """Independent engine for asserting on database state."""
    engine = create_engine(database_url)
    yield engine
    engine.dispose()


@pytest.fixture
def db_engine(database_url):
    """The application's shared engine, connected to the test database."""
    engine = connect_db(database_url)
    yield engine
    close_connection()


@pytest.fixture
def embedding_service():
    return FakeEmbeddingService()


@pytest.fixture
def client(database_url, embedding_service):
    with TestClient(app) as test_client:
        app.state.embedding_service = embedding_service
        yield test_client
