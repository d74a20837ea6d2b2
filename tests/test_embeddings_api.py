"""Tests for schema and row embedding generation and stored embedding reads"""

import json

from sqlalchemy import inspect, text

from conftest import FAKE_VECTOR, FakeEmbeddingService
from vector_ai.main import app
from vector_ai.services.embedding_service import EmbeddingService


def _users_embeddings_column(raw_engine):
    with raw_engine.connect() as conn:
        rows = conn.execute(text("SELECT id, embeddings FROM users ORDER BY id")).fetchall()
    return {row.id: row.embeddings for row in rows}


# ============================================================================
# SCHEMA EMBEDDINGS
# ============================================================================

def test_schema_embedding_content_and_format(client, embedding_service):
    response = client.post("/api/db/table/users/embedding")
    assert response.status_code == 200

    body = response.json()
    assert body["message"] == "Vector embedding generated for table 'users'"

    data = body["data"]
    content = data["content"]
    assert content.startswith("Table: users\nColumns: ")
    assert "id (INTEGER, PRIMARY KEY)" in content
    assert "name (VARCHAR(100), INDEX)" in content
    assert "email (VARCHAR(255), UNIQUE)" in content
    assert content.endswith(
        "Row Count: 3\nDescription: Database table containing 4 columns with 3 records."
    )
    assert embedding_service.calls == [content]

    assert data["embedding"] == [{"$numberDouble": str(value)} for value in FAKE_VECTOR]
    assert data["metadata"]["tableName"] == "users"
    assert data["metadata"]["recordCount"] == {"$numberInt": "3"}
    assert data["metadata"]["description"] == "Table users with 4 columns"
    assert isinstance(data["embeddingId"], int)
    assert data["createdAt"].isdigit()


def test_schema_embedding_is_stored_once_per_table(client):
    client.post("/api/db/table/users/embedding")
    client.post("/api/db/table/users/embedding")

    data = client.get("/api/db/table/users/embeddings").json()["data"]
    assert data["pagination"]["total"] == 1
    assert data["embeddings"][0]["row_id"] == "__schema__"
    assert data["embeddings"][0]["embedding"] == FAKE_VECTOR
    assert data["embeddings"][0]["metadata"]["type"] == "table_schema"


def test_schema_embedding_unknown_table_returns_404(client, embedding_service):
    response = client.post("/api/db/table/ghost/embedding")
    assert response.status_code == 404
    assert response.json()["message"] == "Table 'ghost' does not exist"
    assert embedding_service.calls == []


def test_schema_embedding_without_api_key_returns_500(client, monkeypatch):
    from vector_ai.config.settings import settings

    monkeypatch.setattr(settings, "OPENAI_API_KEY", None)
    app.state.embedding_service = EmbeddingService()

    response = client.post("/api/db/table/users/embedding")
    assert response.status_code == 500

    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Error generating table embedding"
    assert "OPENAI_API_KEY" in body["error"]


def test_all_schema_embeddings_skip_embeddings_table(client):
    # creates vector_embeddings before the batch runs
    client.post("/api/db/table/users/embedding")

    response = client.post("/api/db/tables/embeddings")
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["totalTables"] == 3
    assert data["successfulEmbeddings"] == 3
    assert data["failedEmbeddings"] == 0
    assert {e["metadata"]["tableName"] for e in data["embeddings"]} == {"users", "audit_log", "empty_things"}


def test_all_schema_embeddings_report_failures(client):
    app.state.embedding_service = FakeEmbeddingService(fail_on="Table: audit_log")

    data = client.post("/api/db/tables/embeddings").json()["data"]
    assert data["successfulEmbeddings"] == 2
    assert data["failedEmbeddings"] == 1
    assert data["failures"] == [
        {"tableName": "audit_log", "error": "embedding API unavailable", "status": "failed"}
    ]


# ============================================================================
# ROW EMBEDDINGS
# ============================================================================

def test_row_embeddings_store_in_both_places(client, raw_engine):
    response = client.post("/api/db/table/users/rows/embeddings")
    assert response.status_code == 200

    body = response.json()
    assert body["message"] == (
        "Generated embeddings for 3 rows from table 'users' "
        "and stored in both original table and embeddings table"
    )

    data = body["data"]
    assert data["totalProcessed"] == 3
    assert data["successfulEmbeddings"] == 3
    assert data["failedEmbeddings"] == 0
    assert data["pagination"] == {"offset": 0, "limit": None, "processedRows": 3}
    assert data["storage"]["embeddingsTable"] == "Stored in 'vector_embeddings' table"

    first = data["embeddings"][0]
    assert first["content"] == (
        "Table: users, Row 1\n"
        f"Data: id: 1, name: Alice, email: alice@example.com, bio: {'x' * 100}...\n"
        "Description: Record from users table containing information about Alice."
    )
    assert first["embedding"] == FAKE_VECTOR
    assert first["metadata"]["primaryKey"] == 1
    assert first["metadata"]["storedInTable"] is True

    second = data["embeddings"][1]
    assert "bio: null" in second["content"]

    stored = _users_embeddings_column(raw_engine)
    assert {pk: json.loads(value) for pk, value in stored.items()} == {
        1: FAKE_VECTOR, 2: FAKE_VECTOR, 3: FAKE_VECTOR
    }

    with raw_engine.connect() as conn:
        row_ids = conn.execute(
            text("SELECT row_id FROM vector_embeddings WHERE table_name = 'users' ORDER BY row_id")
        ).scalars().all()
    assert row_ids == ["1", "2", "3"]


def test_row_embeddings_are_upserted_on_rerun(client, raw_engine):
    client.post("/api/db/table/users/rows/embeddings")
    client.post("/api/db/table/users/rows/embeddings")

    with raw_engine.connect() as conn:
        total = conn.execute(text("SELECT COUNT(*) FROM vector_embeddings")).scalar()
    assert total == 3


def test_row_embedding_text_excludes_embeddings_column(client, embedding_service):
    client.post("/api/db/table/users/rows/embeddings")
    embedding_service.calls.clear()

    client.post("/api/db/table/users/rows/embeddings")
    assert embedding_service.calls
    assert all("embeddings:" not in call for call in embedding_service.calls)


def test_row_embeddings_offset_and_limit(client):
    data = client.post(
        "/api/db/table/users/rows/embeddings", params={"offset": 1, "limit": 1}
    ).json()["data"]

    assert data["totalProcessed"] == 1
    assert data["pagination"] == {"offset": 1, "limit": 1, "processedRows": 1}

    entry = data["embeddings"][0]
    assert entry["metadata"]["rowIndex"] == 1
    assert entry["metadata"]["primaryKey"] == 2
    assert entry["content"].startswith("Table: users, Row 2\n")


def test_row_embeddings_partial_failure(client, raw_engine):
    app.state.embedding_service = FakeEmbeddingService(fail_on="name: Bob")

    response = client.post("/api/db/table/users/rows/embeddings")
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["successfulEmbeddings"] == 2
    assert data["failedEmbeddings"] == 1
    assert data["embeddings"][1] == {
        "tableName": "users",
        "rowIndex": 1,
        "primaryKey": 2,
        "error": "embedding API unavailable",
        "status": "failed",
    }

    stored = _users_embeddings_column(raw_engine)
    assert stored[2] is None
    assert json.loads(stored[3]) == FAKE_VECTOR


def test_row_embeddings_require_primary_key(client, raw_engine):
    response = client.post("/api/db/table/audit_log/rows/embeddings")
    assert response.status_code == 400
    assert response.json()["message"] == (
        "Table 'audit_log' must have a primary key to generate embeddings"
    )

    columns = [column["name"] for column in inspect(raw_engine).get_columns("audit_log")]
    assert "embeddings" not in columns


def test_row_embeddings_empty_table(client, raw_engine):
    response = client.post("/api/db/table/empty_things/rows/embeddings")
    assert response.status_code == 200

    body = response.json()
    assert body["message"] == "No data found in table 'empty_things'"
    assert body["data"]["totalProcessed"] == 0
    assert body["data"]["embeddings"] == []

    columns = [column["name"] for column in inspect(raw_engine).get_columns("empty_things")]
    assert "embeddings" in columns


def test_row_embeddings_unknown_table_returns_404(client):
    assert client.post("/api/db/table/ghost/rows/embeddings").status_code == 404


def test_all_row_embeddings_skip_tables_without_primary_key(client):
    response = client.post("/api/db/tables/rows/embeddings")
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["totalTables"] == 3
    assert data["processedTables"] == 2
    assert data["totalProcessed"] == 3
    assert data["successfulEmbeddings"] == 3
    assert [t["tableName"] for t in data["skippedTables"]] == ["audit_log"]
    assert data["skippedTables"][0]["status"] == "skipped"


# ============================================================================
# STORED EMBEDDINGS
# ============================================================================

def test_embeddings_listing_before_any_generation(client):
    data = client.get("/api/db/embeddings").json()["data"]
    assert data["embeddings"] == []
    assert data["statistics"] == {"totalEmbeddings": 0, "byTable": []}
    assert data["pagination"]["total"] == 0
    assert data["pagination"]["hasMore"] is False
    assert set(data["pagination"]) == {"limit", "offset", "total", "hasMore"}


def test_all_embeddings_statistics_and_pagination(client):
    client.post("/api/db/table/users/rows/embeddings")
    client.post("/api/db/table/empty_things/embedding")

    data = client.get("/api/db/embeddings").json()["data"]
    assert data["statistics"]["totalEmbeddings"] == 4
    assert data["statistics"]["byTable"] == [
        {"table_name": "empty_things", "count": 1},
        {"table_name": "users", "count": 3},
    ]
    assert data["pagination"]["limit"] == 20
    assert len(data["embeddings"]) == 4

    page = client.get("/api/db/embeddings", params={"limit": 2, "offset": 1}).json()["data"]
    assert len(page["embeddings"]) == 2
    assert page["pagination"]["hasMore"] is True


def test_table_embeddings_filters_by_table(client):
    client.post("/api/db/table/users/rows/embeddings")
    client.post("/api/db/table/empty_things/embedding")

    data = client.get("/api/db/table/users/embeddings", params={"limit": 2}).json()["data"]
    assert data["tableName"] == "users"
    assert data["pagination"]["total"] == 3
    assert set(data["pagination"]) == {"limit", "offset", "total", "hasMore"}
    assert data["pagination"]["hasMore"] is True
    assert len(data["embeddings"]) == 2
    assert all(e["table_name"] == "users" for e in data["embeddings"])


def test_all_row_embeddings_report_table_errors(client, monkeypatch):
    from vector_ai.controllers import embeddings_controller

    original_fetch_rows = embeddings_controller.fetch_rows

    def fetch_rows(engine, table_name, *args, **kwargs):
        if table_name == "empty_things":
            raise RuntimeError("lost connection during query")
        return original_fetch_rows(engine, table_name, *args, **kwargs)

    monkeypatch.setattr(embeddings_controller, "fetch_rows", fetch_rows)

    response = client.post("/api/db/tables/rows/embeddings")
    assert response.status_code == 200

    data = response.json()["data"]
    tables = {t["tableName"]: t for t in data["tables"]}
    assert tables["empty_things"]["status"] == "Error"
    assert tables["empty_things"]["error"] == "lost connection during query"
    assert tables["empty_things"]["totalProcessed"] == 0
    assert tables["users"]["status"] == "OK"
    assert tables["users"]["successfulEmbeddings"] == 3
    assert data["processedTables"] == 1
    assert [t["tableName"] for t in data["skippedTables"]] == ["audit_log"]


def test_row_embeddings_with_binary_primary_key(client, raw_engine):
    with raw_engine.begin() as conn:
        conn.execute(text("CREATE TABLE blobs (id BLOB PRIMARY KEY, label VARCHAR(20))"))
        conn.execute(text("INSERT INTO blobs (id, label) VALUES (X'FF00', 'raw bytes')"))

    response = client.post("/api/db/table/blobs/rows/embeddings")
    assert response.status_code == 200

    entry = response.json()["data"]["embeddings"][0]
    assert entry["metadata"]["primaryKey"] == "/wA="
    assert entry["metadata"]["storedInTable"] is True
    assert "id: /wA=" in entry["content"]

    with raw_engine.connect() as conn:
        stored = conn.execute(text("SELECT embeddings FROM blobs")).scalar()
        row_id = conn.execute(
            text("SELECT row_id FROM vector_embeddings WHERE table_name = 'blobs'")
        ).scalar()
    assert json.loads(stored) == FAKE_VECTOR
    assert row_id == "/wA="
