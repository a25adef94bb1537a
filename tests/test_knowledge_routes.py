
import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient, ASGITransport

from kb_server.main import create_app
from kb_server.api.dependencies import get_knowledge_index
from kb_server.config import settings
from kb_server.knowledge.index import KnowledgeIndex


@pytest.fixture
def corpus(tmp_path):
    root = tmp_path / "kb"
    root.mkdir()
    (root / "a.md").write_text("# Alpha\ncats are great\n## Care\nfeed daily", encoding="utf-8")
    (root / "b.md").write_text("# Beta\ndogs are great", encoding="utf-8")
    return root


@pytest.fixture
def knowledge_index(corpus):
    return KnowledgeIndex(directory=corpus)


@pytest.fixture
def app(knowledge_index):
    application = create_app()
    application.dependency_overrides[get_knowledge_index] = lambda: knowledge_index
    yield application
    application.dependency_overrides = {}


@pytest.fixture
def client(app):
    # Entering the client runs the lifespan, which loads the index.
    with TestClient(app) as c:
        yield c


def test_health(client):
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_startup_loads_index(client):
    resp = client.get("/knowledge/stats")
    assert resp.status_code == 200
    data = resp.json()
    assert data["state"] == "ready"
    assert data["total_documents"] == 2


def test_list_documents(client):
    resp = client.get("/knowledge/")
    assert resp.status_code == 200
    data = resp.json()
    assert [d["id"] for d in data] == ["a", "b"]
    assert data[0]["title"] == "Alpha"
    assert data[0]["size"] == len("# Alpha\ncats are great\n## Care\nfeed daily")


def test_get_document(client):
    resp = client.get("/knowledge/a")
    assert resp.status_code == 200
    data = resp.json()
    assert data["title"] == "Alpha"
    assert [(s["title"], s["level"]) for s in data["sections"]] == [("Alpha", 1), ("Care", 2)]
    assert data["sections"][1]["content"] == "feed daily"


def test_get_unknown_document_is_404(client):
    resp = client.get("/knowledge/missing")
    assert resp.status_code == 404
    assert resp.json()["error"] == "not_found"


def test_vector_search(client):
    resp = client.post("/knowledge/search", json={"query": "cats", "limit": 5})
    assert resp.status_code == 200
    data = resp.json()
    assert [r["id"] for r in data] == ["a"]
    assert data[0]["score"] > 0.1


def test_keyword_search(client):
    resp = client.post(
        "/knowledge/search",
        json={"query": "great", "limit": 5, "mode": "keyword"},
    )
    assert resp.status_code == 200
    assert {r["id"] for r in resp.json()} == {"a", "b"}


def test_empty_query_returns_no_results(client):
    resp = client.post("/knowledge/search", json={"query": ""})
    assert resp.status_code == 200
    assert resp.json() == []


def test_invalid_search_mode_rejected(client):
    resp = client.post("/knowledge/search", json={"query": "cats", "mode": "fuzzy"})
    assert resp.status_code == 422


def test_search_preview_is_truncated(client, monkeypatch):
    monkeypatch.setattr(settings, "preview_chars", 7)

    resp = client.post("/knowledge/search", json={"query": "cats"})

    assert resp.json()[0]["text"] == "# Alpha..."


def test_refresh(client, corpus):
    (corpus / "c.md").write_text("# Gamma\nbirds sing", encoding="utf-8")

    resp = client.post("/knowledge/refresh")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "count": 3}

    resp = client.post("/knowledge/search", json={"query": "birds"})
    assert [r["id"] for r in resp.json()] == ["c"]


def test_refresh_failure_is_503(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    broken_index = KnowledgeIndex(directory=blocker)

    application = create_app()
    application.dependency_overrides[get_knowledge_index] = lambda: broken_index

    # Startup load fails; the server still comes up with an empty index.
    with TestClient(application) as c:
        assert c.get("/knowledge/stats").json()["state"] == "empty"

        resp = c.post("/knowledge/refresh")
        assert resp.status_code == 503
        assert resp.json()["error"] == "knowledge_load_failed"


@pytest.fixture
async def async_client(app, knowledge_index):
    knowledge_index.load()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


async def test_async_search(async_client):
    resp = await async_client.post("/knowledge/search", json={"query": "dogs"})
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()] == ["b"]


def test_unexpected_failure_is_500(corpus):
    class ExplodingIndex(KnowledgeIndex):
        def get_all(self):
            raise RuntimeError("boom")

    application = create_app()
    application.dependency_overrides[get_knowledge_index] = lambda: ExplodingIndex(directory=corpus)

    with TestClient(application, raise_server_exceptions=False) as c:
        resp = c.get("/knowledge/")

    assert resp.status_code == 500
    assert resp.json() == {"error": "internal_server_error"}
