"""End-to-end tests for the HTTP surface, run in-process over ASGI."""

import httpx
import pytest
from conftest import FakeDocumentStore, FakeLLM, llm_json

from vault_search.api.app import build_dispatcher, create_app
from vault_search.api.auth import issue_token
from vault_search.api.rate_limiter import SlidingWindowRateLimiter
from vault_search.exceptions import FetchError, GenerationError
from vault_search.storage.sqlite_doc_store import SQLiteDocStore

LAB_RECORD = {
    "displayName": "Blood Panel March",
    "filename": "lab_march.pdf",
    "category": "Lab Results",
    "uploadDate": "2024-03-01T09:00:00+00:00",
    "searchSummary": "Complete blood count. LDL slightly elevated.",
    "structuredData": {"LDL": "142 mg/dL"},
}


@pytest.fixture
async def app(settings):
    doc_store = SQLiteDocStore(settings.sqlite_doc_db_path)
    await doc_store.initialize()

    app = create_app()
    app.state.settings = settings
    app.state.doc_store = doc_store
    app.state.rate_limiter = SlidingWindowRateLimiter()
    app.state.dispatcher = build_dispatcher(settings, document_store=doc_store, llm=FakeLLM())
    return app


def use_llm(app, llm, store=None):
    app.state.dispatcher = build_dispatcher(
        app.state.settings,
        document_store=store or app.state.doc_store,
        llm=llm,
    )


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def auth_headers(settings):
    return {"Authorization": f"Bearer {issue_token('user-1', settings)}"}


async def test_health(client):
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "doc_count": 0, "session_backend": "memory"}
    assert "X-Request-ID" in resp.headers


async def test_token_exchange(client):
    bad = await client.post("/auth/token", json={"api_key": "nope", "user_id": "user-1"})
    assert bad.status_code == 401

    good = await client.post("/auth/token", json={"api_key": "test-api-key", "user_id": "user-1"})
    assert good.status_code == 200
    token = good.json()["access_token"]
    resp = await client.get("/documents", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


async def test_search_requires_token(client):
    resp = await client.post("/search", json={"query": "labs"})
    assert resp.status_code in (401, 403)


async def test_invalid_token_rejected(client):
    resp = await client.post(
        "/search", json={"query": "labs"}, headers={"Authorization": "Bearer garbage"}
    )
    assert resp.status_code == 401


async def test_document_upsert_list_and_delete(client, auth_headers):
    resp = await client.put("/documents/lab-1", json=LAB_RECORD, headers=auth_headers)
    assert resp.status_code == 200
    assert resp.json()["displayName"] == "Blood Panel March"

    listed = await client.get("/documents", headers=auth_headers)
    assert [d["id"] for d in listed.json()] == ["lab-1"]

    deleted = await client.delete("/documents/lab-1", headers=auth_headers)
    assert deleted.status_code == 204
    missing = await client.delete("/documents/lab-1", headers=auth_headers)
    assert missing.status_code == 404


async def test_documents_search_sees_new_uploads(client, auth_headers):
    before = await client.post("/search", json={"query": "show my lab results"}, headers=auth_headers)
    assert before.json()["documents"] == []

    await client.put("/documents/lab-1", json=LAB_RECORD, headers=auth_headers)

    after = await client.post("/search", json={"query": "show my lab results"}, headers=auth_headers)
    body = after.json()
    assert body["type"] == "documents"
    assert [d["id"] for d in body["documents"]] == ["lab-1"]
    assert body["fallback"] is False
    assert "answer" not in body


async def test_answer_search(app, client, auth_headers):
    await client.put("/documents/lab-1", json=LAB_RECORD, headers=auth_headers)
    use_llm(
        app,
        FakeLLM(
            [
                llm_json(
                    answer="Your LDL was 142 mg/dL.",
                    referencedDocuments=["Blood Panel March"],
                    suggestedFollowUps=["What about HDL?"],
                )
            ]
        ),
    )
    resp = await client.post("/search", json={"query": "what is my LDL?"}, headers=auth_headers)
    body = resp.json()
    assert body["type"] == "answer"
    assert body["answer"] == "Your LDL was 142 mg/dL."
    assert [d["id"] for d in body["referencedDocuments"]] == ["lab-1"]
    assert body["suggestedFollowUps"] == ["What about HDL?"]


async def test_chat_search_returns_session(app, client, auth_headers):
    use_llm(app, FakeLLM([llm_json(answer="Hi! Ask me about your records.", referencedDocuments=[])]))
    resp = await client.post(
        "/search", json={"query": "hello", "conversational": True}, headers=auth_headers
    )
    body = resp.json()
    assert body["type"] == "chat"
    assert body["sessionId"]

    follow = await client.post(
        "/search",
        json={"query": "anything new?", "sessionId": body["sessionId"]},
        headers=auth_headers,
    )
    assert follow.json()["sessionId"] == body["sessionId"]


async def test_generation_failure_returns_fallback(app, client, auth_headers):
    await client.put("/documents/lab-1", json=LAB_RECORD, headers=auth_headers)
    use_llm(app, FakeLLM(error=GenerationError("quota")))
    resp = await client.post("/search", json={"query": "what is my LDL?"}, headers=auth_headers)
    assert resp.status_code == 200
    body = resp.json()
    assert body["type"] == "documents"
    assert body["fallback"] is True
    assert body["fallbackReason"]


async def test_fetch_failure_is_503(app, client, auth_headers):
    use_llm(app, FakeLLM(), store=FakeDocumentStore(error=FetchError("down")))
    resp = await client.post("/search", json={"query": "labs"}, headers=auth_headers)
    assert resp.status_code == 503
    assert resp.headers["Retry-After"] == "30"


async def test_stateless_chat(app, client, auth_headers):
    use_llm(app, FakeLLM(["Your LDL was 142 mg/dL."]))
    resp = await client.post(
        "/chat",
        json={"message": "and my LDL?", "history": [{"role": "user", "text": "hi"}, {"role": "assistant", "text": "Hello!"}]},
        headers=auth_headers,
    )
    body = resp.json()
    assert body["text"] == "Your LDL was 142 mg/dL."
    assert [m["role"] for m in body["history"]] == ["user", "assistant", "user", "assistant"]


async def test_stateless_chat_generation_error(app, client, auth_headers):
    use_llm(app, FakeLLM(error=GenerationError("quota")))
    resp = await client.post("/chat", json={"message": "hi"}, headers=auth_headers)
    assert resp.status_code == 502


async def test_rate_limit(app, client, auth_headers):
    app.state.settings = app.state.settings.model_copy(update={"rate_limit_requests_per_minute": 2})
    for _ in range(2):
        assert (await client.get("/documents", headers=auth_headers)).status_code == 200
    limited = await client.get("/documents", headers=auth_headers)
    assert limited.status_code == 429
    assert int(limited.headers["Retry-After"]) >= 1
