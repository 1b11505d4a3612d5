"""Tests for Pydantic schemas."""

import pytest
from conftest import make_record
from pydantic import ValidationError

from vault_search.models.domain import (
    AnswerResult,
    ChatResult,
    DocumentsResult,
    DocumentStatus,
    Role,
)
from vault_search.models.schemas import (
    ChatRequest,
    DocumentUpsert,
    HealthResponse,
    SearchRequest,
    SearchResponse,
)


def test_search_request_accepts_camel_case():
    req = SearchRequest.model_validate({"query": "labs", "sessionId": "s1"})
    assert req.session_id == "s1"
    assert req.conversational is False


def test_search_request_rejects_empty_query():
    with pytest.raises(ValidationError):
        SearchRequest(query="")


def test_documents_response_serialization():
    doc = make_record("d1", "Knee MRI", "mri.pdf", summary="Mild degeneration.")
    resp = SearchResponse.from_result(
        DocumentsResult(query="mri", documents=[doc], fallback=True, fallback_reason="slow")
    )
    data = resp.model_dump(by_alias=True, exclude_none=True)
    assert data["type"] == "documents"
    assert data["fallback"] is True
    assert data["fallbackReason"] == "slow"
    assert data["documents"][0]["displayName"] == "Knee MRI"
    assert data["documents"][0]["searchSummary"] == "Mild degeneration."
    assert "answer" not in data


def test_answer_response_serialization():
    doc = make_record("d1", "Blood Panel", "lab.pdf")
    resp = SearchResponse.from_result(
        AnswerResult(
            query="ldl?",
            answer="142",
            referenced_documents=[doc],
            suggested_follow_ups=["HDL?"],
        )
    )
    data = resp.model_dump(by_alias=True, exclude_none=True)
    assert data["answer"] == "142"
    assert [d["id"] for d in data["referencedDocuments"]] == ["d1"]
    assert data["suggestedFollowUps"] == ["HDL?"]
    assert "documents" not in data


def test_chat_response_carries_session_id():
    resp = SearchResponse.from_result(ChatResult(query="hi", answer="hello", session_id="s1"))
    assert resp.type == "chat"
    assert resp.model_dump(by_alias=True)["sessionId"] == "s1"


def test_chat_request_history():
    req = ChatRequest.model_validate(
        {"message": "and hdl?", "history": [{"role": "user", "text": "ldl?"}]}
    )
    assert req.history[0].to_turn().role == Role.USER
    with pytest.raises(ValidationError):
        ChatRequest.model_validate({"message": "x", "history": [{"role": "system", "text": "y"}]})


def test_document_upsert_to_record():
    body = DocumentUpsert.model_validate(
        {
            "displayName": "Flu Shot",
            "filename": "flu.png",
            "searchSummary": "Influenza vaccine.",
            "structuredData": {"vaccine": "Influenza"},
        }
    )
    record = body.to_record("vax-1", "user-1")
    assert record.owner_id == "user-1"
    assert record.status == DocumentStatus.COMPLETE
    assert record.analysis.structured_data == {"vaccine": "Influenza"}


def test_document_upsert_without_analysis():
    record = DocumentUpsert(filename="scan.pdf", status="review").to_record("d1", "u1")
    assert record.analysis is None
    assert record.status == DocumentStatus.REVIEW


def test_health_response():
    resp = HealthResponse(status="ok", doc_count=10, session_backend="memory")
    assert resp.status == "ok"
