"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from vault_search.models.domain import (
    AnswerResult,
    ChatResult,
    ChatTurn,
    DocumentAnalysis,
    DocumentRecord,
    DocumentsResult,
    DocumentStatus,
    Role,
    SearchResult,
    SummaryResult,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SearchRequest(CamelModel):
    query: str = Field(min_length=1)
    session_id: str | None = None
    conversational: bool = False


class DocumentOut(CamelModel):
    id: str
    display_name: str | None = None
    filename: str
    status: DocumentStatus
    category: str | None = None
    upload_date: datetime | None = None
    search_summary: str | None = None

    @classmethod
    def from_record(cls, doc: DocumentRecord) -> DocumentOut:
        return cls(
            id=doc.id,
            display_name=doc.display_name,
            filename=doc.filename,
            status=doc.status,
            category=doc.category,
            upload_date=doc.upload_date,
            search_summary=doc.analysis.search_summary if doc.analysis else None,
        )


class SearchResponse(CamelModel):
    type: Literal["documents", "summary", "answer", "chat"]
    query: str
    documents: list[DocumentOut] | None = None
    summary: str | None = None
    answer: str | None = None
    referenced_documents: list[DocumentOut] = Field(default_factory=list)
    suggested_follow_ups: list[str] = Field(default_factory=list)
    session_id: str | None = None
    fallback: bool = False
    fallback_reason: str | None = None

    @classmethod
    def from_result(cls, result: SearchResult) -> SearchResponse:
        response = cls(
            type=str(result.mode),
            query=result.query,
            fallback=result.fallback,
            fallback_reason=result.fallback_reason,
        )
        if isinstance(result, DocumentsResult):
            response.documents = [DocumentOut.from_record(d) for d in result.documents]
        elif isinstance(result, SummaryResult):
            response.summary = result.summary
            response.suggested_follow_ups = list(result.suggested_follow_ups)
        elif isinstance(result, AnswerResult):
            response.answer = result.answer
            response.suggested_follow_ups = list(result.suggested_follow_ups)
        elif isinstance(result, ChatResult):
            response.answer = result.answer
            response.session_id = result.session_id

        if isinstance(result, (SummaryResult, AnswerResult, ChatResult)):
            response.referenced_documents = [
                DocumentOut.from_record(d) for d in result.referenced_documents
            ]
        return response


class ChatMessage(BaseModel):
    role: Role
    text: str

    def to_turn(self) -> ChatTurn:
        return ChatTurn(role=self.role, text=self.text)


class ChatRequest(BaseModel):
    message: str = Field(min_length=1)
    history: list[ChatMessage] = Field(default_factory=list)


class ChatResponse(BaseModel):
    text: str
    history: list[ChatMessage]


class DocumentUpsert(CamelModel):
    """An analyzed record produced by the upload pipeline."""

    display_name: str | None = None
    filename: str
    status: DocumentStatus = DocumentStatus.COMPLETE
    category: str | None = None
    upload_date: datetime | None = None
    notes: str | None = None
    search_summary: str | None = None
    structured_data: dict[str, Any] = Field(default_factory=dict)

    def to_record(self, doc_id: str, owner_id: str) -> DocumentRecord:
        analysis = None
        if self.search_summary is not None or self.structured_data:
            analysis = DocumentAnalysis(
                search_summary=self.search_summary,
                structured_data=dict(self.structured_data),
            )
        return DocumentRecord(
            id=doc_id,
            owner_id=owner_id,
            display_name=self.display_name,
            filename=self.filename,
            status=self.status,
            category=self.category,
            upload_date=self.upload_date,
            notes=self.notes,
            analysis=analysis,
        )


class HealthResponse(BaseModel):
    status: str
    doc_count: int
    session_backend: str
