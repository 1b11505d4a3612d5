"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Union


class DocumentStatus(str, Enum):
    REVIEW = "review"
    COMPLETE = "complete"


class SearchMode(str, Enum):
    DOCUMENTS = "documents"
    SUMMARY = "summary"
    ANSWER = "answer"
    CHAT = "chat"

    def __str__(self) -> str:
        return self.value


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DocumentAnalysis:
    search_summary: str | None = None
    structured_data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DocumentRecord:
    id: str
    display_name: str | None
    filename: str
    status: DocumentStatus = DocumentStatus.COMPLETE
    analysis: DocumentAnalysis | None = None
    category: str | None = None
    upload_date: datetime | None = None
    notes: str | None = None
    owner_id: str | None = None

    @property
    def label(self) -> str:
        """User-facing name: display name, or the upload filename."""
        return self.display_name or self.filename


# A model-emitted citation: a bare string or a partial record mapping.
DocumentReferenceToken = Union[str, dict[str, Any]]


@dataclass(frozen=True)
class ChatTurn:
    role: Role
    text: str


@dataclass(frozen=True)
class ChatSession:
    session_id: str
    owner_id: str | None = None
    history: tuple[ChatTurn, ...] = ()
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def with_turn(self, role: Role, text: str) -> ChatSession:
        return ChatSession(
            session_id=self.session_id,
            owner_id=self.owner_id,
            history=self.history + (ChatTurn(role=role, text=text),),
            created_at=self.created_at,
        )


@dataclass
class TimeRange:
    kind: str  # "after", "year", "year_from"
    value: datetime | int


@dataclass
class QueryAnalysis:
    normalized: str
    category: str | None
    keywords: list[list[str]]
    time_range: TimeRange | None


@dataclass
class Classification:
    mode: SearchMode
    reason: str
    analysis: QueryAnalysis


@dataclass
class GenerationOutput:
    text: str
    references: Any  # untrusted: whatever the model put under "referencedDocuments"
    suggested_follow_ups: list[str] = field(default_factory=list)


@dataclass
class MatchReport:
    matched: list[DocumentRecord] = field(default_factory=list)
    unmatched: list[str] = field(default_factory=list)
    invalid: list[Any] = field(default_factory=list)
    ambiguous: list[str] = field(default_factory=list)
    malformed_input: bool = False


@dataclass
class SearchResult:
    query: str
    fallback: bool = False
    fallback_reason: str | None = None

    mode = SearchMode.DOCUMENTS


@dataclass
class DocumentsResult(SearchResult):
    documents: list[DocumentRecord] = field(default_factory=list)

    mode = SearchMode.DOCUMENTS


@dataclass
class SummaryResult(SearchResult):
    summary: str = ""
    referenced_documents: list[DocumentRecord] = field(default_factory=list)
    suggested_follow_ups: list[str] = field(default_factory=list)

    mode = SearchMode.SUMMARY


@dataclass
class AnswerResult(SearchResult):
    answer: str = ""
    referenced_documents: list[DocumentRecord] = field(default_factory=list)
    suggested_follow_ups: list[str] = field(default_factory=list)

    mode = SearchMode.ANSWER


@dataclass
class ChatResult(SearchResult):
    answer: str = ""
    session_id: str = ""
    referenced_documents: list[DocumentRecord] = field(default_factory=list)

    mode = SearchMode.CHAT


@dataclass
class ChatReply:
    text: str
    history: list[ChatTurn]


@dataclass
class SearchTrace:
    trace_id: str
    owner_id: str
    query: str
    timestamp: datetime
    latency_ms: float
    mode: str
    fallback: bool
    fallback_reason: str | None
    matched: int
    unmatched: int
    spans: list[dict]
