"""Shared test fixtures."""

from __future__ import annotations

import asyncio
import json
from datetime import datetime, timedelta, timezone

import pytest

from vault_search.chat.session_store import ChatSessionStore
from vault_search.config.settings import Settings
from vault_search.generation.grounded_generator import GroundedGenerator
from vault_search.matching.reference_matcher import ReferenceMatcher
from vault_search.models.domain import DocumentAnalysis, DocumentRecord, DocumentStatus
from vault_search.pipeline.search_dispatcher import SearchDispatcher
from vault_search.query.classifier import QueryClassifier
from vault_search.storage.search_cache import SearchCache

OWNER = "user-1"
NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeLLM:
    """Scripted LLM: replays responses in order, repeating the last one."""

    def __init__(self, responses=None, error: Exception | None = None, delay: float = 0.0):
        self.responses = list(responses or [])
        self.error = error
        self.delay = delay
        self.calls: list[dict] = []

    async def generate(self, prompt, system=None, history=None, json_output=False):
        self.calls.append(
            {
                "prompt": prompt,
                "system": system,
                "history": list(history or []),
                "json_output": json_output,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0] if self.responses else "{}"


class FakeDocumentStore:
    def __init__(self, records=None, error: Exception | None = None):
        self.records = list(records or [])
        self.error = error
        self.calls = 0

    async def list_documents(self, owner_id):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [doc for doc in self.records if doc.owner_id == owner_id]


def llm_json(**payload) -> str:
    return json.dumps(payload)


def make_record(
    doc_id: str,
    display_name: str | None,
    filename: str,
    summary: str | None = None,
    data: dict | None = None,
    category: str | None = None,
    age_days: int | None = 10,
    status: DocumentStatus = DocumentStatus.COMPLETE,
    owner_id: str = OWNER,
) -> DocumentRecord:
    analysis = None
    if summary is not None or data:
        analysis = DocumentAnalysis(search_summary=summary, structured_data=data or {})
    return DocumentRecord(
        id=doc_id,
        display_name=display_name,
        filename=filename,
        status=status,
        analysis=analysis,
        category=category,
        upload_date=NOW - timedelta(days=age_days) if age_days is not None else None,
        owner_id=owner_id,
    )


@pytest.fixture
def settings(tmp_path):
    """Test settings with temp paths."""
    return Settings(
        google_api_key="test-key",
        api_keys="test-api-key",
        jwt_secret="test-secret",
        generation_timeout_s=1.0,
        sqlite_doc_db_path=str(tmp_path / "documents.db"),
        sqlite_session_db_path=str(tmp_path / "sessions.db"),
        sqlite_trace_db_path=str(tmp_path / "traces.db"),
    )


@pytest.fixture
def sample_records():
    return [
        make_record(
            "lab-1",
            "Blood Panel March",
            "lab_march.pdf",
            summary="Complete blood count and lipid panel. LDL slightly elevated.",
            data={"LDL": "142 mg/dL", "HDL": "51 mg/dL"},
            category="Lab Results",
            age_days=20,
        ),
        make_record(
            "lab-2",
            "Cholesterol Follow-up",
            "lipids_nov.pdf",
            summary="Lipid panel repeat after diet change.",
            data={"LDL": "155 mg/dL"},
            category="Lab Results",
            age_days=150,
        ),
        make_record(
            "rx-1",
            None,
            "lisinopril_prescription.jpg",
            summary="Lisinopril 10mg once daily for blood pressure.",
            data={"medication": "Lisinopril", "dose": "10mg"},
            category="Prescriptions",
            age_days=60,
        ),
        make_record(
            "img-1",
            "Knee MRI",
            "mri_left_knee.pdf",
            summary="MRI of the left knee. Mild meniscal degeneration.",
            category="Imaging Reports",
            age_days=400,
        ),
        make_record(
            "draft-1",
            "Unreviewed Scan",
            "upload_0193.pdf",
            category="Imaging Reports",
            status=DocumentStatus.REVIEW,
        ),
    ]


@pytest.fixture
def make_dispatcher(settings, sample_records):
    """Build a dispatcher around fakes; returns (dispatcher, llm, store)."""

    def _make(llm=None, store=None, cache=False, session_store=None, trace_store=None, **overrides):
        llm = llm or FakeLLM()
        store = store or FakeDocumentStore(sample_records)
        cfg = settings.model_copy(update=overrides) if overrides else settings
        dispatcher = SearchDispatcher(
            document_store=store,
            classifier=QueryClassifier(recent_days=cfg.recent_days, clock=lambda: NOW),
            generator=GroundedGenerator(llm),
            matcher=ReferenceMatcher(),
            session_store=session_store or ChatSessionStore(),
            settings=cfg,
            trace_store=trace_store,
            cache=SearchCache() if cache else None,
        )
        return dispatcher, llm, store

    return _make
