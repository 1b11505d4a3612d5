"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vault_search.api.dependencies import get_doc_store
from vault_search.models.schemas import HealthResponse
from vault_search.storage.sqlite_doc_store import SQLiteDocStore

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(
    request: Request,
    doc_store: SQLiteDocStore = Depends(get_doc_store),
) -> HealthResponse:
    return HealthResponse(
        status="ok",
        doc_count=await doc_store.count_documents(),
        session_backend=request.app.state.settings.session_backend,
    )
