"""Analyzed document record endpoints.

Records arrive already analyzed; every write drops the owner's cached
search results.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from vault_search.api.dependencies import get_dispatcher, get_doc_store, owner_of
from vault_search.api.rate_limiter import rate_limit
from vault_search.exceptions import FetchError
from vault_search.models.schemas import DocumentOut, DocumentUpsert
from vault_search.observability.logger import get_logger
from vault_search.pipeline.search_dispatcher import SearchDispatcher
from vault_search.storage.sqlite_doc_store import SQLiteDocStore

logger = get_logger("routes_documents")

router = APIRouter(prefix="/documents")


@router.put("/{doc_id}", response_model=DocumentOut)
async def upsert_document(
    doc_id: str,
    body: DocumentUpsert,
    doc_store: SQLiteDocStore = Depends(get_doc_store),
    dispatcher: SearchDispatcher = Depends(get_dispatcher),
    _auth: dict = Depends(rate_limit),
) -> DocumentOut:
    owner_id = owner_of(_auth)
    record = body.to_record(doc_id, owner_id)
    await doc_store.save_document(record)
    dispatcher.invalidate_owner(owner_id)
    logger.info("document_upserted", doc_id=doc_id, status=record.status.value)
    return DocumentOut.from_record(record)


@router.get("", response_model=list[DocumentOut])
async def list_documents(
    doc_store: SQLiteDocStore = Depends(get_doc_store),
    _auth: dict = Depends(rate_limit),
) -> list[DocumentOut]:
    try:
        records = await doc_store.list_documents(owner_of(_auth))
    except FetchError:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Your documents could not be loaded. Please try again shortly.",
            headers={"Retry-After": "30"},
        )
    return [DocumentOut.from_record(record) for record in records]


@router.delete("/{doc_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    doc_id: str,
    doc_store: SQLiteDocStore = Depends(get_doc_store),
    dispatcher: SearchDispatcher = Depends(get_dispatcher),
    _auth: dict = Depends(rate_limit),
) -> Response:
    owner_id = owner_of(_auth)
    if not await doc_store.delete_document(doc_id, owner_id):
        raise HTTPException(status_code=404, detail="Document not found")
    dispatcher.invalidate_owner(owner_id)
    logger.info("document_deleted", doc_id=doc_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
