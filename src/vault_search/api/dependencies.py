"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from vault_search.pipeline.search_dispatcher import SearchDispatcher
from vault_search.storage.sqlite_doc_store import SQLiteDocStore


def get_dispatcher(request: Request) -> SearchDispatcher:
    return request.app.state.dispatcher


def get_doc_store(request: Request) -> SQLiteDocStore:
    return request.app.state.doc_store


def owner_of(token_payload: dict) -> str:
    return token_payload["sub"]
