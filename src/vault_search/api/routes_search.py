"""Search and chat endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from vault_search.api.dependencies import get_dispatcher, owner_of
from vault_search.api.rate_limiter import rate_limit
from vault_search.exceptions import (
    FetchError,
    GenerationError,
    GenerationTimeout,
    SessionError,
    VaultSearchError,
)
from vault_search.models.schemas import (
    ChatMessage,
    ChatRequest,
    ChatResponse,
    SearchRequest,
    SearchResponse,
)
from vault_search.pipeline.search_dispatcher import SearchDispatcher

router = APIRouter()

FETCH_RETRY_AFTER_S = 30


def _unavailable(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail=detail,
        headers={"Retry-After": str(FETCH_RETRY_AFTER_S)},
    )


@router.post("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(
    request: SearchRequest,
    dispatcher: SearchDispatcher = Depends(get_dispatcher),
    _auth: dict = Depends(rate_limit),
) -> SearchResponse:
    try:
        result = await dispatcher.search(
            owner_of(_auth),
            request.query,
            session_id=request.session_id,
            conversational=request.conversational,
        )
    except FetchError:
        raise _unavailable("Your documents could not be loaded. Please try again shortly.")
    except SessionError:
        raise _unavailable("Chat session storage is unavailable.")
    except VaultSearchError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return SearchResponse.from_result(result)


@router.post("/chat", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    dispatcher: SearchDispatcher = Depends(get_dispatcher),
    _auth: dict = Depends(rate_limit),
) -> ChatResponse:
    try:
        reply = await dispatcher.chat(
            owner_of(_auth),
            request.message,
            [message.to_turn() for message in request.history],
        )
    except FetchError:
        raise _unavailable("Your documents could not be loaded. Please try again shortly.")
    except GenerationTimeout:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="The assistant took too long to reply.",
        )
    except GenerationError:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="The assistant is unavailable right now.",
        )
    return ChatResponse(
        text=reply.text,
        history=[ChatMessage(role=turn.role, text=turn.text) for turn in reply.history],
    )
