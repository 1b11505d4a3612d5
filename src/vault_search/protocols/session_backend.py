"""Protocol for chat session persistence."""

from __future__ import annotations

from typing import Protocol

from vault_search.models.domain import ChatSession


class SessionBackend(Protocol):
    async def load(self, session_id: str) -> ChatSession | None: ...

    async def save(self, session: ChatSession) -> None: ...

    async def delete(self, session_id: str) -> bool: ...
