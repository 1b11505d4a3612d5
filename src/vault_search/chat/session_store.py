"""Keyed chat session store with per-session write ordering."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from uuid import uuid4

from vault_search.models.domain import ChatSession, Role
from vault_search.observability.logger import get_logger
from vault_search.protocols.session_backend import SessionBackend

logger = get_logger("session_store")


def new_session_id() -> str:
    return uuid4().hex


class InMemorySessionBackend:
    def __init__(self) -> None:
        self._sessions: dict[str, ChatSession] = {}

    async def load(self, session_id: str) -> ChatSession | None:
        return self._sessions.get(session_id)

    async def save(self, session: ChatSession) -> None:
        self._sessions[session.session_id] = session

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None


class Conversation:
    """Handle on one session while its lock is held."""

    def __init__(self, backend: SessionBackend, session: ChatSession) -> None:
        self._backend = backend
        self.session = session
        self.saved = False

    async def append(self, role: Role, text: str) -> ChatSession:
        self.session = self.session.with_turn(role, text)
        await self._backend.save(self.session)
        self.saved = True
        return self.session


class ChatSessionStore:
    """Sessions are immutable values; appends produce a new value and persist it.

    A new session lives only in memory until its first turn is appended, so a
    turn that fails before appending leaves nothing behind. Every
    read-modify-write of one session runs under that session's lock, so turns
    land in the order requests acquired the lock (asyncio.Lock is FIFO).
    """

    def __init__(self, backend: SessionBackend | None = None) -> None:
        self._backend = backend or InMemorySessionBackend()
        self._locks: dict[str, asyncio.Lock] = {}

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    async def _resolve(
        self, session_id: str | None, owner_id: str | None
    ) -> tuple[ChatSession, bool]:
        if session_id:
            existing = await self._backend.load(session_id)
            if existing is not None and existing.owner_id == owner_id:
                return existing, False
            if existing is not None:
                logger.warning("session_owner_mismatch", session_id=session_id)
            else:
                logger.info("session_not_found", session_id=session_id)

        session = ChatSession(session_id=new_session_id(), owner_id=owner_id)
        logger.info("session_started", session_id=session.session_id)
        return session, True

    async def get_or_create(
        self, session_id: str | None = None, owner_id: str | None = None
    ) -> ChatSession:
        """Load the caller's session, or start an unsaved one under a fresh id."""
        session, _ = await self._resolve(session_id, owner_id)
        return session

    @asynccontextmanager
    async def conversation(
        self, session_id: str | None = None, owner_id: str | None = None
    ) -> AsyncIterator[Conversation]:
        """Hold a session exclusively for a whole chat turn."""
        session, created = await self._resolve(session_id, owner_id)
        conversation = Conversation(self._backend, session)
        try:
            async with self._lock_for(session.session_id):
                # Re-read under the lock: an earlier holder may have appended.
                conversation.session = await self._backend.load(session.session_id) or session
                yield conversation
        finally:
            if created and not conversation.saved:
                self._locks.pop(session.session_id, None)
                logger.info("session_discarded", session_id=session.session_id)

    async def append(self, session: ChatSession, role: Role, text: str) -> ChatSession:
        async with self._lock_for(session.session_id):
            latest = await self._backend.load(session.session_id) or session
            return await Conversation(self._backend, latest).append(role, text)

    async def get(self, session_id: str) -> ChatSession | None:
        return await self._backend.load(session_id)

    async def delete(self, session_id: str) -> bool:
        self._locks.pop(session_id, None)
        return await self._backend.delete(session_id)

    @property
    def lock_count(self) -> int:
        return len(self._locks)
