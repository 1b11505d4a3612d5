"""SQLite-backed persistence for chat sessions."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from vault_search.exceptions import SessionError
from vault_search.models.domain import ChatSession, ChatTurn, Role
from vault_search.storage.migrations import initialize_session_db


class SQLiteSessionBackend:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_session_db(self._db_path)

    async def save(self, session: ChatSession) -> None:
        history = [{"role": turn.role.value, "text": turn.text} for turn in session.history]
        try:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute(
                    "INSERT OR REPLACE INTO chat_sessions (session_id, owner_id, history, created_at) "
                    "VALUES (?, ?, ?, ?)",
                    (
                        session.session_id,
                        session.owner_id,
                        json.dumps(history),
                        session.created_at.isoformat(),
                    ),
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise SessionError(f"Could not save session {session.session_id}: {e}") from e

    async def load(self, session_id: str) -> ChatSession | None:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT * FROM chat_sessions WHERE session_id = ?", (session_id,)
                ) as cursor:
                    row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise SessionError(f"Could not load session {session_id}: {e}") from e

        if row is None:
            return None
        return ChatSession(
            session_id=row["session_id"],
            owner_id=row["owner_id"],
            history=tuple(
                ChatTurn(role=Role(turn["role"]), text=turn["text"])
                for turn in json.loads(row["history"])
            ),
            created_at=datetime.fromisoformat(row["created_at"]).replace(tzinfo=timezone.utc),
        )

    async def delete(self, session_id: str) -> bool:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "DELETE FROM chat_sessions WHERE session_id = ?", (session_id,)
            )
            await db.commit()
            return cursor.rowcount > 0
