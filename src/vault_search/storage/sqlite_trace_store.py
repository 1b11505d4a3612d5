"""SQLite-backed search trace store for observability."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from vault_search.models.domain import SearchTrace
from vault_search.storage.migrations import initialize_trace_db


class SQLiteTraceStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_trace_db(self._db_path)

    async def save_trace(self, trace: SearchTrace) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO search_traces "
                "(trace_id, owner_id, query, timestamp, latency_ms, mode, fallback, "
                "fallback_reason, matched, unmatched, spans) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    trace.trace_id,
                    trace.owner_id,
                    trace.query,
                    trace.timestamp.isoformat(),
                    trace.latency_ms,
                    trace.mode,
                    int(trace.fallback),
                    trace.fallback_reason,
                    trace.matched,
                    trace.unmatched,
                    json.dumps(trace.spans, default=str),
                ),
            )
            await db.commit()

    async def get_trace(self, trace_id: str) -> SearchTrace | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM search_traces WHERE trace_id = ?", (trace_id,)
            ) as cursor:
                row = await cursor.fetchone()
                if row is None:
                    return None
                return self._row_to_trace(row)

    async def get_recent_traces(self, limit: int = 100) -> list[SearchTrace]:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM search_traces ORDER BY timestamp DESC LIMIT ?", (limit,)
            ) as cursor:
                rows = await cursor.fetchall()
                return [self._row_to_trace(row) for row in rows]

    @staticmethod
    def _row_to_trace(row: aiosqlite.Row) -> SearchTrace:
        return SearchTrace(
            trace_id=row["trace_id"],
            owner_id=row["owner_id"],
            query=row["query"],
            timestamp=datetime.fromisoformat(row["timestamp"]).replace(tzinfo=timezone.utc),
            latency_ms=row["latency_ms"],
            mode=row["mode"],
            fallback=bool(row["fallback"]),
            fallback_reason=row["fallback_reason"],
            matched=row["matched"],
            unmatched=row["unmatched"],
            spans=json.loads(row["spans"]),
        )
