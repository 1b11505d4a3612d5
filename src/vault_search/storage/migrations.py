"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

DOCUMENTS_TABLE = """
CREATE TABLE IF NOT EXISTS documents (
    id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    display_name TEXT,
    filename TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'review',
    category TEXT,
    notes TEXT,
    analysis TEXT,
    upload_date TEXT
)
"""

DOCUMENTS_OWNER_INDEX = """
CREATE INDEX IF NOT EXISTS idx_documents_owner_id ON documents(owner_id)
"""

SESSIONS_TABLE = """
CREATE TABLE IF NOT EXISTS chat_sessions (
    session_id TEXT PRIMARY KEY,
    owner_id TEXT,
    history TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL
)
"""

TRACES_TABLE = """
CREATE TABLE IF NOT EXISTS search_traces (
    trace_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    query TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    latency_ms REAL NOT NULL,
    mode TEXT NOT NULL,
    fallback INTEGER NOT NULL DEFAULT 0,
    fallback_reason TEXT,
    matched INTEGER NOT NULL DEFAULT 0,
    unmatched INTEGER NOT NULL DEFAULT 0,
    spans TEXT NOT NULL DEFAULT '[]'
)
"""

TRACES_TIMESTAMP_INDEX = """
CREATE INDEX IF NOT EXISTS idx_search_traces_timestamp ON search_traces(timestamp)
"""


async def initialize_doc_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(DOCUMENTS_TABLE)
        await db.execute(DOCUMENTS_OWNER_INDEX)
        await db.commit()


async def initialize_session_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SESSIONS_TABLE)
        await db.commit()


async def initialize_trace_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(TRACES_TABLE)
        await db.execute(TRACES_TIMESTAMP_INDEX)
        await db.commit()
