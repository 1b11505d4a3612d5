"""SQLite-backed store of analyzed document records."""

from __future__ import annotations

import json
from datetime import datetime, timezone

import aiosqlite

from vault_search.exceptions import FetchError
from vault_search.models.domain import DocumentAnalysis, DocumentRecord, DocumentStatus
from vault_search.storage.migrations import initialize_doc_db


class SQLiteDocStore:
    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    async def initialize(self) -> None:
        await initialize_doc_db(self._db_path)

    async def save_document(self, doc: DocumentRecord) -> str:
        if not doc.owner_id:
            raise ValueError("Document records must carry an owner_id")
        analysis = None
        if doc.analysis is not None:
            analysis = json.dumps(
                {
                    "search_summary": doc.analysis.search_summary,
                    "structured_data": doc.analysis.structured_data,
                },
                default=str,
            )
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO documents "
                "(id, owner_id, display_name, filename, status, category, notes, analysis, upload_date) "
                "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    doc.id,
                    doc.owner_id,
                    doc.display_name,
                    doc.filename,
                    doc.status.value,
                    doc.category,
                    doc.notes,
                    analysis,
                    doc.upload_date.isoformat() if doc.upload_date else None,
                ),
            )
            await db.commit()
        return doc.id

    async def get_document(self, doc_id: str, owner_id: str) -> DocumentRecord | None:
        async with aiosqlite.connect(self._db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM documents WHERE id = ? AND owner_id = ?", (doc_id, owner_id)
            ) as cursor:
                row = await cursor.fetchone()
                return self._row_to_document(row) if row is not None else None

    async def list_documents(self, owner_id: str) -> list[DocumentRecord]:
        try:
            async with aiosqlite.connect(self._db_path) as db:
                db.row_factory = aiosqlite.Row
                async with db.execute(
                    "SELECT * FROM documents WHERE owner_id = ? ORDER BY upload_date DESC, id",
                    (owner_id,),
                ) as cursor:
                    rows = await cursor.fetchall()
                    return [self._row_to_document(row) for row in rows]
        except aiosqlite.Error as e:
            raise FetchError(f"Could not load documents: {e}") from e

    async def delete_document(self, doc_id: str, owner_id: str) -> bool:
        async with aiosqlite.connect(self._db_path) as db:
            cursor = await db.execute(
                "DELETE FROM documents WHERE id = ? AND owner_id = ?", (doc_id, owner_id)
            )
            await db.commit()
            return cursor.rowcount > 0

    async def count_documents(self) -> int:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute("SELECT COUNT(*) FROM documents") as cursor:
                row = await cursor.fetchone()
                return row[0] if row else 0

    @staticmethod
    def _row_to_document(row: aiosqlite.Row) -> DocumentRecord:
        analysis = None
        if row["analysis"]:
            data = json.loads(row["analysis"])
            analysis = DocumentAnalysis(
                search_summary=data.get("search_summary"),
                structured_data=data.get("structured_data") or {},
            )
        upload_date = None
        if row["upload_date"]:
            upload_date = datetime.fromisoformat(row["upload_date"])
            if upload_date.tzinfo is None:
                upload_date = upload_date.replace(tzinfo=timezone.utc)
        return DocumentRecord(
            id=row["id"],
            owner_id=row["owner_id"],
            display_name=row["display_name"],
            filename=row["filename"],
            status=DocumentStatus(row["status"]),
            category=row["category"],
            notes=row["notes"],
            analysis=analysis,
            upload_date=upload_date,
        )
