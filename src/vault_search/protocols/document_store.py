"""Protocol for the document corpus collaborator."""

from __future__ import annotations

from typing import Protocol

from vault_search.models.domain import DocumentRecord


class DocumentStore(Protocol):
    async def list_documents(self, owner_id: str) -> list[DocumentRecord]:
        """Return every record owned by ``owner_id``. Ownership is enforced here."""
        ...
