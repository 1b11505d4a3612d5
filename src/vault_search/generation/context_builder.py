"""Formats a document set into the grounding text handed to the model."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

from vault_search.config.constants import NO_SUMMARY_PLACEHOLDER
from vault_search.models.domain import DocumentRecord


def format_value(value: Any) -> str:
    """Render a structured-data value: objects and literals as compact JSON, the rest as-is."""
    if isinstance(value, (dict, list, tuple, bool)) or value is None:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    return str(value)


def format_document_block(doc: DocumentRecord) -> str:
    """A summary line, a blank line, then the detailed values when there are any."""
    analysis = doc.analysis
    summary = (analysis.search_summary if analysis else None) or NO_SUMMARY_PLACEHOLDER
    lines = [
        f"--- DOCUMENT: {doc.label} ---",
        f"Summary: {summary}",
        "",
    ]

    structured = analysis.structured_data if analysis else None
    if structured:
        lines.append("Detailed Values:")
        lines.extend(f"{key}: {format_value(value)}" for key, value in structured.items())

    lines.append("--- END DOCUMENT ---")
    return "\n".join(lines)


def build_context(documents: Sequence[DocumentRecord]) -> str:
    """Join one labeled block per document, in input order, separated by a blank line.

    No truncation happens here; callers bound the document set beforehand.
    """
    return "\n\n".join(format_document_block(doc) for doc in documents)
