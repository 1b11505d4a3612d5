"""Keyword/category/time filtering and relevance ranking for documents mode.

Scores are field-weighted term frequencies: for every keyword group the best
scoring synonym counts, then recency and completeness multipliers apply.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from datetime import datetime, timezone

from vault_search.config.constants import COMPLETE_STATUS_BOOST, FIELD_WEIGHTS, RECENCY_BOOSTS
from vault_search.models.domain import DocumentRecord, DocumentStatus, QueryAnalysis, TimeRange


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _weighted_fields(doc: DocumentRecord) -> list[tuple[str, int]]:
    analysis = doc.analysis
    structured = analysis.structured_data if analysis else {}
    return [
        ((doc.display_name or "").lower(), FIELD_WEIGHTS["display_name"]),
        (doc.filename.lower(), FIELD_WEIGHTS["filename"]),
        ((doc.category or "").lower(), FIELD_WEIGHTS["category"]),
        (((analysis.search_summary if analysis else None) or "").lower(), FIELD_WEIGHTS["search_summary"]),
        ((doc.notes or "").lower(), FIELD_WEIGHTS["notes"]),
        (json.dumps(structured, default=str).lower(), FIELD_WEIGHTS["structured_data"]),
    ]


def searchable_text(doc: DocumentRecord) -> str:
    return " ".join(text for text, _ in _weighted_fields(doc))


def recency_multiplier(upload_date: datetime | None, now: datetime) -> float:
    if upload_date is None:
        return 1.0
    age_days = (now - _as_utc(upload_date)).total_seconds() / 86400
    for max_days, boost in RECENCY_BOOSTS:
        if age_days <= max_days:
            return boost
    return 1.0


def score_document(doc: DocumentRecord, keywords: list[list[str]], now: datetime) -> float:
    fields = _weighted_fields(doc)
    field_score = 0.0
    for group in keywords:
        best = 0
        for term in group:
            term = term.lower()
            term_score = sum(text.count(term) * weight for text, weight in fields)
            best = max(best, term_score)
        field_score += best

    status_boost = COMPLETE_STATUS_BOOST if doc.status == DocumentStatus.COMPLETE else 1.0
    return field_score * recency_multiplier(doc.upload_date, now) * status_boost


def _newest_first_key(doc: DocumentRecord) -> float:
    if doc.upload_date is None:
        return float("inf")
    return -_as_utc(doc.upload_date).timestamp()


def rank_documents(
    documents: Sequence[DocumentRecord],
    keywords: list[list[str]],
    now: datetime | None = None,
) -> list[DocumentRecord]:
    """Sort by relevance, newest first on ties. Returns a new list."""
    now = now or datetime.now(timezone.utc)
    if not keywords:
        return sorted(documents, key=_newest_first_key)

    scored = [(score_document(doc, keywords, now), doc) for doc in documents]
    scored.sort(key=lambda pair: (-pair[0], _newest_first_key(pair[1])))
    return [doc for _, doc in scored]


def _in_time_range(doc: DocumentRecord, time_range: TimeRange) -> bool:
    if doc.upload_date is None:
        return False
    uploaded = _as_utc(doc.upload_date)
    if time_range.kind == "after":
        return uploaded > _as_utc(time_range.value)
    if time_range.kind == "year":
        return uploaded.year == time_range.value
    if time_range.kind == "year_from":
        return uploaded.year >= time_range.value
    return True


def matches_filters(doc: DocumentRecord, analysis: QueryAnalysis) -> bool:
    if analysis.time_range and not _in_time_range(doc, analysis.time_range):
        return False
    if analysis.category and (doc.category or "").lower() != analysis.category.lower():
        return False
    if analysis.keywords:
        text = searchable_text(doc)
        return all(any(term.lower() in text for term in group) for group in analysis.keywords)
    return True


def filter_documents(
    analysis: QueryAnalysis,
    corpus: Sequence[DocumentRecord],
    limit: int | None = None,
    now: datetime | None = None,
) -> list[DocumentRecord]:
    """Records satisfying every filter in the analysis, most relevant first."""
    matching = [doc for doc in corpus if matches_filters(doc, analysis)]
    ranked = rank_documents(matching, analysis.keywords, now)
    return ranked[:limit] if limit is not None else ranked


def select_relevant(
    analysis: QueryAnalysis,
    corpus: Sequence[DocumentRecord],
    limit: int,
    now: datetime | None = None,
) -> list[DocumentRecord]:
    """Top ``limit`` records by relevance, without excluding non-matches."""
    return rank_documents(corpus, analysis.keywords, now)[:limit]
