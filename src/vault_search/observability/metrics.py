"""Metric recording helpers for traces."""

from __future__ import annotations

from vault_search.models.domain import MatchReport
from vault_search.observability.logger import get_logger

logger = get_logger("metrics")


def log_search_metrics(
    trace_id: str,
    mode: str,
    corpus_size: int,
    context_documents: int,
    fallback: bool,
) -> None:
    logger.info(
        "search_metrics",
        trace_id=trace_id,
        mode=mode,
        corpus_size=corpus_size,
        context_documents=context_documents,
        fallback=fallback,
    )


def log_match_metrics(trace_id: str, report: MatchReport) -> None:
    logger.info(
        "match_metrics",
        trace_id=trace_id,
        matched=len(report.matched),
        unmatched=len(report.unmatched),
        invalid=len(report.invalid),
        ambiguous=len(report.ambiguous),
        malformed_input=report.malformed_input,
    )


def log_latency(trace_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
