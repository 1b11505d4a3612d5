"""Query normalization, filter extraction, and response-mode classification."""

from __future__ import annotations

import calendar
import re
import unicodedata
from collections.abc import Callable, Sequence
from datetime import datetime, timedelta, timezone

from vault_search.config.constants import (
    ACTION_WORDS,
    AGGREGATE_WORDS,
    CATEGORY_WORDS,
    CONTINUATION_PHRASES,
    FILLER_WORDS,
    MIN_KEYWORD_LENGTH,
    QUESTION_WORDS,
    SUMMARY_WORDS,
    SYNONYM_MAP,
)
from vault_search.models.domain import (
    Classification,
    DocumentRecord,
    QueryAnalysis,
    SearchMode,
    TimeRange,
)
from vault_search.observability.logger import get_logger

logger = get_logger("query_classifier")

_TIME_PHRASES = re.compile(r"\brecent(ly)?\b|\blast year\b|\bfrom \d{4}\b|\blast \d+ months?\b|\b20\d{2}\b")


def _phrase_pattern(phrase: str) -> re.Pattern[str]:
    return re.compile(rf"(?<![\w-]){re.escape(phrase)}(?![\w-])")


def _contains(text: str, phrase: str) -> bool:
    return _phrase_pattern(phrase).search(text) is not None


def _remove(text: str, phrase: str) -> str:
    return _phrase_pattern(phrase).sub(" ", text)


def _months_ago(now: datetime, months: int) -> datetime:
    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def normalize_query(raw_query: str) -> str:
    text = unicodedata.normalize("NFKC", raw_query)
    text = re.sub(r"\s+", " ", text).strip()
    return text.lower()


def parse_time_range(query: str, now: datetime, recent_days: int = 90) -> TimeRange | None:
    if "recent" in query:
        return TimeRange(kind="after", value=now - timedelta(days=recent_days))

    if "last year" in query:
        return TimeRange(kind="year", value=now.year - 1)

    year_match = re.search(r"\b(20\d{2})\b", query)
    if year_match:
        year = int(year_match.group(1))
        if f"from {year}" in query:
            return TimeRange(kind="year_from", value=year)
        return TimeRange(kind="year", value=year)

    months_match = re.search(r"last (\d+) months?", query)
    if months_match:
        return TimeRange(kind="after", value=_months_ago(now, int(months_match.group(1))))

    return None


def detect_category(query: str) -> tuple[str | None, str]:
    """Return the first category whose vocabulary appears, plus the query with it removed."""
    for category, terms in CATEGORY_WORDS.items():
        if any(_contains(query, term) for term in terms):
            remaining = query
            for term in sorted(terms, key=len, reverse=True):
                remaining = _remove(remaining, term)
            return category, remaining
    return None, query


def extract_keywords(query: str) -> list[list[str]]:
    """Keyword groups with synonym expansion; each group matches if any member does."""
    remaining = query
    for word in (*QUESTION_WORDS, *ACTION_WORDS, *FILLER_WORDS):
        remaining = _remove(remaining, word)

    groups: list[list[str]] = []
    for key in sorted(SYNONYM_MAP, key=len, reverse=True):
        if _contains(remaining, key):
            groups.append([key, *SYNONYM_MAP[key]])
            remaining = _remove(remaining, key)

    for token in re.findall(r"[\w'-]+", remaining):
        token = token.strip("'-")
        if len(token) >= MIN_KEYWORD_LENGTH:
            groups.append([token])
    return groups


def analyze_query(
    raw_query: str, now: datetime | None = None, recent_days: int = 90
) -> QueryAnalysis:
    now = now or datetime.now(timezone.utc)
    normalized = normalize_query(raw_query)

    time_range = parse_time_range(normalized, now, recent_days)
    remaining = _TIME_PHRASES.sub(" ", normalized) if time_range else normalized

    category, remaining = detect_category(remaining)
    keywords = extract_keywords(remaining)

    return QueryAnalysis(
        normalized=normalized,
        category=category,
        keywords=keywords,
        time_range=time_range,
    )


class QueryClassifier:
    """Chooses documents / summary / answer / chat for a query.

    Ambiguous signals resolve to the cheaper mode, in the order
    documents, summary, answer, chat. Chat is only chosen when the caller
    has an active session, asks to converse, or phrases the query as an
    explicit continuation.
    """

    def __init__(
        self,
        recent_days: int = 90,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._recent_days = recent_days
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def analyze(self, query: str) -> QueryAnalysis:
        return analyze_query(query, now=self._clock(), recent_days=self._recent_days)

    def classify(
        self,
        query: str,
        corpus: Sequence[DocumentRecord],
        has_active_session: bool = False,
        conversational: bool = False,
    ) -> Classification:
        analysis = self.analyze(query)
        mode, reason = self._decide(
            analysis.normalized, corpus, has_active_session, conversational
        )

        logger.info(
            "query_classified",
            mode=str(mode),
            reason=reason,
            category=analysis.category,
            keyword_groups=len(analysis.keywords),
            time_filter=analysis.time_range.kind if analysis.time_range else None,
        )
        return Classification(mode=mode, reason=reason, analysis=analysis)

    @staticmethod
    def _decide(
        q: str,
        corpus: Sequence[DocumentRecord],
        has_active_session: bool,
        conversational: bool,
    ) -> tuple[SearchMode, str]:
        wants_chat = (
            has_active_session
            or conversational
            or any(phrase in q for phrase in CONTINUATION_PHRASES)
        )
        if not corpus and not wants_chat:
            return SearchMode.DOCUMENTS, "empty_corpus"

        first_word = q.split(" ", 1)[0] if q else ""
        is_question = q.endswith("?") or first_word in QUESTION_WORDS
        is_summary = any(_contains(q, word) for word in SUMMARY_WORDS)
        is_listing = any(_contains(q, word) for word in ACTION_WORDS)

        # A plain listing request stays a cheap retrieval even mid-conversation.
        if is_listing and not is_question and not is_summary:
            return SearchMode.DOCUMENTS, "listing_request"
        if wants_chat:
            return SearchMode.CHAT, "conversation"
        if is_summary:
            return SearchMode.SUMMARY, "summary_request"
        if is_question:
            return SearchMode.ANSWER, "question"
        if any(_contains(q, word) for word in AGGREGATE_WORDS):
            return SearchMode.SUMMARY, "aggregate_request"
        return SearchMode.DOCUMENTS, "default_listing"
