"""Search dispatcher: the single entry point of the online path.

fetch -> classify -> (documents: filter and return)
                  -> context -> generation -> matching -> compose
Generation or matching failure degrades to a documents listing marked as a
fallback. Only a failed corpus fetch reaches the caller as an error.
"""

from __future__ import annotations

import asyncio

from vault_search.chat.session_store import ChatSessionStore
from vault_search.config.settings import Settings
from vault_search.exceptions import FetchError, GenerationError, GenerationTimeout
from vault_search.generation.context_builder import build_context
from vault_search.generation.grounded_generator import GroundedGenerator
from vault_search.matching.reference_matcher import ReferenceMatcher
from vault_search.models.domain import (
    AnswerResult,
    ChatReply,
    ChatResult,
    ChatTurn,
    Classification,
    DocumentRecord,
    DocumentsResult,
    DocumentStatus,
    GenerationOutput,
    MatchReport,
    QueryAnalysis,
    Role,
    SearchMode,
    SearchResult,
    SummaryResult,
)
from vault_search.observability.logger import get_logger
from vault_search.observability.metrics import log_latency, log_match_metrics, log_search_metrics
from vault_search.observability.tracing import TraceContext
from vault_search.protocols.document_store import DocumentStore
from vault_search.query.classifier import QueryClassifier
from vault_search.query.document_filter import filter_documents, rank_documents, select_relevant
from vault_search.storage.search_cache import SearchCache
from vault_search.storage.sqlite_trace_store import SQLiteTraceStore

logger = get_logger("search_dispatcher")


def _unique(documents: list[DocumentRecord]) -> list[DocumentRecord]:
    seen: set[str] = set()
    unique = []
    for doc in documents:
        if doc.id not in seen:
            seen.add(doc.id)
            unique.append(doc)
    return unique


class SearchDispatcher:
    def __init__(
        self,
        document_store: DocumentStore,
        classifier: QueryClassifier,
        generator: GroundedGenerator,
        matcher: ReferenceMatcher,
        session_store: ChatSessionStore,
        settings: Settings,
        trace_store: SQLiteTraceStore | None = None,
        cache: SearchCache | None = None,
    ) -> None:
        self._store = document_store
        self._classifier = classifier
        self._generator = generator
        self._matcher = matcher
        self._sessions = session_store
        self._settings = settings
        self._trace_store = trace_store
        self._cache = cache
        self._background: set[asyncio.Task] = set()
        self._context_limits = {
            SearchMode.SUMMARY: settings.summary_document_limit,
            SearchMode.ANSWER: settings.answer_document_limit,
            SearchMode.CHAT: settings.chat_document_limit,
        }

    async def search(
        self,
        owner_id: str,
        query: str,
        session_id: str | None = None,
        conversational: bool = False,
    ) -> SearchResult:
        stateless = not session_id and not conversational
        if self._cache is not None and stateless:
            cached = self._cache.get(owner_id, query)
            if cached is not None:
                return cached

        trace = TraceContext()

        # STEP 1: Fetch corpus (FetchError propagates)
        with trace.span("fetch"):
            corpus = await self._fetch_corpus(owner_id)

        # STEP 2: Classify
        with trace.span("classify"):
            classification = self._classifier.classify(
                query,
                corpus,
                has_active_session=bool(session_id),
                conversational=conversational,
            )

        report: MatchReport | None = None
        context_size = 0
        if classification.mode == SearchMode.DOCUMENTS:
            # STEP 3: Direct retrieval, no generation
            with trace.span("compose"):
                result = DocumentsResult(
                    query=query,
                    documents=filter_documents(
                        classification.analysis,
                        corpus,
                        limit=self._settings.documents_result_limit,
                    ),
                )
        else:
            # STEPS 4-6: Grounded generation
            context_docs = select_relevant(
                classification.analysis, corpus, self._context_limits[classification.mode]
            )
            context_size = len(context_docs)
            result, report = await self._grounded(
                trace, owner_id, query, classification, corpus, context_docs, session_id
            )

        log_search_metrics(
            trace.trace_id, str(result.mode), len(corpus), context_size, result.fallback
        )
        if report is not None:
            log_match_metrics(trace.trace_id, report)
        for span in trace.spans:
            log_latency(trace.trace_id, span.name, span.duration_ms)
        self._save_trace(trace.to_trace(owner_id, query, result, report))

        if (
            self._cache is not None
            and stateless
            and not result.fallback
            and result.mode != SearchMode.CHAT
        ):
            self._cache.set(owner_id, query, result)
        return result

    async def chat(self, owner_id: str, message: str, history: list[ChatTurn]) -> ChatReply:
        """Stateless chat turn: the caller owns the history."""
        corpus = await self._fetch_corpus(owner_id)
        analysis = self._classifier.analyze(message)
        context_docs = select_relevant(analysis, corpus, self._settings.chat_document_limit)
        context = build_context(context_docs)

        try:
            text = await asyncio.wait_for(
                self._generator.converse(message, context, history),
                timeout=self._settings.generation_timeout_s,
            )
        except asyncio.TimeoutError as e:
            raise GenerationTimeout(
                f"Chat reply exceeded {self._settings.generation_timeout_s}s"
            ) from e

        return ChatReply(
            text=text,
            history=[
                *history,
                ChatTurn(role=Role.USER, text=message),
                ChatTurn(role=Role.ASSISTANT, text=text),
            ],
        )

    def invalidate_owner(self, owner_id: str) -> None:
        if self._cache is not None:
            self._cache.invalidate_owner(owner_id)

    async def _fetch_corpus(self, owner_id: str) -> list[DocumentRecord]:
        try:
            documents = await self._store.list_documents(owner_id)
        except FetchError:
            logger.error("corpus_fetch_failed", owner_id=owner_id)
            raise
        except Exception as e:
            logger.error("corpus_fetch_failed", owner_id=owner_id, error=str(e))
            raise FetchError(f"Document store unavailable: {e}") from e

        if not self._settings.include_review_documents:
            documents = [doc for doc in documents if doc.status == DocumentStatus.COMPLETE]
        return list(documents)

    async def _grounded(
        self,
        trace: TraceContext,
        owner_id: str,
        query: str,
        classification: Classification,
        corpus: list[DocumentRecord],
        context_docs: list[DocumentRecord],
        session_id: str | None,
    ) -> tuple[SearchResult, MatchReport | None]:
        mode = classification.mode
        with trace.span("context", documents=len(context_docs)):
            context = build_context(context_docs)

        if mode == SearchMode.CHAT:
            async with self._sessions.conversation(session_id, owner_id) as conversation:
                history = list(conversation.session.history)
                outcome = await self._generate_and_match(
                    trace, mode, query, context, context_docs, history
                )
                if isinstance(outcome, str):
                    return self._fallback(query, classification.analysis, corpus, outcome), None

                output, report = outcome
                await conversation.append(Role.USER, query)
                session = await conversation.append(Role.ASSISTANT, output.text)

            with trace.span("compose"):
                result: SearchResult = ChatResult(
                    query=query,
                    answer=output.text,
                    session_id=session.session_id,
                    referenced_documents=_unique(report.matched),
                )
            return result, report

        outcome = await self._generate_and_match(trace, mode, query, context, context_docs)
        if isinstance(outcome, str):
            return self._fallback(query, classification.analysis, corpus, outcome), None

        output, report = outcome
        with trace.span("compose"):
            if mode == SearchMode.SUMMARY:
                result = SummaryResult(
                    query=query,
                    summary=output.text,
                    referenced_documents=_unique(report.matched),
                    suggested_follow_ups=output.suggested_follow_ups,
                )
            else:
                result = AnswerResult(
                    query=query,
                    answer=output.text,
                    referenced_documents=_unique(report.matched),
                    suggested_follow_ups=output.suggested_follow_ups,
                )
        return result, report

    async def _generate_and_match(
        self,
        trace: TraceContext,
        mode: SearchMode,
        query: str,
        context: str,
        context_docs: list[DocumentRecord],
        history: list[ChatTurn] | None = None,
    ) -> tuple[GenerationOutput, MatchReport] | str:
        """Return the generation and its matched references, or a fallback reason."""
        try:
            with trace.span("generation", mode=str(mode)):
                output = await asyncio.wait_for(
                    self._generator.generate(mode, query, context, history),
                    timeout=self._settings.generation_timeout_s,
                )
        except asyncio.TimeoutError:
            logger.warning(
                "generation_timed_out",
                mode=str(mode),
                timeout_s=self._settings.generation_timeout_s,
            )
            return f"The AI {mode} took too long, so matching documents are shown instead."
        except GenerationError as e:
            logger.warning("generation_failed", mode=str(mode), error=str(e))
            return f"The AI {mode} could not be generated, so matching documents are shown instead."

        try:
            with trace.span("matching"):
                # Match only against the documents the model actually saw.
                report = self._matcher.match(output.references, context_docs)
        except Exception:
            logger.exception("reference_matching_failed", mode=str(mode))
            return f"Sources for the AI {mode} could not be resolved, so matching documents are shown instead."

        return output, report

    def _fallback(
        self,
        query: str,
        analysis: QueryAnalysis,
        corpus: list[DocumentRecord],
        reason: str,
    ) -> DocumentsResult:
        limit = self._settings.fallback_document_limit
        documents = filter_documents(analysis, corpus, limit=limit)
        if not documents:
            documents = rank_documents(corpus, analysis.keywords)[:limit]
        logger.warning("search_fallback", reason=reason, documents=len(documents))
        return DocumentsResult(
            query=query,
            documents=documents,
            fallback=True,
            fallback_reason=reason,
        )

    def _save_trace(self, trace) -> None:
        if self._trace_store is None:
            return
        task = asyncio.create_task(self._trace_store.save_trace(trace))
        self._background.add(task)
        task.add_done_callback(self._background.discard)
