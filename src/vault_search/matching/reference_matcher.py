"""Reconcile model-emitted document references with the records they name."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from vault_search.exceptions import InvalidReferenceError
from vault_search.models.domain import DocumentRecord, DocumentReferenceToken, MatchReport
from vault_search.observability.logger import get_logger

logger = get_logger("reference_matcher")

REFERENCE_FIELDS = ("displayName", "filename", "id")


def normalize_reference(ref: DocumentReferenceToken) -> str:
    """Collapse a reference token to one canonical string.

    Strings are used as-is; mappings yield their first present field among
    ``displayName``, ``filename`` and ``id``.
    """
    if isinstance(ref, str):
        candidate = ref
    elif isinstance(ref, Mapping):
        candidate = None
        for key in REFERENCE_FIELDS:
            value = ref.get(key)
            if value is not None and str(value).strip():
                candidate = str(value)
                break
    else:
        candidate = None

    if candidate is None or not candidate.strip():
        raise InvalidReferenceError(f"Reference has no usable identifier: {ref!r}")
    return candidate


def _fuzzy_hit(normalized_ref: str, name: str | None) -> bool:
    if not name:
        return False
    folded = name.casefold()
    return normalized_ref in folded or folded in normalized_ref


class ReferenceMatcher:
    def match(self, references: Any, corpus: Sequence[DocumentRecord]) -> MatchReport:
        report = MatchReport()

        if not isinstance(references, Sequence) or isinstance(references, (str, bytes)):
            if references is not None:
                logger.warning(
                    "references_malformed",
                    received_type=type(references).__name__,
                )
            report.malformed_input = True
            return report

        for ref in references:
            try:
                ref_string = normalize_reference(ref)
            except InvalidReferenceError:
                logger.warning("reference_invalid", reference=repr(ref)[:200])
                report.invalid.append(ref)
                continue

            doc = self._resolve(ref_string, corpus, report)
            if doc is None:
                logger.warning("reference_unmatched", reference=ref_string)
                report.unmatched.append(ref_string)
            else:
                report.matched.append(doc)

        logger.info(
            "references_matched",
            total=len(references),
            matched=len(report.matched),
            unmatched=len(report.unmatched),
            invalid=len(report.invalid),
            ambiguous=len(report.ambiguous),
        )
        if report.unmatched:
            logger.warning(
                "available_documents",
                names=[doc.label for doc in corpus],
            )
        return report

    def _resolve(
        self,
        ref_string: str,
        corpus: Sequence[DocumentRecord],
        report: MatchReport,
    ) -> DocumentRecord | None:
        for doc in corpus:
            if doc.display_name == ref_string:
                return doc
        for doc in corpus:
            if doc.filename == ref_string:
                return doc
        for doc in corpus:
            if doc.id == ref_string:
                return doc

        normalized = ref_string.casefold().strip()
        candidates = [
            doc
            for doc in corpus
            if _fuzzy_hit(normalized, doc.display_name) or _fuzzy_hit(normalized, doc.filename)
        ]
        if not candidates:
            return None
        if len(candidates) > 1:
            # First in corpus order wins; overlapping names can misattribute.
            logger.warning(
                "matching_ambiguity",
                reference=ref_string,
                candidates=[doc.id for doc in candidates],
                chosen=candidates[0].id,
            )
            report.ambiguous.append(ref_string)
        return candidates[0]


def match_references(references: Any, corpus: Sequence[DocumentRecord]) -> list[DocumentRecord]:
    """Convenience wrapper returning only the matched records."""
    return ReferenceMatcher().match(references, corpus).matched
