"""Tests for query analysis and response-mode classification."""

from datetime import datetime, timedelta, timezone

import pytest
from conftest import NOW, make_record

from vault_search.models.domain import SearchMode
from vault_search.query.classifier import QueryClassifier, analyze_query, normalize_query

CORPUS = [make_record("lab-1", "Blood Panel", "lab.pdf", summary="CBC")]


@pytest.fixture
def classifier():
    return QueryClassifier(clock=lambda: NOW)


@pytest.mark.parametrize(
    "query,mode,reason",
    [
        ("show my lab results", SearchMode.DOCUMENTS, "listing_request"),
        ("knee mri", SearchMode.DOCUMENTS, "default_listing"),
        ("what is my LDL?", SearchMode.ANSWER, "question"),
        ("how has my cholesterol changed", SearchMode.ANSWER, "question"),
        ("summarize my recent blood work", SearchMode.SUMMARY, "summary_request"),
        ("list a summary of my prescriptions", SearchMode.SUMMARY, "summary_request"),
        ("can you summarize my lab results?", SearchMode.SUMMARY, "summary_request"),
        ("what is the overview of my labs?", SearchMode.SUMMARY, "summary_request"),
        ("blood pressure readings", SearchMode.SUMMARY, "aggregate_request"),
        ("tell me more about the lipid panel", SearchMode.CHAT, "conversation"),
    ],
)
def test_classification(classifier, query, mode, reason):
    result = classifier.classify(query, CORPUS)
    assert result.mode == mode
    assert result.reason == reason


def test_active_session_routes_questions_to_chat(classifier):
    result = classifier.classify("what about HDL?", CORPUS, has_active_session=True)
    assert result.mode == SearchMode.CHAT


def test_listing_wins_over_active_session(classifier):
    result = classifier.classify("show my prescriptions", CORPUS, has_active_session=True)
    assert result.mode == SearchMode.DOCUMENTS
    assert result.reason == "listing_request"


def test_conversational_flag_routes_to_chat(classifier):
    assert classifier.classify("hello there", CORPUS, conversational=True).mode == SearchMode.CHAT


def test_empty_corpus_returns_documents_unless_chatting(classifier):
    result = classifier.classify("what is my LDL?", [])
    assert result.mode == SearchMode.DOCUMENTS
    assert result.reason == "empty_corpus"
    assert classifier.classify("what is my LDL?", [], conversational=True).mode == SearchMode.CHAT


def test_classification_is_deterministic(classifier):
    first = classifier.classify("summarize my labs", CORPUS)
    second = classifier.classify("summarize my labs", CORPUS)
    assert (first.mode, first.reason) == (second.mode, second.reason)


def test_normalize_query():
    assert normalize_query("  Show\tMy  LABS ") == "show my labs"


def test_recent_filter_and_category():
    analysis = analyze_query("recent lab results", now=NOW)
    assert analysis.time_range.kind == "after"
    assert analysis.time_range.value == NOW - timedelta(days=90)
    assert analysis.category == "Lab Results"
    assert analysis.keywords == [["results"]]


def test_recent_window_is_configurable():
    analysis = analyze_query("recent labs", now=NOW, recent_days=30)
    assert analysis.time_range.value == NOW - timedelta(days=30)


def test_year_filters():
    assert analyze_query("labs last year", now=NOW).time_range.value == 2023
    from_year = analyze_query("cholesterol from 2023", now=NOW).time_range
    assert (from_year.kind, from_year.value) == ("year_from", 2023)
    bare_year = analyze_query("cholesterol 2022", now=NOW).time_range
    assert (bare_year.kind, bare_year.value) == ("year", 2022)


def test_last_n_months():
    analysis = analyze_query("scans last 3 months", now=NOW)
    assert analysis.time_range.kind == "after"
    assert analysis.time_range.value == datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)
    assert analysis.category == "Imaging Reports"


def test_synonym_expansion():
    analysis = analyze_query("cholesterol from 2023", now=NOW)
    assert analysis.keywords == [
        ["cholesterol", "lipid panel", "cholesterol test", "lipids", "ldl", "hdl"]
    ]


def test_question_and_filler_words_are_dropped():
    analysis = analyze_query("what are my blood pressure medications", now=NOW)
    assert analysis.category == "Prescriptions"
    assert [group[0] for group in analysis.keywords] == ["blood pressure"]
    assert analysis.time_range is None
