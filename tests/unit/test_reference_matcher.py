"""Tests for reconciling model citations with document records."""

import pytest
from conftest import make_record

from vault_search.exceptions import InvalidReferenceError
from vault_search.matching.reference_matcher import (
    ReferenceMatcher,
    match_references,
    normalize_reference,
)


@pytest.fixture
def corpus():
    return [
        make_record("lab-1", "Blood Panel March", "lab_march.pdf"),
        make_record("rx-1", None, "lisinopril_prescription.jpg"),
        make_record("img-1", "Knee MRI", "mri_left_knee.pdf"),
    ]


def test_normalize_string_and_mapping():
    assert normalize_reference("Knee MRI") == "Knee MRI"
    assert normalize_reference({"filename": "a.pdf", "id": "x"}) == "a.pdf"
    assert normalize_reference({"displayName": "", "id": "x"}) == "x"


@pytest.mark.parametrize("ref", [None, 42, {}, {"displayName": None}, "   "])
def test_normalize_rejects_unusable(ref):
    with pytest.raises(InvalidReferenceError):
        normalize_reference(ref)


def test_exact_display_name_filename_and_id(corpus):
    matched = match_references(["Knee MRI", "lisinopril_prescription.jpg", "lab-1"], corpus)
    assert [doc.id for doc in matched] == ["img-1", "rx-1", "lab-1"]


def test_display_name_beats_filename_of_another_record():
    corpus = [
        make_record("a", "Other", "report.pdf"),
        make_record("b", "report.pdf", "b.pdf"),
    ]
    assert [doc.id for doc in match_references(["report.pdf"], corpus)] == ["b"]


def test_fuzzy_match_is_case_insensitive_both_ways(corpus):
    # reference contains the name
    assert match_references(["the knee mri from last year"], corpus)[0].id == "img-1"
    # name contains the reference
    assert match_references(["LISINOPRIL"], corpus)[0].id == "rx-1"


@pytest.mark.parametrize(
    "ref,name",
    [
        ("Lab Report", "My Lab Report 2023"),
        ("My Full Lab Report Extended", "Full Lab Report"),
    ],
)
def test_fuzzy_match_on_partial_display_name(ref, name):
    corpus = [make_record("other", "Knee MRI", "mri.pdf"), make_record("doc", name, "scan.pdf")]
    report = ReferenceMatcher().match([ref], corpus)
    assert [doc.id for doc in report.matched] == ["doc"]
    assert report.ambiguous == []


def test_mapping_reference(corpus):
    report = ReferenceMatcher().match([{"displayName": "Blood Panel March"}], corpus)
    assert [doc.id for doc in report.matched] == ["lab-1"]


def test_unmatched_and_invalid_are_reported_not_raised(corpus):
    report = ReferenceMatcher().match(["Dental X-Ray", None, "Knee MRI", {"foo": 1}], corpus)
    assert [doc.id for doc in report.matched] == ["img-1"]
    assert report.unmatched == ["Dental X-Ray"]
    assert report.invalid == [None, {"foo": 1}]
    assert report.malformed_input is False


def test_output_order_follows_input_and_keeps_duplicates(corpus):
    matched = match_references(["Knee MRI", "lab-1", "Knee MRI"], corpus)
    assert [doc.id for doc in matched] == ["img-1", "lab-1", "img-1"]


def test_ambiguous_fuzzy_match_picks_first_in_corpus_order():
    corpus = [
        make_record("a", "Blood Test Jan", "jan.pdf"),
        make_record("b", "Blood Test Feb", "feb.pdf"),
    ]
    report = ReferenceMatcher().match(["blood test"], corpus)
    assert [doc.id for doc in report.matched] == ["a"]
    assert report.ambiguous == ["blood test"]


def test_empty_names_never_fuzzy_match():
    corpus = [make_record("a", "", "scan.pdf")]
    assert match_references(["anything"], corpus) == []


@pytest.mark.parametrize("payload", [None, "Knee MRI", {"displayName": "Knee MRI"}, 7])
def test_non_list_input_yields_empty(corpus, payload):
    report = ReferenceMatcher().match(payload, corpus)
    assert report.matched == []
    assert report.malformed_input is True


def test_empty_corpus_matches_nothing():
    report = ReferenceMatcher().match(["Knee MRI"], [])
    assert report.matched == []
    assert report.unmatched == ["Knee MRI"]
