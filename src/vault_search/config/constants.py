"""Static vocabularies and weights that are not deployment knobs."""

from __future__ import annotations

NO_SUMMARY_PLACEHOLDER = "No summary available"

# Query lexicons
QUESTION_WORDS = ("what", "when", "where", "who", "why", "how", "should", "explain")
ACTION_WORDS = ("show", "list", "find", "get", "display", "give me", "pull up")
SUMMARY_WORDS = ("summarize", "summarise", "summary", "overview", "recap", "tl;dr", "tldr")
AGGREGATE_WORDS = (
    "readings",
    "levels",
    "values",
    "trend",
    "trends",
    "history",
    "over time",
    "changes",
)
CONTINUATION_PHRASES = (
    "tell me more",
    "you mentioned",
    "you said",
    "follow up on",
    "going back to",
    "as we discussed",
)
FILLER_WORDS = (
    "my",
    "the",
    "a",
    "an",
    "is",
    "are",
    "was",
    "were",
    "all",
    "any",
    "every",
    "me",
    "of",
    "for",
    "in",
    "on",
    "from",
    "with",
    "and",
    "or",
    "to",
    "i",
    "have",
    "do",
    "did",
)
MIN_KEYWORD_LENGTH = 3

# Category vocabulary -> stored category label
CATEGORY_WORDS = {
    "Lab Results": ("lab", "labs", "blood work", "blood test", "test result", "test results"),
    "Prescriptions": (
        "prescription",
        "prescriptions",
        "medication",
        "medications",
        "drug",
        "drugs",
    ),
    "Imaging Reports": ("imaging", "x-ray", "mri", "ct scan", "ultrasound", "scan", "scans"),
    "Doctor's Notes": (
        "consultation",
        "doctor note",
        "doctor notes",
        "doctor's note",
        "doctor's notes",
        "visit",
        "appointment",
    ),
    "Vaccination Records": ("vaccine", "vaccines", "vaccination", "vaccinations", "immunization", "shot", "shots"),
}

# Colloquial term -> clinical synonyms, used for keyword expansion only
SYNONYM_MAP = {
    "blood work": ("complete blood count", "cbc", "blood test", "hemogram"),
    "blood test": ("complete blood count", "cbc", "blood work", "hemogram"),
    "blood pressure": ("bp", "hypertension", "hypotension", "systolic", "diastolic"),
    "blood sugar": ("glucose", "a1c", "hba1c", "hemoglobin a1c"),
    "cholesterol": ("lipid panel", "cholesterol test", "lipids", "ldl", "hdl"),
    "heart rate": ("pulse", "bpm"),
    "thyroid": ("tsh", "t3", "t4"),
    "kidney": ("renal", "creatinine", "egfr"),
    "liver": ("hepatic", "alt", "ast"),
    "xray": ("x-ray", "radiograph", "imaging report", "radiology"),
    "x-ray": ("xray", "radiograph", "imaging report", "radiology"),
    "mri": ("magnetic resonance imaging", "mri scan", "imaging"),
    "ct scan": ("computed tomography", "cat scan", "ct", "imaging"),
    "prescription": ("medication", "meds", "rx", "drug", "drugs", "medicine"),
    "medication": ("prescription", "meds", "rx", "drug", "drugs", "medicine"),
    "checkup": ("physical", "exam", "doctor visit", "annual", "appointment"),
}

# Relevance ranking
FIELD_WEIGHTS = {
    "display_name": 10,
    "filename": 8,
    "category": 6,
    "search_summary": 5,
    "notes": 4,
    "structured_data": 2,
}
RECENCY_BOOSTS = ((30, 1.2), (90, 1.1), (365, 1.05))
COMPLETE_STATUS_BOOST = 1.1
