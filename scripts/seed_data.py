"""Seed the document store with sample analyzed health records for development."""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from vault_search.config.settings import Settings
from vault_search.models.domain import DocumentAnalysis, DocumentRecord, DocumentStatus
from vault_search.storage.sqlite_doc_store import SQLiteDocStore

NOW = datetime.now(timezone.utc)

SAMPLE_RECORDS = [
    {
        "id": "lab-2024-03",
        "display_name": "Blood Panel March",
        "filename": "lab_march.pdf",
        "category": "Lab Results",
        "age_days": 20,
        "summary": "Complete blood count and lipid panel. LDL slightly elevated.",
        "data": {"LDL": "142 mg/dL", "HDL": "51 mg/dL", "Hemoglobin": "14.1 g/dL"},
    },
    {
        "id": "lab-2023-11",
        "display_name": "Cholesterol Follow-up",
        "filename": "lipids_nov.pdf",
        "category": "Lab Results",
        "age_days": 150,
        "summary": "Lipid panel repeat after diet change.",
        "data": {"LDL": "155 mg/dL", "Total Cholesterol": "231 mg/dL"},
    },
    {
        "id": "rx-lisinopril",
        "display_name": None,
        "filename": "lisinopril_prescription.jpg",
        "category": "Prescriptions",
        "age_days": 60,
        "summary": "Lisinopril 10mg once daily for blood pressure.",
        "data": {"medication": "Lisinopril", "dose": "10mg", "refills": 3},
    },
    {
        "id": "img-knee-mri",
        "display_name": "Knee MRI",
        "filename": "mri_left_knee.pdf",
        "category": "Imaging Reports",
        "age_days": 400,
        "summary": "MRI of the left knee. Mild meniscal degeneration, no tear.",
        "data": {},
    },
    {
        "id": "note-annual-physical",
        "display_name": "Annual Physical",
        "filename": "physical_notes.pdf",
        "category": "Doctor's Notes",
        "age_days": 35,
        "summary": "Annual physical. Blood pressure 128/82. Advised more exercise.",
        "data": {"blood_pressure": "128/82", "weight": "81 kg"},
    },
    {
        "id": "vax-flu",
        "display_name": "Flu Shot",
        "filename": "flu_vaccine_card.png",
        "category": "Vaccination Records",
        "age_days": 10,
        "summary": "Seasonal influenza vaccine administered.",
        "data": {"vaccine": "Influenza (quadrivalent)"},
    },
]


def build_record(sample: dict, owner_id: str) -> DocumentRecord:
    return DocumentRecord(
        id=sample["id"],
        owner_id=owner_id,
        display_name=sample["display_name"],
        filename=sample["filename"],
        status=DocumentStatus.COMPLETE,
        category=sample["category"],
        upload_date=NOW - timedelta(days=sample["age_days"]),
        analysis=DocumentAnalysis(
            search_summary=sample["summary"],
            structured_data=sample["data"],
        ),
    )


async def main(owner_id: str) -> None:
    settings = Settings()

    # Ensure data directories exist
    Path(settings.sqlite_doc_db_path).parent.mkdir(parents=True, exist_ok=True)

    doc_store = SQLiteDocStore(settings.sqlite_doc_db_path)
    await doc_store.initialize()

    for sample in SAMPLE_RECORDS:
        record = build_record(sample, owner_id)
        await doc_store.save_document(record)
        print(f"Seeded {record.label} ({record.category})")

    print(f"\nTotal documents: {await doc_store.count_documents()}")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--owner", default="demo-user", help="Owner id to seed records for")
    args = parser.parse_args()
    asyncio.run(main(args.owner))
