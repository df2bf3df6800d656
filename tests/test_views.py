from __future__ import annotations

import json
from pathlib import Path

import pytest
from django.core.files.uploadedfile import SimpleUploadedFile


@pytest.fixture
def data_file(settings, tmp_path: Path) -> Path:
    path = tmp_path / "properties.json"
    settings.UNITS_DATA_FILE = path
    settings.UNITS_DEDUP_KEYS = ()
    return path


def test_preview_import_csv(client) -> None:
    upload = SimpleUploadedFile("units.csv", b"Name,Price\nAcme,100\nBeta,\n", content_type="text/csv")

    response = client.post("/api/import/preview", {"file": upload})

    assert response.status_code == 200
    payload = response.json()
    assert payload["fields"] == ["Name", "Price"]
    assert len(payload["data"]) == 2
    assert payload["detectedFields"]["Price"] == {"type": "number", "label": "Price", "example": 100}


def test_preview_import_workbook_serializes_dates(client, make_workbook) -> None:
    from datetime import datetime

    content = make_workbook([["Unit", "Handover"], ["A-1", datetime(2025, 6, 30)]])
    upload = SimpleUploadedFile("units.xlsx", content)

    response = client.post("/api/import/preview", {"file": upload})

    assert response.status_code == 200
    payload = response.json()
    assert payload["data"][0]["Handover"].startswith("2025-06-30")
    assert payload["detectedFields"]["Handover"]["type"] == "string"


def test_preview_import_unsupported_extension(client) -> None:
    upload = SimpleUploadedFile("notes.docx", b"hello")

    response = client.post("/api/import/preview", {"file": upload})

    assert response.status_code == 400
    payload = response.json()
    assert payload["extension"] == "docx"
    assert "notes.docx" in payload["detail"]


def test_preview_import_broken_workbook(client) -> None:
    upload = SimpleUploadedFile("units.xlsx", b"not a workbook")

    response = client.post("/api/import/preview", {"file": upload})

    assert response.status_code == 400
    assert response.json()["filename"] == "units.xlsx"


def test_preview_import_requires_file(client) -> None:
    assert client.post("/api/import/preview").status_code == 400
    assert client.get("/api/import/preview").status_code == 405


def test_import_then_query(client, data_file: Path) -> None:
    body = {
        "units": [
            {"Unit Name": "A-101", "Phase: Phase Name": "Phase 1", "Unit Price": "250000", "Secret": "x"},
            {"Unit Name": "B-201", "Phase: Phase Name": "Phase 2", "Unit Price": "400000", "Secret": "y"},
        ],
        "fields": ["Unit Name", "Phase: Phase Name", "Unit Price"],
    }

    response = client.post("/api/properties", data=json.dumps(body), content_type="application/json")

    assert response.status_code == 200
    assert response.json() == {"success": True, "count": 2, "message": "Successfully imported 2 units"}
    stored = json.loads(data_file.read_text(encoding="utf-8"))
    assert all("Secret" not in record for record in stored)
    assert all(record["id"] and record["createdAt"] for record in stored)

    response = client.get("/api/properties", {"minPrice": "300000", "limit": "5"})

    payload = response.json()
    assert response.status_code == 200
    assert payload["total"] == 1
    assert payload["page"] == 1
    assert payload["limit"] == 5
    assert payload["data"][0]["Unit Name"] == "B-201"
    assert payload["filterOptions"]["locations"] == ["Phase 1", "Phase 2"]


def test_import_rejects_bad_payloads(client, data_file: Path) -> None:
    bad_json = client.post("/api/properties", data="{", content_type="application/json")
    no_units = client.post("/api/properties", data=json.dumps({"rows": []}), content_type="application/json")
    bad_fields = client.post(
        "/api/properties",
        data=json.dumps({"units": [{"a": 1}], "fields": "a"}),
        content_type="application/json",
    )
    nested_fields = client.post(
        "/api/properties",
        data=json.dumps({"units": [{"a": 1}], "fields": [["a"]]}),
        content_type="application/json",
    )

    assert bad_json.status_code == 400
    assert no_units.status_code == 400
    assert no_units.json()["message"] == "Invalid data format"
    assert bad_fields.status_code == 400
    assert nested_fields.status_code == 400
    assert not data_file.exists()


def test_query_with_unreadable_storage_still_answers(client, data_file: Path) -> None:
    data_file.write_text("[broken", encoding="utf-8")

    response = client.get("/api/properties", {"page": "2"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["data"] == []
    assert payload["total"] == 0
    assert payload["page"] == 2
    assert payload["error"] == "Could not read properties data file"


def test_query_empty_store(client, data_file: Path) -> None:
    payload = client.get("/api/properties").json()

    assert payload["total"] == 0
    assert payload["totalPages"] == 0
    assert payload["filterOptions"] == {"locations": [], "roomOptions": [], "unitTypes": [], "statusOptions": []}


def test_query_uses_column_overrides(client, data_file: Path, settings) -> None:
    settings.UNIT_COLUMNS = {"search": ["Title"]}
    data_file.write_text(json.dumps([{"Title": "Loft"}, {"Title": "Studio"}]), encoding="utf-8")

    payload = client.get("/api/properties", {"search": "stu"}).json()

    assert [record["Title"] for record in payload["data"]] == ["Studio"]
