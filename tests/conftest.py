from __future__ import annotations

import io
from typing import Any, Callable, List, Sequence

import pytest
from openpyxl import Workbook


def build_workbook(rows: Sequence[Sequence[Any]], start_row: int = 1) -> bytes:
    """Write rows into the first sheet starting at ``start_row`` (1-based); None leaves a cell unset."""
    workbook = Workbook()
    sheet = workbook.active
    for offset, row in enumerate(rows):
        for column, value in enumerate(row, start=1):
            if value is not None:
                sheet.cell(row=start_row + offset, column=column, value=value)
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook() -> Callable[..., bytes]:
    return build_workbook


@pytest.fixture
def units() -> List[dict]:
    return [
        {
            "Unit Name": "A-101",
            "Phase: Phase Name": "Phase 1",
            "Unit Type": "Apartment",
            "Building Name": "Cedar",
            "Unit Price": "250000",
            "Number of rooms": "2",
            "Unit Status": "Available",
            "Unit Gross Area": "85",
        },
        {
            "Unit Name": "A-102",
            "Phase: Phase Name": "Phase 1",
            "Unit Type": "Penthouse",
            "Building Name": "Cedar",
            "Unit Price": "",
            "Final Total Unit Price": "900000",
            "Number of rooms": "4",
            "Unit Status": "Sold",
            "Unit Gross Area": "210",
        },
        {
            "Unit Name": "B-201",
            "Phase: Phase Name": "Phase 2",
            "Unit Type": "apartment",
            "Building Name": "Maple",
            "Unit Price": 400000,
            "Number of rooms": 3,
            "Unit Status": "Reserved",
            "Unit Gross Area": 120.0,
        },
        {
            "Unit Name": "S-1",
            "Phase: Phase Name": "Phase 2",
            "Unit Type": "Shop",
            "Building Name": "Maple Retail",
            "Unit Price": "n/a",
            "Unit Status": "Available",
        },
    ]
