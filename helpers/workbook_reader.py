"""
Reader for spreadsheet uploads (.xlsx / .xls).

Only the first sheet is read. Exported sheets often carry a title or a few
blank rows above the table, so the header is the first non-empty row among
the first ``HEADER_SCAN_ROWS`` physical rows rather than always row 0.
"""
from __future__ import annotations

import io
import logging
import re
from typing import Any, List, Sequence

import numpy as np
import pandas as pd

from .errors import FileParseError
from .records import ParseResult, Record, build_parse_result, build_record
from .type_inference import is_empty_value, unique_names

logger = logging.getLogger(__name__)

HEADER_SCAN_ROWS = 10
MAX_EMPTY_RATIO = 0.5

LABEL_SPLIT_REGEX = re.compile(r"[_\s]")


def read_sheet_rows(content: bytes, filename: str = "<upload>") -> List[List[Any]]:
    """
    Return every physical row of the first sheet with raw cell values.

    Numbers and dates keep their types; empty cells come back as ``None``.
    """
    try:
        frame = pd.read_excel(
            io.BytesIO(content),
            sheet_name=0,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[""],
        )
    except Exception as exc:
        raise FileParseError(f"Failed to parse Excel {filename}: {exc}", filename=filename) from exc

    if frame.empty:
        return []
    frame = frame.astype(object).where(pd.notna(frame), None)
    return [
        [_native(cell) for cell in row]
        for row in frame.itertuples(index=False, name=None)
    ]


def _native(cell: Any) -> Any:
    if isinstance(cell, np.generic):
        return cell.item()
    return cell


def find_header_row(rows: Sequence[Sequence[Any]], scan_limit: int = HEADER_SCAN_ROWS) -> int:
    for index, row in enumerate(rows[:scan_limit]):
        if any(not is_empty_value(cell) for cell in row):
            return index
    return 0


def header_names(row: Sequence[Any]) -> List[str]:
    names = [
        f"Column_{index + 1}" if is_empty_value(cell) else str(cell).strip()
        for index, cell in enumerate(row)
    ]
    return unique_names(names)


def humanize_label(name: str) -> str:
    """
    ``Column_3`` -> ``Column 3``, ``unit_price`` -> ``Unit Price``.
    """
    renamed = re.sub(r"^Column_", "Column ", name)
    words = LABEL_SPLIT_REGEX.split(renamed)
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def count_empty_cells(row: Sequence[Any], width: int) -> int:
    empty = 0
    for index in range(width):
        if index >= len(row) or is_empty_value(row[index]):
            empty += 1
    return empty


def is_sparse_row(row: Sequence[Any], width: int) -> bool:
    """A row is unusable when more than half of its header-aligned cells are empty."""
    return count_empty_cells(row, width) > width * MAX_EMPTY_RATIO


def parse_workbook(content: bytes, filename: str = "<upload>") -> ParseResult:
    rows = read_sheet_rows(content, filename)
    if not rows:
        logger.warning("Workbook %s has no rows", filename)
        return ParseResult()
    logger.info("Raw data in %s has %s rows", filename, len(rows))

    header_index = find_header_row(rows)
    headers = header_names(rows[header_index])
    logger.info("Using row %s of %s as header row: %s", header_index, filename, headers)

    records: List[Record] = []
    for row_index in range(header_index + 1, len(rows)):
        row = rows[row_index]
        if all(is_empty_value(cell) for cell in row):
            continue
        if is_sparse_row(row, len(headers)):
            logger.debug(
                "Skipping row %s of %s with %s/%s empty fields",
                row_index,
                filename,
                count_empty_cells(row, len(headers)),
                len(headers),
            )
            continue
        records.append(build_record(headers, row))

    logger.info("Processed %s rows from %s", len(records), filename)
    return build_parse_result(records, headers, labeler=humanize_label)
