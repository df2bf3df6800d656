"""
Column type inference shared by the delimited text and workbook readers.

A column is classified from its first non-empty value only: numbers (or text
that reads as a plain decimal literal) make a ``number`` column, anything else
a ``string`` column. The value that decided the type is kept as the example
shown in the import preview.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from math import isfinite
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence

import pandas as pd

DECIMAL_REGEX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
INTEGER_REGEX = re.compile(r"^[+-]?\d+$")


@dataclass
class FieldInfo:
    type: str
    label: str
    example: Any = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "label": self.label, "example": self.example}


def is_empty_value(value: Any) -> bool:
    """None, NaN/NaT and the empty string all count as a missing cell."""
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def coerce_number(value: Any) -> int | float | None:
    """
    Read a value as a number, or return None.

    Numeric values pass through. Text is trimmed and must be a complete decimal
    literal; integer literals come back as ``int`` so ``"100"`` stays ``100``.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value if _fits_float(value) else None
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text or not DECIMAL_REGEX.match(text):
        return None
    try:
        number = int(text) if INTEGER_REGEX.match(text) else float(text)
    except (ValueError, OverflowError):
        return None
    return number if _fits_float(number) else None


def _fits_float(number: int | float) -> bool:
    """Finite and representable as a float; huge integers are not."""
    try:
        return isfinite(number)
    except OverflowError:
        return False


def to_text(value: Any) -> str:
    """Stringify a cell the way it would be displayed: ``3.0`` reads as ``3``."""
    if value is None:
        return ""
    if isinstance(value, float) and isfinite(value) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def infer_field(records: Iterable[Mapping[str, Any]], column: str, label: str | None = None) -> FieldInfo:
    for record in records:
        value = record.get(column)
        if is_empty_value(value):
            continue

        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return FieldInfo(type="number", label=label or column, example=value)

        number = coerce_number(value)
        if number is not None:
            return FieldInfo(type="number", label=label or column, example=number)
        return FieldInfo(type="string", label=label or column, example=value)

    return FieldInfo(type="string", label=label or column, example=None)


def infer_fields(
    records: Sequence[Mapping[str, Any]],
    fields: Sequence[str],
    labeler: Callable[[str], str] | None = None,
) -> Dict[str, FieldInfo]:
    """
    Build the ``detectedFields`` mapping for every column, in column order.
    """
    detected: Dict[str, FieldInfo] = {}
    for column in fields:
        label = labeler(column) if labeler else column
        detected[column] = infer_field(records, column, label=label)
    return detected


def unique_names(names: Iterable[str]) -> List[str]:
    """Suffix repeated column names with ``_2``, ``_3``... so every key is distinct."""
    seen: Dict[str, int] = {}
    unique: List[str] = []
    for name in names:
        if name not in seen:
            seen[name] = 1
            unique.append(name)
            continue
        count = seen[name]
        candidate = f"{name}_{count + 1}"
        while candidate in seen:
            count += 1
            candidate = f"{name}_{count + 1}"
        seen[name] = count + 1
        seen[candidate] = 1
        unique.append(candidate)
    return unique
