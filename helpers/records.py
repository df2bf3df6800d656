"""
Record building: the common output of both file readers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Sequence

from .type_inference import FieldInfo, infer_fields

Record = Dict[str, Any]


@dataclass
class ParseResult:
    data: List[Record] = field(default_factory=list)
    fields: List[str] = field(default_factory=list)
    detected_fields: Dict[str, FieldInfo] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "fields": self.fields,
            "detectedFields": {name: info.to_dict() for name, info in self.detected_fields.items()},
        }


def build_record(headers: Sequence[str], values: Sequence[Any], missing: Any = "") -> Record:
    """
    Map header names onto row values by position.

    Values past the end of the row are filled with ``missing``; values past
    the last header are dropped.
    """
    return {
        header: values[index] if index < len(values) else missing
        for index, header in enumerate(headers)
    }


def build_parse_result(
    records: List[Record],
    headers: Sequence[str],
    labeler: Callable[[str], str] | None = None,
) -> ParseResult:
    return ParseResult(
        data=records,
        fields=list(headers),
        detected_fields=infer_fields(records, headers, labeler=labeler),
    )


def project_records(records: Sequence[Record], selected_fields: Sequence[str]) -> List[Record]:
    """
    Keep only the selected columns of each record, in selection order.

    Columns a record does not carry are left out rather than filled in.
    """
    projected: List[Record] = []
    for record in records:
        projected.append({name: record[name] for name in selected_fields if name in record})
    return projected
