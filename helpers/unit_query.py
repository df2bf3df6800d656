"""
Filtering, facet extraction and pagination over imported unit records.

Records are open-schema dictionaries, so each query builds a pandas frame from
them only to compute boolean masks; the records handed back are always the
original objects, with no keys added or removed.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from math import ceil, inf
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .errors import StorageUnavailable
from .records import Record
from .type_inference import coerce_number, is_empty_value, to_text
from .unit_store import UnitStore

logger = logging.getLogger(__name__)

ANY_LOCATION = "any_location"
ANY_ROOMS = "any_rooms"
ANY_TYPE = "any_type"
ANY_STATUS = "any_status"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10


@dataclass
class UnitColumns:
    """Record keys the query engine reads; imports use these column headers."""

    search: Tuple[str, ...] = ("Unit Name", "Phase: Phase Name", "Unit Type", "Building Name")
    price: str = "Unit Price"
    price_fallback: Optional[str] = "Final Total Unit Price"
    location: str = "Phase: Phase Name"
    rooms: str = "Number of rooms"
    unit_type: str = "Unit Type"
    status: str = "Unit Status"
    area: str = "Unit Gross Area"
    area_fallback: Optional[str] = None

    @classmethod
    def from_overrides(cls, overrides: Mapping[str, Any] | None) -> "UnitColumns":
        columns = cls()
        for name, value in (overrides or {}).items():
            if not hasattr(columns, name):
                raise ValueError(f"Unknown unit column setting: {name}")
            if name == "search":
                value = tuple(value)
            setattr(columns, name, value)
        return columns


@dataclass
class FilterQuery:
    search: str = ""
    min_price: float = 0
    max_price: float = inf
    location: str = ANY_LOCATION
    rooms: str = ANY_ROOMS
    unit_type: str = ANY_TYPE
    unit_status: str = ANY_STATUS
    min_area: float = 0
    max_area: float = inf
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "FilterQuery":
        """
        Build a query from request parameters.

        Missing, zero or non-numeric numbers fall back to their defaults;
        empty categorical values mean no constraint.
        """
        return cls(
            search=params.get("search") or "",
            min_price=_number_param(params, "minPrice", 0),
            max_price=_number_param(params, "maxPrice", inf),
            location=params.get("location") or ANY_LOCATION,
            rooms=params.get("rooms") or ANY_ROOMS,
            unit_type=params.get("unitType") or ANY_TYPE,
            unit_status=params.get("unitStatus") or ANY_STATUS,
            min_area=_number_param(params, "minArea", 0),
            max_area=_number_param(params, "maxArea", inf),
            page=max(1, int(_number_param(params, "page", DEFAULT_PAGE))),
            limit=max(1, int(_number_param(params, "limit", DEFAULT_LIMIT))),
        )


@dataclass
class FilterOptions:
    locations: List[str] = field(default_factory=list)
    room_options: List[str] = field(default_factory=list)
    unit_types: List[str] = field(default_factory=list)
    status_options: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "locations": self.locations,
            "roomOptions": self.room_options,
            "unitTypes": self.unit_types,
            "statusOptions": self.status_options,
        }


@dataclass
class QueryResponse:
    data: List[Record]
    total: int
    page: int
    limit: int
    filter_options: FilterOptions = field(default_factory=FilterOptions)
    error: Optional[str] = None

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit else 0

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "data": self.data,
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "filterOptions": self.filter_options.to_dict(),
        }
        if self.error is not None:
            payload["error"] = self.error
        return payload


def _number_param(params: Mapping[str, Any], name: str, default: float) -> float:
    value = coerce_number(params.get(name))
    return value if value else default


def _is_present(value: Any) -> bool:
    """Truthiness for cell values: empty, missing, zero and False all count as absent."""
    if is_empty_value(value) or value is False:
        return False
    if isinstance(value, (int, float)) and value == 0:
        return False
    return True


def _frame(records: Sequence[Record]) -> pd.DataFrame:
    return pd.DataFrame(list(records), dtype=object)


def _column(df: pd.DataFrame, name: Optional[str]) -> pd.Series:
    if name and name in df.columns:
        return df[name]
    return pd.Series([None] * len(df), index=df.index, dtype=object)


def _metric(df: pd.DataFrame, primary: str, fallback: Optional[str]) -> pd.Series:
    values = _column(df, primary)
    if fallback:
        values = values.where(values.map(_is_present).astype(bool), _column(df, fallback))
    return values.map(lambda value: coerce_number(value) or 0)


def _search_mask(df: pd.DataFrame, term: str, columns: UnitColumns) -> pd.Series:
    needle = term.lower()
    mask = pd.Series(False, index=df.index)
    for name in columns.search:
        matches = _column(df, name).map(
            lambda value: _is_present(value) and needle in to_text(value).lower()
        )
        mask = mask | matches.astype(bool)
    return mask


def _range_mask(df: pd.DataFrame, primary: str, fallback: Optional[str], low: float, high: float) -> pd.Series:
    values = _metric(df, primary, fallback).astype(float)
    return (values >= low) & (values <= high)


def _equals_mask(df: pd.DataFrame, name: str, expected: str, case_sensitive: bool = False) -> pd.Series:
    if case_sensitive:
        matches = _column(df, name).map(lambda value: _is_present(value) and to_text(value) == expected)
    else:
        target = expected.lower()
        matches = _column(df, name).map(
            lambda value: _is_present(value) and to_text(value).lower() == target
        )
    return matches.astype(bool)


def _is_open_range(low: float, high: float) -> bool:
    return low <= 0 and high == inf


def _is_constrained(value: str, sentinel: str) -> bool:
    return bool(value) and value != sentinel


def filter_units(
    records: Sequence[Record],
    query: FilterQuery,
    columns: UnitColumns | None = None,
) -> List[Record]:
    """
    Apply search, price, location, rooms, type, status and area filters in order.
    """
    columns = columns or UnitColumns()
    if not records:
        return []

    filtered = _frame(records)

    if query.search:
        filtered = filtered[_search_mask(filtered, query.search, columns)]

    if not _is_open_range(query.min_price, query.max_price):
        filtered = filtered[
            _range_mask(filtered, columns.price, columns.price_fallback, query.min_price, query.max_price)
        ]

    if _is_constrained(query.location, ANY_LOCATION):
        filtered = filtered[_equals_mask(filtered, columns.location, query.location)]

    if _is_constrained(query.rooms, ANY_ROOMS):
        filtered = filtered[_equals_mask(filtered, columns.rooms, query.rooms, case_sensitive=True)]

    if _is_constrained(query.unit_type, ANY_TYPE):
        filtered = filtered[_equals_mask(filtered, columns.unit_type, query.unit_type)]

    if _is_constrained(query.unit_status, ANY_STATUS):
        filtered = filtered[_equals_mask(filtered, columns.status, query.unit_status)]

    if not _is_open_range(query.min_area, query.max_area):
        filtered = filtered[
            _range_mask(filtered, columns.area, columns.area_fallback, query.min_area, query.max_area)
        ]

    return [records[position] for position in filtered.index]


def _distinct_values(df: pd.DataFrame, name: str) -> List[str]:
    values = _column(df, name)
    present = values[values.map(_is_present).astype(bool)]
    return present.map(to_text).drop_duplicates().tolist()


def extract_filter_options(records: Sequence[Record], columns: UnitColumns | None = None) -> FilterOptions:
    """
    Distinct values per categorical column, in first-seen order.

    Always computed over the whole collection so a narrowed result set still
    offers every choice.
    """
    columns = columns or UnitColumns()
    if not records:
        return FilterOptions()

    df = _frame(records)
    return FilterOptions(
        locations=_distinct_values(df, columns.location),
        room_options=_distinct_values(df, columns.rooms),
        unit_types=_distinct_values(df, columns.unit_type),
        status_options=_distinct_values(df, columns.status),
    )


def paginate(records: Sequence[Record], page: int, limit: int) -> List[Record]:
    start_index = (page - 1) * limit
    end_index = start_index + limit
    return list(records[start_index:end_index])


def query_units(
    store: UnitStore,
    query: FilterQuery,
    columns: UnitColumns | None = None,
) -> QueryResponse:
    """
    Run one query against the store: filter, paginate and collect facet options.

    An unreadable store yields an empty response with ``error`` set.
    """
    try:
        records = store.read()
    except StorageUnavailable as exc:
        logger.error("Could not read unit records: %s", exc)
        return QueryResponse(
            data=[],
            total=0,
            page=query.page,
            limit=query.limit,
            error="Could not read properties data file",
        )

    filtered = filter_units(records, query, columns)
    logger.info("Query matched %s of %s units", len(filtered), len(records))
    return QueryResponse(
        data=paginate(filtered, query.page, query.limit),
        total=len(filtered),
        page=query.page,
        limit=query.limit,
        filter_options=extract_filter_options(records, columns),
    )
