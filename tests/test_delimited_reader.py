from __future__ import annotations

import pytest

from helpers.delimited_reader import (
    normalize_headers,
    parse_delimited,
    sniff_delimiter,
    strip_quotes,
    tokenize,
)
from helpers.errors import FileParseError


@pytest.mark.parametrize(
    ("line", "expected"),
    [
        ("Name,Price,Rooms", ","),
        ("Name;Price;Rooms", ";"),
        ("Name\tPrice\tRooms", "\t"),
        ("Name|Price|Rooms", "|"),
        ("Name;Price,Rooms;Status", ";"),
        ("Name", ","),
    ],
)
def test_sniff_delimiter_picks_separator_with_most_fields(line: str, expected: str) -> None:
    assert sniff_delimiter(line) == expected


def test_sniff_delimiter_tie_keeps_earlier_candidate() -> None:
    assert sniff_delimiter("a,b;c") == ","
    assert sniff_delimiter("a;b|c") == ";"


def test_strip_quotes_removes_matching_wrapping_pair_only() -> None:
    assert strip_quotes('  "Foo"  ') == "Foo"
    assert strip_quotes("'Foo'") == "Foo"
    assert strip_quotes("\"Foo'") == "\"Foo'"
    assert strip_quotes('"Foo" bar') == '"Foo" bar'
    assert strip_quotes('""') == '""'


def test_tokenize_trims_and_unquotes_each_token() -> None:
    assert tokenize(' "A-101" ; 12 ;\'Phase 1\' ', ";") == ["A-101", "12", "Phase 1"]


def test_normalize_headers_names_blank_and_repeated_columns() -> None:
    assert normalize_headers(["Name", " ", "Price", "Price"]) == ["Name", "Column_2", "Price", "Price_2"]
    assert normalize_headers(['"Name"', ""]) == ["Name", "Column_2"]


def test_parse_delimited_keeps_rows_with_empty_values() -> None:
    result = parse_delimited("Name,Price\nAcme,100\nBeta,\n")

    assert result.fields == ["Name", "Price"]
    assert result.data == [{"Name": "Acme", "Price": "100"}, {"Name": "Beta", "Price": ""}]
    assert result.detected_fields["Price"].type == "number"
    assert result.detected_fields["Price"].example == 100
    assert result.detected_fields["Name"].type == "string"
    assert result.detected_fields["Name"].example == "Acme"


def test_parse_delimited_pads_short_rows_and_drops_extra_tokens() -> None:
    result = parse_delimited("a|b|c\r\n1|2\r\n\r\n   \r\n4|5|6|7\r\n")

    assert result.data == [
        {"a": "1", "b": "2", "c": ""},
        {"a": "4", "b": "5", "c": "6"},
    ]


def test_parse_delimited_stores_tokens_as_text() -> None:
    result = parse_delimited(b"\xef\xbb\xbfUnit;Area\nA-1;85.5\n")

    assert result.fields == ["Unit", "Area"]
    assert result.data == [{"Unit": "A-1", "Area": "85.5"}]
    assert result.detected_fields["Area"].example == 85.5


def test_parse_delimited_empty_input_yields_empty_result() -> None:
    result = parse_delimited("  \n\n ")

    assert result.data == []
    assert result.fields == []
    assert result.detected_fields == {}


def test_parse_delimited_header_only() -> None:
    result = parse_delimited("Name,Price")

    assert result.fields == ["Name", "Price"]
    assert result.data == []
    assert result.detected_fields["Price"].to_dict() == {"type": "string", "label": "Price", "example": None}


def test_parse_delimited_rejects_undecodable_bytes() -> None:
    with pytest.raises(FileParseError) as excinfo:
        parse_delimited(b"Name\n\xff\xfe\xfa", filename="units.csv")

    assert excinfo.value.filename == "units.csv"
    assert "units.csv" in str(excinfo.value)


def test_parse_delimited_is_repeatable() -> None:
    content = b"Unit,,Price\nA,x,1\nB,y,2\n"

    first = parse_delimited(content)
    second = parse_delimited(content)

    assert first.fields == second.fields == ["Unit", "Column_2", "Price"]
    assert len(first.data) == len(second.data) == 2
