"""
Reader for delimited text uploads (comma, semicolon, tab or pipe separated).

Rows are split on the delimiter found in the header line; there is no quoting
support beyond stripping a pair of quotes wrapping a whole token.
"""
from __future__ import annotations

import logging
import re
from typing import List, Sequence

from .errors import FileParseError
from .records import ParseResult, Record, build_parse_result, build_record
from .type_inference import unique_names

logger = logging.getLogger(__name__)

CANDIDATE_DELIMITERS = (",", ";", "\t", "|")

LINE_BREAK_REGEX = re.compile(r"\r?\n")
WRAPPING_QUOTES_REGEX = re.compile(r"^([\"'])(.+)\1$", re.DOTALL)


def sniff_delimiter(first_line: str) -> str:
    """
    Pick the candidate delimiter that splits the line into the most fields.

    Ties go to the earlier candidate, so a line with no delimiter at all
    falls back to a comma.
    """
    best_delimiter = CANDIDATE_DELIMITERS[0]
    max_fields = 0
    for delimiter in CANDIDATE_DELIMITERS:
        count = len(first_line.split(delimiter))
        if count > max_fields:
            max_fields = count
            best_delimiter = delimiter
    return best_delimiter


def strip_quotes(token: str) -> str:
    cleaned = token.strip()
    match = WRAPPING_QUOTES_REGEX.match(cleaned)
    if match:
        return match.group(2)
    return cleaned


def tokenize(line: str, delimiter: str) -> List[str]:
    return [strip_quotes(token) for token in line.strip().split(delimiter)]


def normalize_headers(tokens: Sequence[str]) -> List[str]:
    """
    Clean header tokens and name blank ones ``Column_<n>`` (1-based).
    """
    headers = [
        strip_quotes(token) or f"Column_{index + 1}"
        for index, token in enumerate(tokens)
    ]
    return unique_names(headers)


def is_blank_line(line: str) -> bool:
    return not line.strip()


def decode_text(content: bytes | str, filename: str = "<upload>") -> str:
    if isinstance(content, str):
        return content
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise FileParseError(
            f"Failed to parse CSV {filename}: file is not valid UTF-8 text ({exc.reason}).",
            filename=filename,
        ) from exc


def parse_delimited(content: bytes | str, filename: str = "<upload>") -> ParseResult:
    """
    Parse delimited text into records keyed by the header row.

    Blank lines are skipped; short rows are padded with empty strings so every
    record carries every header.
    """
    text = decode_text(content, filename).strip()
    if not text:
        logger.warning("Delimited file %s is empty", filename)
        return ParseResult()

    lines = LINE_BREAK_REGEX.split(text)
    delimiter = sniff_delimiter(lines[0])
    logger.info("Using delimiter %r for %s", delimiter, filename)

    headers = normalize_headers(lines[0].split(delimiter))
    logger.debug("Headers found in %s: %s", filename, headers)

    records: List[Record] = []
    for line_number, line in enumerate(lines[1:], start=2):
        if is_blank_line(line):
            logger.debug("Skipping blank line %s in %s", line_number, filename)
            continue
        records.append(build_record(headers, tokenize(line, delimiter)))

    logger.info("Parsed %s data rows from %s", len(records), filename)
    return build_parse_result(records, headers)
