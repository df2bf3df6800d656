"""
Entry point for turning an uploaded file into a ``ParseResult``.
"""
from __future__ import annotations

import logging
import warnings
from pathlib import PurePath

from .delimited_reader import parse_delimited
from .errors import EmptyInputWarning, FileParseError, UnsupportedFormatError
from .records import ParseResult
from .workbook_reader import parse_workbook

logger = logging.getLogger(__name__)

DELIMITED_EXTENSIONS = ("csv", "tsv", "txt")
WORKBOOK_EXTENSIONS = ("xlsx", "xls", "xlsm")


def file_extension(filename: str) -> str:
    return PurePath(filename or "").suffix.lstrip(".").lower()


def parse_upload(filename: str, content: bytes | str) -> ParseResult:
    """
    Parse an uploaded file, dispatching on its extension.

    Raises ``UnsupportedFormatError`` for unknown extensions and
    ``FileParseError`` when the bytes cannot be read. An empty file is not an
    error: it yields an empty result and an ``EmptyInputWarning``.
    """
    extension = file_extension(filename)
    logger.info("Parsing file %s (%s bytes)", filename, len(content))

    if extension in DELIMITED_EXTENSIONS:
        result = parse_delimited(content, filename)
    elif extension in WORKBOOK_EXTENSIONS:
        if isinstance(content, str):
            raise FileParseError(
                f"Failed to parse Excel {filename}: workbook content must be bytes, not text.",
                filename=filename,
            )
        result = parse_workbook(content, filename)
    else:
        raise UnsupportedFormatError(filename, extension)

    if not result.data:
        warnings.warn(f"No rows found in {filename}", EmptyInputWarning, stacklevel=2)
    return result
