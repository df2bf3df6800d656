"""
Error types shared by the ingestion and query helpers.
"""
from __future__ import annotations


class IngestionError(Exception):
    """Raised when an uploaded file cannot be turned into records."""

    def __init__(self, message: str, filename: str | None = None) -> None:
        super().__init__(message)
        self.filename = filename


class UnsupportedFormatError(IngestionError):
    """Raised when the file extension is not a delimited text or workbook format."""

    def __init__(self, filename: str, extension: str) -> None:
        super().__init__(
            f"Unsupported file format '.{extension}' for {filename}. Please upload a CSV or Excel file.",
            filename=filename,
        )
        self.extension = extension


class FileParseError(IngestionError):
    """Raised when the bytes of a supported format are unreadable or malformed."""


class StorageUnavailable(Exception):
    """Raised by a unit store when the persisted collection cannot be read."""


class EmptyInputWarning(UserWarning):
    """An upload contained no header row or no rows at all."""
