"""Failure types raised by the ingestion pipeline."""

from __future__ import annotations


class IngestionError(RuntimeError):
    """Base exception for ingestion failures."""

    kind = "ingestion_error"


class FormatError(IngestionError):
    """Raised when an image format is unrecognised or does not match the payload."""

    kind = "format_error"

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(f"format error: expected {expected}, but was {actual}")
        self.expected = expected
        self.actual = actual


class DecodeError(FormatError):
    """Raised when bytes cannot be decoded as the expected encoding."""

    kind = "decode_error"


class SizeError(IngestionError):
    """Raised when a non-positive thumbnail dimension is requested."""

    kind = "size_error"


class StorageError(IngestionError):
    """Raised when a file cannot be created, read or written."""

    kind = "storage_error"


class ContentTypeError(IngestionError):
    """Raised when a remote resource is not served as an image."""

    kind = "content_type_error"

    def __init__(self, content_type: str) -> None:
        super().__init__(f"content-type error: expected image/*, but was {content_type or 'undefined'}")
        self.content_type = content_type


class NetworkError(IngestionError):
    """Raised when a remote resource cannot be fetched."""

    kind = "network_error"
