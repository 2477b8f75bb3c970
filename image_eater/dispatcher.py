"""Batch dispatch of ingestion requests to the matching ingestor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Sequence, Union

from .config import Settings
from .ingestors import ingest_base64, ingest_stream, ingest_url

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RawStream:
    """An uploaded file: its client-supplied name and a readable binary stream."""

    name: str
    stream: BinaryIO


@dataclass(frozen=True)
class Base64Payload:
    """A ``data:image/<format>;base64,...`` string."""

    payload: str


@dataclass(frozen=True)
class RemoteReference:
    """A URL to download the image from."""

    url: str


IngestionRequest = Union[RawStream, Base64Payload, RemoteReference]


@dataclass(frozen=True)
class IngestionBatch:
    """All images submitted in one request, grouped by transport encoding."""

    streams: Sequence[RawStream] = ()
    base64_payloads: Sequence[str] = ()
    urls: Sequence[str] = ()

    def __iter__(self) -> Iterator[IngestionRequest]:
        yield from self.streams
        for payload in self.base64_payloads:
            yield Base64Payload(payload)
        for url in self.urls:
            yield RemoteReference(url)

    def __len__(self) -> int:
        return len(self.streams) + len(self.base64_payloads) + len(self.urls)


def ingest(request: IngestionRequest, settings: Settings) -> str:
    """Run the ingestor for one request and return the stored original's path."""
    if isinstance(request, RawStream):
        return ingest_stream(request.name, request.stream, settings.files_dir)
    if isinstance(request, Base64Payload):
        return ingest_base64(request.payload, settings.files_dir)
    if isinstance(request, RemoteReference):
        return ingest_url(request.url, settings.files_dir, timeout=settings.fetch_timeout_seconds)
    raise TypeError(f"Unsupported ingestion request: {type(request).__name__}")


def dispatch(batch: IngestionBatch, settings: Settings) -> int:
    """
    Ingest every request of ``batch`` in order.

    The first failure propagates unchanged and stops the batch. Images stored
    before it are kept.
    """
    ingested = 0
    for request in batch:
        ingest(request, settings)
        ingested += 1

    logger.info("Ingestion batch complete", extra={"ingested": ingested})
    return ingested
