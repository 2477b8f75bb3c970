"""Ingestors that persist an image from an upload, a data URI or a URL."""

from __future__ import annotations

import base64
import binascii
import logging
import re
import shutil
import time
from pathlib import Path
from typing import BinaryIO, Callable, Final
from urllib.parse import unquote, urlsplit

import requests

from .codec import decode_image, encode_image
from .errors import ContentTypeError, DecodeError, FormatError, NetworkError, StorageError
from .storage import discard_file, resolve_destination_path, thumbnail_path_for
from .thumbnail import THUMBNAIL_HEIGHT, THUMBNAIL_WIDTH, generate_thumbnail

logger = logging.getLogger(__name__)

CHUNK_SIZE: Final[int] = 64 * 1024
DEFAULT_FETCH_TIMEOUT: Final[float] = 30.0
DATA_URI_PREFIX_LENGTH: Final[int] = 10

# group 1: declared format (png, jpg, jpeg, gif), group 2: base64 data
_data_uri = re.compile(r"data:image/([a-z]{3,4});base64,(.*)", re.DOTALL)


def _store_original(destination: str, write: Callable[[BinaryIO], object]) -> None:
    """
    Write the original with ``write`` and derive its thumbnail.

    Once the file has been created, any later failure removes it again so an
    original never outlives a failed thumbnail.
    """
    path = Path(destination)
    try:
        handle = path.open("wb")
    except (OSError, ValueError) as exc:
        raise StorageError(f"cannot create {destination}: {exc}") from exc

    try:
        try:
            with handle:
                write(handle)
        except OSError as exc:
            raise StorageError(f"cannot write {destination}: {exc}") from exc

        logger.info("Stored original image", extra={"path": destination})
        generate_thumbnail(path, thumbnail_path_for(destination), THUMBNAIL_WIDTH, THUMBNAIL_HEIGHT)
    except Exception:
        discard_file(path)
        raise


def ingest_stream(stream_name: str, stream: BinaryIO, destination_dir: str) -> str:
    """Copy an uploaded file stream to disk in chunks and thumbnail it."""
    destination = resolve_destination_path(destination_dir, stream_name)
    logger.info("Saving uploaded file", extra={"path": destination, "source_name": stream_name})

    _store_original(destination, lambda handle: shutil.copyfileobj(stream, handle, CHUNK_SIZE))
    return destination


def ingest_base64(payload: str, destination_dir: str) -> str:
    """
    Persist an image embedded as ``data:image/<format>;base64,<data>``.

    The payload is fully decoded with the declared format before anything is
    written, then re-encoded to disk.
    """
    match = _data_uri.match(payload)
    if match is None:
        raise FormatError("base64", "undefined")

    format_token, data = match.groups()
    data = data.replace("\r", "").replace("\n", "")
    try:
        raw = base64.b64decode(data, validate=True)
    except binascii.Error as exc:
        raise DecodeError("base64", "malformed base64 data") from exc

    decoded = decode_image(raw, format_token)

    filename = f"{int(time.time())}{data[:DATA_URI_PREFIX_LENGTH]}.{format_token}"
    destination = resolve_destination_path(destination_dir, filename)
    logger.info("Saving base64 image", extra={"path": destination, "format": decoded.format.value})

    _store_original(destination, lambda handle: handle.write(encode_image(decoded)))
    return destination


def _filename_from_url(url: str, content_type: str) -> str:
    filename = unquote(urlsplit(url).path.rsplit("/", 1)[-1])
    if "." not in filename:
        subtype = content_type.split("/", 1)[1].split(";", 1)[0].strip()
        filename = f"{filename}.{subtype}"
    return filename


def _copy_response(response: requests.Response, handle: BinaryIO, url: str) -> None:
    try:
        for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
            handle.write(chunk)
    except requests.RequestException as exc:
        raise NetworkError(f"download of {url} interrupted: {exc}") from exc


def ingest_url(url: str, destination_dir: str, timeout: float = DEFAULT_FETCH_TIMEOUT) -> str:
    """Download a remote image straight to disk and thumbnail it."""
    logger.info("Fetching remote image", extra={"url": url})
    try:
        response = requests.get(url, stream=True, timeout=timeout)
    except requests.RequestException as exc:
        raise NetworkError(f"cannot fetch {url}: {exc}") from exc

    with response:
        try:
            response.raise_for_status()
        except requests.HTTPError as exc:
            raise NetworkError(f"cannot fetch {url}: {exc}") from exc

        content_type = response.headers.get("Content-Type", "")
        if not content_type.startswith("image/"):
            raise ContentTypeError(content_type)

        destination = resolve_destination_path(destination_dir, _filename_from_url(url, content_type))
        logger.info("Saving remote image", extra={"path": destination, "url": url})

        _store_original(destination, lambda handle: _copy_response(response, handle, url))
    return destination
