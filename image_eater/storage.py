"""Destination path handling for stored images."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Final

logger = logging.getLogger(__name__)

PLACEHOLDER_FILENAME: Final[str] = "undefined"
THUMBNAIL_PREFIX: Final[str] = "min_"

_separators: Final[tuple[str, ...]] = ("/", "\\")
_repeated_separator = re.compile(r"/{2,}")


def resolve_destination_path(directory: str, filename: str) -> str:
    """
    Build the path of ``filename`` inside ``directory``.

    Separators are stripped from the filename so an untrusted name can never
    point outside the directory, an empty name becomes ``"undefined"``, and
    doubled separators in the joined path are collapsed.
    """
    for separator in _separators:
        filename = filename.replace(separator, "")
    if not filename:
        filename = PLACEHOLDER_FILENAME

    if not directory:
        return filename

    return _repeated_separator.sub("/", f"{directory}/{filename}")


def thumbnail_path_for(path: str) -> str:
    """Return the thumbnail path that sits next to ``path``."""
    directory, separator, filename = path.rpartition("/")
    return f"{directory}{separator}{THUMBNAIL_PREFIX}{filename}"


def discard_file(path: str | Path) -> None:
    """Remove a partially persisted file, logging instead of raising on failure."""
    try:
        Path(path).unlink(missing_ok=True)
    except OSError as exc:
        logger.warning(
            "Failed to delete partially stored image",
            extra={"path": str(path), "error": str(exc)},
        )
    else:
        logger.info("Removed partially stored image %s", path)
