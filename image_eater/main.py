"""FastAPI application factory for the image ingestion service."""

from __future__ import annotations

import inspect
import logging

from fastapi import FastAPI

from .api import router
from .config import Settings, get_settings

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    logging.basicConfig(level=logging.INFO)
    app = FastAPI(
        title="Image Eater",
        description="Stores uploaded, base64-embedded and remote images with 100x100 thumbnails.",
        version="0.1.0",
    )
    app.include_router(router)

    async def _resolve_settings() -> Settings:
        override = app.dependency_overrides.get(get_settings)
        if override is None:
            return get_settings()

        candidate = override()
        if inspect.isawaitable(candidate):
            return await candidate
        return candidate

    @app.on_event("startup")
    async def prepare_storage() -> None:
        """Make sure the destination directory exists before accepting uploads."""
        settings = await _resolve_settings()
        settings.storage_dir.mkdir(parents=True, exist_ok=True)
        logger.info(
            "Image storage ready",
            extra={"files_dir": settings.files_dir, "files_field": settings.files_field},
        )

    return app


app = create_app()
