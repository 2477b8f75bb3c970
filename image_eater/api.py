"""HTTP route definitions for the image ingestion service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError
from starlette.datastructures import UploadFile

from .config import Settings, get_settings
from .dispatcher import IngestionBatch, RawStream, dispatch
from .errors import IngestionError
from .models import ImageSourcesRequest, IngestionErrorDetail

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check() -> dict:
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "image-eater"}


async def _run_batch(batch: IngestionBatch, settings: Settings) -> None:
    try:
        await run_in_threadpool(dispatch, batch, settings)
    except IngestionError as exc:
        logger.error(
            "Image ingestion failed",
            extra={"kind": exc.kind, "batch_size": len(batch)},
            exc_info=exc,
        )
        detail = IngestionErrorDetail(error=exc.kind, message=str(exc))
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail.model_dump(),
        ) from exc


async def _load_multipart(request: Request, settings: Settings) -> None:
    async with request.form() as form:
        streams = [
            RawStream(name=upload.filename, stream=upload.file)
            for field, upload in form.multi_items()
            if field == settings.files_field and isinstance(upload, UploadFile) and upload.filename
        ]
        logger.info("Processing multipart upload", extra={"files": len(streams)})
        await _run_batch(IngestionBatch(streams=streams), settings)


async def _load_json(request: Request, settings: Settings) -> None:
    body = await request.body()
    try:
        payload = ImageSourcesRequest.model_validate_json(body)
    except ValidationError as exc:
        logger.warning("Rejected malformed JSON body", extra={"error": str(exc)})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Body must be a JSON object with 'base64' and 'urls' string arrays.",
        ) from exc

    logger.info(
        "Processing JSON upload",
        extra={"base64": len(payload.base64), "urls": len(payload.urls)},
    )
    await _run_batch(IngestionBatch(base64_payloads=payload.base64, urls=payload.urls), settings)


@router.post("/images", response_class=PlainTextResponse)
async def load_images(
    request: Request,
    settings: Settings = Depends(get_settings),
) -> PlainTextResponse:
    """Store every image of the request; the first failure aborts the rest."""
    media_type = request.headers.get("content-type", "").split(";", 1)[0].strip().lower()

    if media_type == "multipart/form-data":
        await _load_multipart(request, settings)
    elif media_type == "application/json":
        await _load_json(request, settings)
    else:
        logger.warning("Unsupported content type", extra={"content_type": media_type})
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Content-Type must be multipart/form-data or application/json.",
        )

    return PlainTextResponse("ok")
