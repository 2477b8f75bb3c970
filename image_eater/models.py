"""Pydantic models for the image ingestion API."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ImageSourcesRequest(BaseModel):
    """JSON body for POST /images."""

    base64: list[str] = Field(
        default_factory=list,
        description='Images embedded as "data:image/<png|jpg|jpeg|gif>;base64,<data>" strings.',
    )
    urls: list[str] = Field(
        default_factory=list,
        description="Remote image URLs to download.",
    )


class IngestionErrorDetail(BaseModel):
    """Error detail returned when an image in the batch could not be stored."""

    error: str = Field(description="Failure kind, e.g. 'format_error' or 'network_error'.")
    message: str = Field(description="Human readable description of the first failure.")
