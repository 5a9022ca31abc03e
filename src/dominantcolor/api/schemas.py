"""Pydantic request/response schemas for the DominantColor API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from dominantcolor.engine.extract import Algorithm


class Base64ImageRequest(BaseModel):
    """A base64-encoded image with optional per-request extraction overrides."""

    image: str = Field(description="Standard base64 image data, optionally as a data: URI")
    algorithm: Algorithm | None = None
    quantization_bits: int | None = Field(default=None, description="Significant bits kept per channel (1-8)")
    ignore_alpha_below: int | None = Field(default=None, description="Exclude pixels with alpha below this (0-255)")


class DominantColorResponse(BaseModel):
    """The dominant color of an image."""

    hex: str = Field(description="Lowercase rrggbb, no leading '#'")
    rgb: tuple[int, int, int]
    packed: int = Field(description="Color packed as 0xRRGGBB")
    algorithm: Algorithm


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    algorithm: Algorithm
    capacity: int
    concurrent_requests: int
    queue_depth: int


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
