"""API route definitions."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Request, UploadFile, status
from fastapi.responses import JSONResponse

from dominantcolor.api.middleware import verify_api_key
from dominantcolor.api.schemas import (
    Base64ImageRequest,
    DominantColorResponse,
    ErrorResponse,
    HealthResponse,
)
from dominantcolor.binding import ExtractionOptions, dominant_color, dominant_color_base64
from dominantcolor.engine.extract import Algorithm
from dominantcolor.errors import DecodeError, EmptyInputError, InvalidConfigError

if TYPE_CHECKING:
    from collections.abc import Callable

    from dominantcolor.config import Settings
    from dominantcolor.engine.pixels import Color
    from dominantcolor.engine.pool import ExtractionPool

logger = logging.getLogger(__name__)

_PAYLOAD_TOO_LARGE: int = HTTPStatus.REQUEST_ENTITY_TOO_LARGE.value
_UNPROCESSABLE: int = HTTPStatus.UNPROCESSABLE_ENTITY.value

router = APIRouter(prefix="/api/v1", dependencies=[Depends(verify_api_key)])

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    _PAYLOAD_TOO_LARGE: {"model": ErrorResponse},
    _UNPROCESSABLE: {"model": ErrorResponse},
    status.HTTP_503_SERVICE_UNAVAILABLE: {"model": ErrorResponse},
}


def _get_settings(request: Request) -> Settings:
    settings: Settings = request.app.state.settings
    return settings


def _get_extraction_pool(request: Request) -> ExtractionPool:
    pool: ExtractionPool = request.app.state.extraction_pool
    return pool


def _error(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def _run_extraction(
    request: Request,
    func: Callable[[object, ExtractionOptions], Color],
    payload: object,
    *,
    algorithm: Algorithm | None,
    quantization_bits: int | None,
    ignore_alpha_below: int | None,
) -> DominantColorResponse | JSONResponse:
    settings = _get_settings(request)
    pool = _get_extraction_pool(request)
    try:
        options = ExtractionOptions.from_settings(settings).override(
            algorithm=algorithm,
            quantization_bits=quantization_bits,
            ignore_alpha_below=ignore_alpha_below,
        )
        color = await pool.run(func, payload, options)
    except InvalidConfigError as exc:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))
    except (DecodeError, EmptyInputError) as exc:
        return _error(_UNPROCESSABLE, str(exc))
    except TimeoutError:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Extraction capacity exhausted, retry later")

    return DominantColorResponse(
        hex=color.hex,
        rgb=color.as_tuple(),
        packed=color.packed,
        algorithm=options.algorithm,
    )


@router.post(
    "/dominant-color",
    response_model=DominantColorResponse,
    responses=_ERROR_RESPONSES,
    summary="Dominant color of an uploaded image",
)
async def dominant_color_from_upload(
    request: Request,
    file: UploadFile,
    algorithm: Algorithm | None = None,
    quantization_bits: int | None = None,
    ignore_alpha_below: int | None = None,
) -> DominantColorResponse | JSONResponse:
    """Decode an uploaded image file and return its dominant color."""
    settings = _get_settings(request)
    data = await file.read(settings.max_file_size + 1)
    if len(data) > settings.max_file_size:
        return _error(
            _PAYLOAD_TOO_LARGE,
            f"File exceeds the {settings.max_file_size} byte limit",
        )

    logger.info("Extracting dominant color from upload %s (%d bytes)", file.filename, len(data))
    return await _run_extraction(
        request,
        dominant_color,
        data,
        algorithm=algorithm,
        quantization_bits=quantization_bits,
        ignore_alpha_below=ignore_alpha_below,
    )


@router.post(
    "/dominant-color/base64",
    response_model=DominantColorResponse,
    responses=_ERROR_RESPONSES,
    summary="Dominant color of a base64-encoded image",
)
async def dominant_color_from_base64(
    request: Request,
    body: Base64ImageRequest,
) -> DominantColorResponse | JSONResponse:
    """Decode a base64 image and return its dominant color."""
    return await _run_extraction(
        request,
        dominant_color_base64,
        body.image,
        algorithm=body.algorithm,
        quantization_bits=body.quantization_bits,
        ignore_alpha_below=body.ignore_alpha_below,
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
)
async def health(request: Request) -> HealthResponse:
    """Return service health status."""
    settings = _get_settings(request)
    pool = _get_extraction_pool(request)
    return HealthResponse(
        status="ok",
        algorithm=Algorithm(settings.algorithm),
        capacity=pool.capacity,
        concurrent_requests=pool.active_count,
        queue_depth=pool.queue_depth,
    )
