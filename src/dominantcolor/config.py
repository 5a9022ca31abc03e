"""Environment-based configuration for DominantColor."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from DOMINANTCOLOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="DOMINANTCOLOR_",
        case_sensitive=False,
    )

    # Server
    host: str = "0.0.0.0"  # noqa: S104
    port: int = 8083
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Authentication (None = disabled)
    api_key: str | None = None

    # Extraction defaults
    algorithm: Literal["histogram", "kmeans", "vibrant"] = "histogram"
    quantization_bits: int = Field(default=5, ge=1, le=8)
    ignore_alpha_below: int = Field(default=0, ge=0, le=255)
    sample_image_size: int = Field(default=256, ge=0)

    # K-means
    kmeans_clusters: int = Field(default=4, ge=1)
    kmeans_color_search_retries: int = Field(default=10, ge=1)
    kmeans_convergence_iterations: int = Field(default=50, ge=1)
    kmeans_brightness_threshold: int = Field(default=665, ge=0, le=765)
    kmeans_darkness_threshold: int = Field(default=100, ge=0, le=765)

    # Vibrant
    vibrant_max_colors: int = Field(default=16, ge=1)

    # Concurrency
    max_concurrent: int = Field(default=2, ge=1)

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)
    max_file_size: int = Field(default=52_428_800, ge=1)


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
