"""K-means clustering dominant color extraction.

RGB k-means with N clusters and at most M iterations:

1. Seed each cluster with a randomly sampled pixel color not already used
   as a centroid. After ``unique_color_search_retries`` failed draws, stop
   adding clusters (a single-color image devolves to one cluster).
2. Assign every pixel to its nearest centroid in RGB space and recompute
   each centroid as the mean of its pixels.
3. Stop once no centroid moves, or after ``convergence_iterations`` passes.
4. Sort clusters by weight (pixel count) and return the heaviest centroid
   whose channel sum falls strictly between the darkness and brightness
   thresholds. If none does, return the heaviest centroid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from dominantcolor.engine.pixels import Color
from dominantcolor.errors import EmptyInputError, InvalidConfigError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from dominantcolor.engine.pixels import PixelBuffer

logger = logging.getLogger(__name__)

RANDOM_SEED: int = 0
MAX_CHANNEL_SUM: int = 3 * 255


@dataclass(frozen=True)
class KMeansConfig:
    """Options for k-means extraction."""

    number_of_clusters: int = 4
    unique_color_search_retries: int = 10
    convergence_iterations: int = 50
    maximum_brightness_threshold: int = 665
    maximum_darkness_threshold: int = 100
    ignore_alpha_below: int = 0

    def __post_init__(self) -> None:
        for name in ("number_of_clusters", "unique_color_search_retries", "convergence_iterations"):
            value = getattr(self, name)
            if value < 1:
                raise InvalidConfigError(f"{name} must be >= 1, got {value}")
        for name in ("maximum_brightness_threshold", "maximum_darkness_threshold"):
            value = getattr(self, name)
            if not 0 <= value <= MAX_CHANNEL_SUM:
                raise InvalidConfigError(f"{name} must be in [0, {MAX_CHANNEL_SUM}], got {value}")
        if not 0 <= self.ignore_alpha_below <= 255:
            raise InvalidConfigError(f"ignore_alpha_below must be in [0, 255], got {self.ignore_alpha_below}")


def _seed_centroids(rgb: NDArray[np.int64], config: KMeansConfig) -> NDArray[np.int64]:
    rng = np.random.default_rng(RANDOM_SEED)
    centroids: list[tuple[int, int, int]] = []
    for _ in range(config.number_of_clusters):
        for _ in range(config.unique_color_search_retries):
            r, g, b = (int(c) for c in rgb[rng.integers(len(rgb))])
            if (r, g, b) not in centroids:
                centroids.append((r, g, b))
                break
        else:
            break
    return np.array(centroids, dtype=np.int64)


def _cluster(
    rgb: NDArray[np.int64],
    centroids: NDArray[np.int64],
    iterations: int,
) -> tuple[NDArray[np.int64], NDArray[np.int64]]:
    """Run Lloyd iterations and return the final centroids and their weights."""
    weights = np.zeros(len(centroids), dtype=np.int64)
    for iteration in range(iterations):
        distances = ((rgb[:, None, :] - centroids[None, :, :]) ** 2).sum(axis=2)
        labels = np.argmin(distances, axis=1)
        weights = np.bincount(labels, minlength=len(centroids))

        sums = np.zeros_like(centroids)
        np.add.at(sums, labels, rgb)
        updated = centroids.copy()
        populated = weights > 0
        updated[populated] = sums[populated] // weights[populated, None]

        converged = bool(np.array_equal(updated, centroids))
        centroids = updated
        if converged:
            logger.debug("K-means converged after %d iterations", iteration + 1)
            break
    return centroids, weights


def extract_kmeans_color(buffer: PixelBuffer, config: KMeansConfig | None = None) -> Color:
    """Return the dominant color of ``buffer`` using k-means clustering.

    Raises:
        EmptyInputError: If the buffer has no eligible pixels.
    """
    config = config or KMeansConfig()
    if buffer.pixel_count == 0:
        raise EmptyInputError("Pixel buffer is empty")

    rgb = buffer.eligible_rgb(config.ignore_alpha_below).astype(np.int64)
    if len(rgb) == 0:
        raise EmptyInputError(f"All {buffer.pixel_count} pixels have alpha below {config.ignore_alpha_below}")

    centroids = _seed_centroids(rgb, config)
    centroids, weights = _cluster(rgb, centroids, config.convergence_iterations)

    # Stable sort keeps seeding order among equally weighted clusters.
    order = np.argsort(-weights, kind="stable")
    logger.debug("K-means: %d clusters, weights=%s", len(centroids), weights[order].tolist())

    chosen = centroids[order[0]]
    for index in order:
        channel_sum = int(centroids[index].sum())
        if config.maximum_darkness_threshold < channel_sum < config.maximum_brightness_threshold:
            chosen = centroids[index]
            break
    return Color(*(int(c) for c in chosen))
