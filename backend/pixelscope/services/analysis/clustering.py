"""
Dominant color extraction with k-means.

Centroids start from k pixels drawn uniformly with replacement from the
caller-supplied generator, so identical seeds give identical palettes.
Each iteration assigns every pixel to its nearest centroid (lowest index
wins ties), moves centroids to the rounded mean of their pixels and stops
early once no centroid moves.
"""

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np
from loguru import logger

from .errors import InvalidK
from .pixels import PixelBuffer, as_pixel_view

CONVERGENCE_EPSILON = 1e-10
# Upper bound on point-centroid pairs held in memory during one assignment chunk
ASSIGN_BUDGET = 1 << 20


@dataclass(frozen=True)
class Color:
    """8-bit RGB color."""
    r: int
    g: int
    b: int

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"


@dataclass(frozen=True)
class ClusteringResult:
    colors: Tuple[Color, ...]
    iterations: int
    converged: bool
    cluster_sizes: Tuple[int, ...]


def euclidean_distances(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """(n, k) matrix of Euclidean distances between points and centroids."""
    diff = points[:, np.newaxis, :] - centroids[np.newaxis, :, :]
    return np.sqrt(np.sum(diff * diff, axis=2))


def assign_chunk_size(k: int, budget: int = ASSIGN_BUDGET) -> int:
    """Points per assignment chunk so that chunk * k stays within budget."""
    return max(1, budget // max(1, k))


def assign_clusters(points: np.ndarray, centroids: np.ndarray,
                    budget: int = ASSIGN_BUDGET) -> np.ndarray:
    """
    Index of the nearest centroid for every point.

    argmin returns the first minimum, so equidistant centroids resolve to
    the lowest index. Points are processed in chunks sized so that the
    distance matrix never holds more than ``budget`` point-centroid pairs,
    whatever k is.
    """
    chunk_size = assign_chunk_size(centroids.shape[0], budget)
    labels = np.empty(points.shape[0], dtype=np.intp)
    for start in range(0, points.shape[0], chunk_size):
        stop = start + chunk_size
        labels[start:stop] = np.argmin(euclidean_distances(points[start:stop], centroids), axis=1)
    return labels


def round_half_away(values: np.ndarray) -> np.ndarray:
    """Round to nearest integer, halves away from zero."""
    return np.sign(values) * np.floor(np.abs(values) + 0.5)


def update_centroids(points: np.ndarray, labels: np.ndarray,
                     centroids: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    """
    Rounded mean of each cluster's points.

    A cluster that received no points takes a copy of the current centroid 0.

    Returns:
        Tuple of (new_centroids, cluster_sizes)
    """
    k = centroids.shape[0]
    sizes = np.bincount(labels, minlength=k)
    sums = np.zeros_like(centroids)
    np.add.at(sums, labels, points)

    new_centroids = np.empty_like(centroids)
    populated = sizes > 0
    new_centroids[populated] = round_half_away(sums[populated] / sizes[populated, np.newaxis])
    new_centroids[~populated] = centroids[0]
    return new_centroids, sizes


def centroids_equal(a: np.ndarray, b: np.ndarray, epsilon: float = CONVERGENCE_EPSILON) -> bool:
    return a.shape == b.shape and bool(np.all(np.abs(a - b) <= epsilon))


def cluster_colors(pixels: PixelBuffer, k: int, max_iterations: int,
                   rng: np.random.Generator) -> ClusteringResult:
    """
    Run k-means over the RGB samples of a buffer.

    Args:
        pixels: Flat RGBA buffer
        k: Number of clusters (1 <= k <= pixel count)
        max_iterations: Upper bound on assignment/update passes
        rng: Generator used to pick the initial centroids

    Returns:
        ClusteringResult; ``converged`` is False when max_iterations was
        reached before the centroids settled

    Raises:
        InvalidBufferLength: If the buffer is not made of whole RGBA groups
        InvalidK: If k is below 1 or above the pixel count
        ValueError: If max_iterations is negative
    """
    view = as_pixel_view(pixels)

    if k < 1 or k > view.pixel_count:
        raise InvalidK(f"k must be between 1 and the pixel count ({view.pixel_count}), got {k}")
    if max_iterations < 0:
        raise ValueError(f"max_iterations must be non-negative, got {max_iterations}")

    points = view.points()
    n_points = points.shape[0]

    logger.info(f"Starting k-means with k={k}, {n_points} pixels, max_iterations={max_iterations}")

    # Sampling with replacement; duplicate starting centroids are allowed
    initial = rng.integers(0, n_points, size=k)
    centroids = points[initial].copy()

    sizes = np.zeros(k, dtype=np.int64)
    converged = False
    iterations = 0

    for _ in range(max_iterations):
        iterations += 1
        labels = assign_clusters(points, centroids)
        new_centroids, sizes = update_centroids(points, labels, centroids)

        if centroids_equal(centroids, new_centroids):
            converged = True
            break
        centroids = new_centroids

        logger.debug(f"k-means iteration {iterations}: cluster sizes {sizes.tolist()}")

    if converged:
        logger.info(f"k-means converged after {iterations} iterations")
    else:
        logger.info(f"k-means stopped at max_iterations={max_iterations} without converging")

    colors = tuple(
        Color(r=int(c[0]), g=int(c[1]), b=int(c[2]))
        for c in centroids.astype(np.uint8)
    )

    return ClusteringResult(
        colors=colors,
        iterations=iterations,
        converged=converged,
        cluster_sizes=tuple(int(s) for s in sizes),
    )


def find_dominant_colors(pixels: PixelBuffer, k: int, max_iterations: int,
                         rng: np.random.Generator) -> List[Color]:
    """The k representative colors of a buffer (see cluster_colors)."""
    return list(cluster_colors(pixels, k, max_iterations, rng).colors)
