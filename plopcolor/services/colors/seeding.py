"""
K-means++ centroid seeding.

Initial centroids are spread apart by drawing each new one with probability
proportional to its squared RGB distance from the nearest centroid already
chosen. Alpha never contributes to distance.
"""

import numpy as np
from loguru import logger

from plopcolor.errors import EmptySampleSetError, InvalidKError
from .samples import SampleSet


def squared_rgb_distances(rgb: np.ndarray, centroids_rgb: np.ndarray) -> np.ndarray:
    """Return an ``(n, k)`` matrix of squared Euclidean RGB distances."""
    diff = rgb[:, np.newaxis, :] - centroids_rgb[np.newaxis, :, :]
    return np.einsum("nkc,nkc->nk", diff, diff)


def weighted_index(weights: np.ndarray, rng: np.random.Generator) -> int:
    """
    Draw an index with probability proportional to ``weights``.

    Inverts the cumulative distribution: the first index whose running total
    exceeds ``u * total`` for a uniform ``u`` in [0, 1). Zero-weight entries
    can never be selected.
    """
    cumulative = np.cumsum(weights)
    total = cumulative[-1]
    target = rng.random() * total
    index = int(np.searchsorted(cumulative, target, side="right"))
    # u * total can round up to total; fall back to the last index with weight
    if index >= len(weights):
        index = int(np.flatnonzero(weights)[-1])
    return index


def seed_centroids(samples: SampleSet, k: int, rng: np.random.Generator) -> np.ndarray:
    """
    Choose ``k`` initial centroids from ``samples`` with k-means++.

    Args:
        samples: Non-empty sample set
        k: Number of centroids, ``1 <= k <= len(samples)``
        rng: Random source; inject a seeded generator for reproducible output

    Returns:
        ``(k, 4)`` float64 array of centroid rows, in selection order

    Raises:
        EmptySampleSetError: If ``samples`` is empty
        InvalidKError: If ``k`` is out of range
    """
    n = len(samples)
    if n == 0:
        raise EmptySampleSetError()
    if k < 1 or k > n:
        raise InvalidKError(k, n)

    data = samples.array
    rgb = samples.rgb

    chosen = [int(rng.integers(n))]
    # Distance from each sample to its nearest chosen centroid so far
    nearest = squared_rgb_distances(rgb, rgb[chosen[0]][np.newaxis, :])[:, 0]

    while len(chosen) < k:
        if nearest.sum() > 0:
            index = weighted_index(nearest, rng)
        else:
            # Every sample coincides with a centroid; pick any unchosen one
            remaining = np.setdiff1d(np.arange(n), chosen, assume_unique=True)
            index = int(remaining[rng.integers(len(remaining))])
            logger.debug(f"Zero distance mass at seed {len(chosen)}, using uniform pick")

        chosen.append(index)
        new_distances = squared_rgb_distances(rgb, rgb[index][np.newaxis, :])[:, 0]
        np.minimum(nearest, new_distances, out=nearest)

    logger.debug(f"Seeded {k} centroids from {n} samples")
    return np.array(data[chosen], dtype=np.float64)
