"""
Iterative k-means clustering engine.

Each iteration assigns every sample to its nearest centroid (RGB distance,
first centroid wins ties), then replaces every centroid by the rounded mean
of its members. Because RGB means are quantized to integers the state space
is finite and equality-based convergence terminates; the iteration cap only
bounds pathological runs.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np
from loguru import logger

from plopcolor.config import config
from plopcolor.errors import EmptySampleSetError, InvalidKError
from .samples import Centroid, SampleSet, round_centroids
from .seeding import seed_centroids, squared_rgb_distances


class KMeansState(str, Enum):
    ASSIGNING = "assigning"
    UPDATING = "updating"
    CONVERGED = "converged"


@dataclass(frozen=True)
class KMeansResult:
    """Outcome of one clustering run."""
    centroids: List[Centroid]
    labels: np.ndarray = field(repr=False)
    populations: List[int]
    iterations: int
    converged: bool
    reseeded_clusters: int = 0

    @property
    def ratios(self) -> List[float]:
        total = sum(self.populations)
        return [count / total for count in self.populations] if total else []


def assign_clusters(samples: SampleSet, centroids: np.ndarray) -> np.ndarray:
    """
    Label every sample with the index of its nearest centroid.

    ``argmin`` returns the first minimum, so a sample equidistant from two
    centroids always goes to the lower index.
    """
    distances = squared_rgb_distances(samples.rgb, centroids[:, :3])
    return np.argmin(distances, axis=1)


def update_centroids(samples: SampleSet, labels: np.ndarray, k: int,
                     rng: np.random.Generator) -> Tuple[np.ndarray, int]:
    """
    Recompute centroids from the current assignment.

    Empty clusters are reseeded with a uniformly random sample from the full
    sample set so k never shrinks.

    Returns:
        Tuple of (new ``(k, 4)`` centroid array, number of clusters reseeded)
    """
    data = samples.array
    updated = np.empty((k, 4), dtype=np.float64)
    reseeded = 0

    for cluster in range(k):
        members = data[labels == cluster]
        if len(members):
            updated[cluster] = round_centroids(members.mean(axis=0))
        else:
            updated[cluster] = data[rng.integers(len(data))]
            reseeded += 1

    return updated, reseeded


def run_kmeans(samples: SampleSet, initial_centroids: np.ndarray,
               rng: np.random.Generator,
               iteration_cap: Optional[int] = None) -> KMeansResult:
    """
    Run k-means from the given seeds until the centroids stop changing.

    Args:
        samples: Non-empty sample set
        initial_centroids: ``(k, 4)`` seed rows, ``k <= len(samples)``
        rng: Random source used for empty-cluster reseeding
        iteration_cap: Maximum assign/update passes (default from config)

    Returns:
        KMeansResult with centroids in seed order

    Raises:
        EmptySampleSetError: If ``samples`` is empty
        InvalidKError: If the seed count is out of range
    """
    if iteration_cap is None:
        iteration_cap = config.ITERATION_CAP
    if not config.validate_iteration_cap(iteration_cap):
        raise ValueError(f"iteration_cap must be at least 1, got {iteration_cap}")

    n = len(samples)
    centroids = np.array(initial_centroids, dtype=np.float64)
    k = centroids.shape[0]
    if n == 0:
        raise EmptySampleSetError()
    if k < 1 or k > n:
        raise InvalidKError(k, n)

    state = KMeansState.ASSIGNING
    iterations = 0
    reseeded_total = 0
    labels = np.zeros(n, dtype=np.intp)

    while state is not KMeansState.CONVERGED and iterations < iteration_cap:
        labels = assign_clusters(samples, centroids)
        state = KMeansState.UPDATING

        updated, reseeded = update_centroids(samples, labels, k, rng)
        reseeded_total += reseeded
        iterations += 1

        if np.array_equal(updated, centroids):
            state = KMeansState.CONVERGED
        else:
            centroids = updated
            state = KMeansState.ASSIGNING
        logger.debug(f"k-means iteration {iterations}: state={state.value}, reseeded={reseeded}")

    converged = state is KMeansState.CONVERGED
    if not converged:
        logger.warning(f"k-means stopped at iteration cap {iteration_cap} without converging")
        # Final labels must describe the centroids being returned
        labels = assign_clusters(samples, centroids)

    populations = np.bincount(labels, minlength=k).tolist()
    logger.info(f"k-means finished: k={k}, n={n}, iterations={iterations}, converged={converged}")

    return KMeansResult(
        centroids=[Centroid.from_row(row) for row in centroids],
        labels=labels,
        populations=populations,
        iterations=iterations,
        converged=converged,
        reseeded_clusters=reseeded_total,
    )


def cluster_samples(samples: SampleSet, k: int, rng: np.random.Generator,
                    iteration_cap: Optional[int] = None) -> KMeansResult:
    """Seed with k-means++ and cluster in one call."""
    seeds = seed_centroids(samples, k, rng)
    return run_kmeans(samples, seeds, rng, iteration_cap=iteration_cap)
