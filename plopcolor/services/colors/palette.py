"""
Palette orchestration.

Ties sample extraction, dominant color estimation, k-means++ clustering and
formatting together. ``compute_palette`` is the main entry point for callers
that already hold a SampleSet; ``analyze_image`` runs the whole drop-an-image
pipeline on a decoded bitmap.
"""

import time
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from loguru import logger

from plopcolor.config import config
from plopcolor.errors import EmptySampleSetError, InvalidKError
from plopcolor.utils.metrics import get_metrics
from .dominant import estimate_bitmap_color
from .formatting import PaletteEntry, format_entry, format_palette
from .kmeans import KMeansResult, cluster_samples
from .samples import Bitmap, Centroid, SampleSet, downsample, extract_samples, to_rgba_array


@dataclass(frozen=True)
class ImageAnalysis:
    """Background color and palette for one image."""
    background: Centroid
    palette: List[PaletteEntry]
    width: int
    height: int
    sampled_width: int
    sampled_height: int
    k: int
    iterations: int
    converged: bool

    @property
    def background_entry(self) -> PaletteEntry:
        return format_entry(self.background)


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Random source for seeding; ``None`` falls back to the configured seed."""
    if seed is None:
        seed = config.RANDOM_SEED
    return np.random.default_rng(seed)


def luminance(centroid: Centroid) -> float:
    """Rec. 601 luma of a centroid."""
    return 0.299 * centroid.red + 0.587 * centroid.green + 0.114 * centroid.blue


def order_palette(entries: List[PaletteEntry], order: str) -> List[PaletteEntry]:
    """
    Reorder palette entries.

    ``seed`` keeps k-means++ selection order, ``population`` sorts by cluster
    share and ``luminance`` by brightness, both descending and stable.
    """
    if order == "seed":
        return list(entries)
    if order == "population":
        return sorted(entries, key=lambda e: -(e.ratio or 0.0))
    if order == "luminance":
        return sorted(entries, key=lambda e: -luminance(e.centroid))
    raise ValueError(f"Unknown palette order {order!r}; expected one of {config.PALETTE_ORDERS}")


def cluster_palette(samples: SampleSet, k: Optional[int] = None,
                    rng: Optional[np.random.Generator] = None,
                    iteration_cap: Optional[int] = None,
                    order: str = "seed") -> Tuple[List[PaletteEntry], KMeansResult]:
    """
    Cluster ``samples`` into ``k`` colors and format them.

    Args:
        samples: Non-empty sample set
        k: Palette size (default from config), ``1 <= k <= len(samples)``
        rng: Random source (default: ``make_rng()``)
        iteration_cap: k-means safety cap (default from config)
        order: ``seed``, ``population`` or ``luminance``

    Returns:
        Tuple of (ordered palette entries, raw clustering result)

    Raises:
        EmptySampleSetError: If ``samples`` is empty
        InvalidKError: If ``k`` is out of range
        ValueError: If ``order`` is unknown
    """
    if k is None:
        k = config.PALETTE_SIZE
    if not config.validate_order(order):
        raise ValueError(f"Unknown palette order {order!r}; expected one of {config.PALETTE_ORDERS}")

    n = len(samples)
    if n == 0:
        raise EmptySampleSetError()
    if k < 1 or k > n:
        raise InvalidKError(k, n)

    if rng is None:
        rng = make_rng()

    start_time = time.time()
    result = cluster_samples(samples, k, rng, iteration_cap=iteration_cap)
    duration_ms = (time.time() - start_time) * 1000

    metrics = get_metrics()
    metrics.record_timing("kmeans", duration_ms)
    metrics.record_kmeans_run(result.iterations, result.converged)

    entries = order_palette(format_palette(result.centroids, result.ratios), order)
    logger.info(f"Palette ready: {[e.hex for e in entries]} ({duration_ms:.1f} ms)")
    return entries, result


def compute_palette(samples: SampleSet, k: Optional[int] = None,
                    rng: Optional[np.random.Generator] = None,
                    iteration_cap: Optional[int] = None,
                    order: str = "seed") -> List[PaletteEntry]:
    """Seed, cluster and format a palette of ``k`` colors."""
    entries, _ = cluster_palette(samples, k=k, rng=rng, iteration_cap=iteration_cap, order=order)
    return entries


def analyze_image(bitmap: Bitmap, k: Optional[int] = None,
                  max_dimension: Optional[int] = None,
                  iteration_cap: Optional[int] = None,
                  order: str = "seed",
                  rng: Optional[np.random.Generator] = None) -> ImageAnalysis:
    """
    Background color and palette for a decoded image.

    The background is averaged over every pixel of the full-resolution image;
    the palette is clustered on a copy downsampled to ``max_dimension``.
    An image with no pixels gets the neutral background and an empty palette.
    If the downsampled image has fewer pixels than ``k``, ``k`` is reduced to
    the pixel count.
    """
    if k is None:
        k = config.PALETTE_SIZE
    if max_dimension is None:
        max_dimension = config.MAX_DIMENSION
    if k < 1:
        raise InvalidKError(k, 0)

    rgba = to_rgba_array(bitmap)
    height, width = rgba.shape[:2]
    metrics = get_metrics()

    start_time = time.time()
    background = estimate_bitmap_color(rgba)
    metrics.record_timing("dominant", (time.time() - start_time) * 1000)

    small = downsample(rgba, max_dimension)
    sampled_height, sampled_width = small.shape[:2]
    samples = extract_samples(small)

    if samples.is_empty():
        logger.info("Image has no pixels, palette unavailable")
        return ImageAnalysis(
            background=background, palette=[],
            width=width, height=height,
            sampled_width=sampled_width, sampled_height=sampled_height,
            k=0, iterations=0, converged=True,
        )

    if k > len(samples):
        logger.warning(f"Reducing palette size from {k} to {len(samples)} to match pixel count")
        k = len(samples)

    palette, result = cluster_palette(samples, k=k, rng=rng, iteration_cap=iteration_cap, order=order)

    return ImageAnalysis(
        background=background,
        palette=palette,
        width=width,
        height=height,
        sampled_width=sampled_width,
        sampled_height=sampled_height,
        k=k,
        iterations=result.iterations,
        converged=result.converged,
    )
