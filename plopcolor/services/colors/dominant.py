"""
Dominant (area-average) color estimation.
"""

import numpy as np
from loguru import logger

from plopcolor.config import config
from .samples import Bitmap, Centroid, SampleSet, round_centroids, to_rgba_array


def estimate_dominant_color(samples: SampleSet) -> Centroid:
    """
    Per-channel arithmetic mean of every sample.

    This is k-means with a single cluster, computed directly. RGB is rounded
    to the nearest integer, alpha stays the exact mean. An empty sample set
    yields the neutral fallback color instead of raising, since this backs the
    background color of the canvas.
    """
    if samples.is_empty():
        logger.debug("No samples to average, using neutral background")
        return Centroid(*config.NEUTRAL_COLOR)

    mean = samples.array.mean(axis=0)
    return Centroid.from_row(round_centroids(mean))


def estimate_bitmap_color(bitmap: Bitmap) -> Centroid:
    """
    Area-average color of a whole bitmap without building a SampleSet.

    Averages the uint8 channels directly (accumulating in float64) and scales
    alpha afterwards, so a full-resolution image costs no per-pixel float copy.
    """
    rgba = to_rgba_array(bitmap)
    pixels = rgba.reshape(-1, 4)
    if pixels.shape[0] == 0:
        logger.debug("No pixels to average, using neutral background")
        return Centroid(*config.NEUTRAL_COLOR)

    mean = pixels.mean(axis=0, dtype=np.float64)
    mean[3] /= 255.0
    return Centroid.from_row(round_centroids(mean))
