"""
PlopColor Colors Module

Pixel sample extraction, area-average dominant color, k-means++ seeding,
k-means clustering and palette formatting.
"""

from .dominant import estimate_bitmap_color, estimate_dominant_color
from .formatting import PaletteEntry, format_hex, format_palette, format_rgba, hex_to_rgb
from .kmeans import KMeansResult, cluster_samples, run_kmeans
from .palette import ImageAnalysis, analyze_image, cluster_palette, compute_palette, make_rng
from .samples import Centroid, PixelSample, SampleSet, downsample, extract_samples
from .seeding import seed_centroids

__all__ = [
    "Centroid", "ImageAnalysis", "KMeansResult", "PaletteEntry", "PixelSample", "SampleSet",
    "analyze_image", "cluster_palette", "cluster_samples", "compute_palette", "downsample",
    "estimate_bitmap_color", "estimate_dominant_color", "extract_samples", "format_hex", "format_palette",
    "format_rgba", "hex_to_rgb", "make_rng", "run_kmeans", "seed_centroids",
]
