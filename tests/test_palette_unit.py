"""
Unit tests for palette orchestration.

Tests compute_palette validation and ordering, and the full analyze_image
pipeline on synthetic bitmaps.
"""

import tracemalloc

import numpy as np
import pytest

from plopcolor.errors import EmptySampleSetError, InvalidKError, PaletteError
from plopcolor.services.colors.dominant import estimate_dominant_color
from plopcolor.services.colors.formatting import hex_to_rgb
from plopcolor.services.colors.palette import (
    analyze_image, cluster_palette, compute_palette, luminance, make_rng
)
from plopcolor.services.colors.samples import Centroid, SampleSet
from plopcolor.utils.metrics import get_metrics


@pytest.fixture
def weighted_primaries():
    """70 red, 20 green and 10 blue samples."""
    return SampleSet(
        [(255, 0, 0, 1.0)] * 70 + [(0, 255, 0, 1.0)] * 20 + [(0, 0, 255, 1.0)] * 10
    )


class TestComputePalette:
    """Test the main palette entry point"""

    def test_returns_k_entries(self, random_samples, rng):
        entries = compute_palette(random_samples, k=5, rng=rng)
        assert len(entries) == 5
        for entry in entries:
            assert entry.hex.startswith("#") and len(entry.hex) == 7
            assert entry.rgba.startswith("rgba(")

    def test_default_k_from_config(self, random_samples, rng):
        assert len(compute_palette(random_samples, rng=rng)) == 5

    def test_k1_matches_dominant_color(self, random_samples, rng):
        entries = compute_palette(random_samples, k=1, rng=rng)
        assert entries[0].centroid == estimate_dominant_color(random_samples)
        assert entries[0].ratio == 1.0

    def test_hex_round_trips_to_centroid(self, random_samples, rng):
        for entry in compute_palette(random_samples, k=6, rng=rng):
            assert hex_to_rgb(entry.hex) == entry.centroid.rgb

    def test_ratios_sum_to_one(self, weighted_primaries, rng):
        entries = compute_palette(weighted_primaries, k=3, rng=rng)
        assert sum(e.ratio for e in entries) == pytest.approx(1.0)

    def test_population_order(self, weighted_primaries, rng):
        entries = compute_palette(weighted_primaries, k=3, rng=rng, order="population")
        assert [e.hex for e in entries] == ["#FF0000", "#00FF00", "#0000FF"]
        assert [e.ratio for e in entries] == [0.7, 0.2, 0.1]

    def test_luminance_order(self, rng):
        samples = SampleSet([(0, 0, 0, 1.0), (255, 255, 255, 1.0), (128, 128, 128, 1.0)])
        entries = compute_palette(samples, k=3, rng=rng, order="luminance")
        assert [e.hex for e in entries] == ["#FFFFFF", "#808080", "#000000"]
        assert luminance(Centroid(255, 255, 255, 1.0)) == pytest.approx(255.0)

    def test_seed_order_matches_clustering(self, random_samples):
        entries, result = cluster_palette(random_samples, k=4, rng=np.random.default_rng(3))
        assert [e.centroid for e in entries] == result.centroids

    def test_empty_samples_rejected(self, rng):
        with pytest.raises(EmptySampleSetError):
            compute_palette(SampleSet(), k=3, rng=rng)

    def test_invalid_k_rejected(self, random_samples, rng):
        with pytest.raises(InvalidKError):
            compute_palette(random_samples, k=0, rng=rng)
        with pytest.raises(InvalidKError) as exc_info:
            compute_palette(random_samples, k=len(random_samples) + 1, rng=rng)
        assert isinstance(exc_info.value, PaletteError)
        assert isinstance(exc_info.value, ValueError)

    def test_unknown_order_rejected(self, random_samples, rng):
        with pytest.raises(ValueError):
            compute_palette(random_samples, k=2, rng=rng, order="alphabetical")

    def test_records_metrics(self, random_samples, rng):
        compute_palette(random_samples, k=3, rng=rng)
        counters = get_metrics().get_counters()
        assert counters["kmeans_runs_total"] == 1
        assert get_metrics().get_iteration_stats()["count"] == 1

    def test_iteration_cap_hit_counted(self, rng):
        """Any two k-means++ seeds from these samples need a second pass"""
        samples = SampleSet([
            (0, 0, 0, 1.0), (10, 10, 10, 1.0),
            (200, 200, 200, 1.0), (210, 210, 210, 1.0),
        ])
        entries, result = cluster_palette(samples, k=2, rng=rng, iteration_cap=1)

        assert result.converged is False
        assert len(entries) == 2
        counters = get_metrics().get_counters()
        assert counters["kmeans_runs_total"] == 1
        assert counters["kmeans_iteration_cap_hits_total"] == 1

    def test_converged_run_not_counted_as_cap_hit(self, weighted_primaries, rng):
        compute_palette(weighted_primaries, k=3, rng=rng)
        assert get_metrics().get_counters().get("kmeans_iteration_cap_hits_total", 0) == 0

    def test_make_rng_is_seedable(self, random_samples):
        first = compute_palette(random_samples, k=4, rng=make_rng(11))
        second = compute_palette(random_samples, k=4, rng=make_rng(11))
        assert first == second


class TestAnalyzeImage:
    """Test the full image pipeline"""

    def test_two_halves(self, two_halves_rgb):
        analysis = analyze_image(two_halves_rgb, k=2, rng=make_rng(1))

        assert analysis.background == Centroid(128, 0, 128, 1.0)
        assert analysis.background_entry.hex == "#800080"
        assert {e.hex for e in analysis.palette} == {"#FF0000", "#0000FF"}
        assert (analysis.width, analysis.height) == (400, 200)
        assert (analysis.sampled_width, analysis.sampled_height) == (300, 150)
        assert analysis.converged

    def test_small_image_not_resized(self):
        img = np.full((10, 20, 3), 200, dtype=np.uint8)
        analysis = analyze_image(img, k=1, max_dimension=300, rng=make_rng(0))
        assert (analysis.sampled_width, analysis.sampled_height) == (20, 10)
        assert analysis.palette[0].hex == "#C8C8C8"

    def test_empty_image(self):
        analysis = analyze_image(np.zeros((0, 0, 3), dtype=np.uint8))
        assert analysis.palette == []
        assert analysis.background == Centroid(255, 255, 255, 1.0)
        assert analysis.k == 0

    def test_k_reduced_to_pixel_count(self):
        img = np.array([[[255, 0, 0], [0, 0, 255]]], dtype=np.uint8)
        analysis = analyze_image(img, k=5, rng=make_rng(0))
        assert analysis.k == 2
        assert len(analysis.palette) == 2

    def test_transparent_pixels_carry_alpha(self):
        img = np.zeros((4, 4, 4), dtype=np.uint8)
        img[..., 0] = 255
        img[..., 3] = 51
        analysis = analyze_image(img, k=1, rng=make_rng(0))
        assert analysis.palette[0].rgba == "rgba(255, 0, 0, 0.20)"
        assert analysis.background.alpha == pytest.approx(0.2)

    def test_large_image_memory_stays_bounded(self):
        """Full-resolution work stays on uint8 data, no per-pixel float copies"""
        img = np.zeros((1500, 2000, 3), dtype=np.uint8)
        tracemalloc.start()
        try:
            analysis = analyze_image(img, k=3, rng=make_rng(0))
            _, peak = tracemalloc.get_traced_memory()
        finally:
            tracemalloc.stop()

        assert analysis.background == Centroid(0, 0, 0, 1.0)
        # One uint8 RGBA copy is 12 MB; a float64 copy would be 96 MB
        assert peak < 40 * 1024 * 1024

    def test_invalid_k(self, two_halves_rgb):
        with pytest.raises(InvalidKError):
            analyze_image(two_halves_rgb, k=0)
