"""
Test configuration and fixtures for PlopColor tests.
"""
import io

import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from plopcolor.main import app
from plopcolor.services.colors.samples import SampleSet


@pytest.fixture
def test_client():
    """Create test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def reset_metrics():
    """Reset metrics before each test."""
    from plopcolor.utils.metrics import reset_metrics
    reset_metrics()


@pytest.fixture
def rng():
    """Deterministic random source."""
    return np.random.default_rng(1234)


@pytest.fixture
def random_samples():
    """200 random opaque-ish samples."""
    gen = np.random.default_rng(7)
    rgb = gen.integers(0, 256, size=(200, 3)).astype(np.float64)
    alpha = gen.integers(0, 256, size=(200, 1)) / 255.0
    return SampleSet(np.hstack([rgb, alpha]))


@pytest.fixture
def two_halves_rgb():
    """400x200 RGB image: left half red, right half blue."""
    img = np.zeros((200, 400, 3), dtype=np.uint8)
    img[:, :200] = (255, 0, 0)
    img[:, 200:] = (0, 0, 255)
    return img


def encode_png(array: np.ndarray) -> bytes:
    """Encode an RGB/RGBA array as PNG bytes."""
    buffer = io.BytesIO()
    Image.fromarray(array).save(buffer, format="PNG")
    return buffer.getvalue()
