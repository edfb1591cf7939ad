"""
Pixel sample extraction.

Turns a decoded bitmap into a flat SampleSet of (R, G, B, A) samples, with an
optional proportional downsample that bounds the clustering cost.
"""

from typing import Iterable, Iterator, NamedTuple, Tuple, Union

import cv2
import numpy as np
from PIL import Image
from loguru import logger

Bitmap = Union[np.ndarray, Image.Image]


class PixelSample(NamedTuple):
    """One pixel: integer RGB in 0-255, alpha as normalized opacity 0.0-1.0."""
    red: int
    green: int
    blue: int
    alpha: float


class Centroid(NamedTuple):
    """Mean color of a cluster (RGB rounded, alpha kept as a real mean)."""
    red: int
    green: int
    blue: int
    alpha: float

    @classmethod
    def from_row(cls, row: np.ndarray) -> "Centroid":
        return cls(int(row[0]), int(row[1]), int(row[2]), float(row[3]))

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)


def round_centroids(rows: np.ndarray) -> np.ndarray:
    """
    Quantize raw channel means into centroid values.

    RGB columns are rounded half-up to the nearest integer and clipped to
    0-255; the alpha column is left as the exact mean.
    """
    rounded = np.array(rows, dtype=np.float64, copy=True)
    rounded[..., :3] = np.clip(np.floor(rounded[..., :3] + 0.5), 0, 255)
    return rounded


class SampleSet:
    """
    Ordered, immutable collection of PixelSample values.

    Backed by a read-only ``(n, 4)`` float64 array (columns R, G, B, A) so the
    clustering engine can work on it without per-sample Python objects.
    """

    __slots__ = ("_data",)

    def __init__(self, data: Union[np.ndarray, Iterable[Tuple[float, float, float, float]], None] = None):
        if data is None:
            arr = np.empty((0, 4), dtype=np.float64)
        else:
            arr = np.array(data, dtype=np.float64, copy=True)
        if arr.size == 0:
            arr = arr.reshape(0, 4)
        if arr.ndim != 2 or arr.shape[1] != 4:
            raise ValueError(f"Samples must have shape (n, 4), got {arr.shape}")
        if arr.size and (arr[:, :3].min() < 0 or arr[:, :3].max() > 255):
            raise ValueError("RGB channels must be within 0-255")
        if arr.size and np.any(arr[:, :3] != np.floor(arr[:, :3])):
            raise ValueError("RGB channels must be whole numbers")
        if arr.size and (arr[:, 3].min() < 0.0 or arr[:, 3].max() > 1.0):
            raise ValueError("Alpha channel must be within 0.0-1.0")
        arr.setflags(write=False)
        self._data = arr

    @classmethod
    def _wrap(cls, arr: np.ndarray) -> "SampleSet":
        """Adopt an already-valid ``(n, 4)`` float64 array without copying."""
        arr.setflags(write=False)
        samples = cls.__new__(cls)
        samples._data = arr
        return samples

    @property
    def array(self) -> np.ndarray:
        """Read-only ``(n, 4)`` view of the samples."""
        return self._data

    @property
    def rgb(self) -> np.ndarray:
        return self._data[:, :3]

    def is_empty(self) -> bool:
        return self._data.shape[0] == 0

    def __len__(self) -> int:
        return self._data.shape[0]

    def __getitem__(self, index: Union[int, slice]) -> Union[PixelSample, "SampleSet"]:
        if isinstance(index, slice):
            return SampleSet._wrap(self._data[index])
        return _row_to_sample(self._data[index])

    def __iter__(self) -> Iterator[PixelSample]:
        for row in self._data:
            yield _row_to_sample(row)

    def __repr__(self) -> str:
        return f"SampleSet(n={len(self)})"


def _row_to_sample(row: np.ndarray) -> PixelSample:
    return PixelSample(int(row[0]), int(row[1]), int(row[2]), float(row[3]))


def to_rgba_array(bitmap: Bitmap) -> np.ndarray:
    """
    Normalize a decoded bitmap to an ``(h, w, 4)`` uint8 RGBA array.

    Accepts Pillow images in any mode, or numpy arrays shaped ``(h, w)``
    (grayscale), ``(h, w, 3)`` (RGB) or ``(h, w, 4)`` (RGBA). Integer arrays
    must hold 0-255 values; float arrays are rejected rather than guessed at
    (a 0.0-1.0 float image would otherwise collapse to black).

    Raises:
        ValueError: For float dtypes, out-of-range integers or unknown shapes
    """
    if isinstance(bitmap, Image.Image):
        return np.asarray(bitmap.convert("RGBA"), dtype=np.uint8)

    arr = np.asarray(bitmap)
    if arr.dtype != np.uint8:
        if not np.issubdtype(arr.dtype, np.integer):
            raise ValueError(f"Bitmap must have integer channels, got dtype {arr.dtype}")
        if arr.size and (arr.min() < 0 or arr.max() > 255):
            raise ValueError("Bitmap channels must be within 0-255")
        arr = arr.astype(np.uint8)

    if arr.ndim == 2:
        opaque = np.full(arr.shape, 255, dtype=np.uint8)
        return np.stack([arr, arr, arr, opaque], axis=-1)

    if arr.ndim == 3 and arr.shape[2] == 3:
        opaque = np.full(arr.shape[:2] + (1,), 255, dtype=np.uint8)
        return np.concatenate([arr, opaque], axis=-1)

    if arr.ndim == 3 and arr.shape[2] == 4:
        return arr

    raise ValueError(f"Unsupported bitmap shape {arr.shape}; expected (h, w), (h, w, 3) or (h, w, 4)")


def downsample(bitmap: Bitmap, max_dimension: int) -> np.ndarray:
    """
    Shrink a bitmap so its longest edge is at most ``max_dimension``.

    The long edge lands exactly on ``max_dimension``; the short edge is scaled
    by the same factor and rounded (never below one pixel). Bitmaps that
    already fit are returned unchanged as RGBA arrays.
    """
    if max_dimension < 1:
        raise ValueError(f"max_dimension must be positive, got {max_dimension}")

    rgba = to_rgba_array(bitmap)
    height, width = rgba.shape[:2]
    longest = max(height, width)

    if longest <= max_dimension:
        return rgba

    scale = max_dimension / longest
    if width >= height:
        new_width = max_dimension
        new_height = max(1, int(height * scale + 0.5))
    else:
        new_height = max_dimension
        new_width = max(1, int(width * scale + 0.5))

    # INTER_AREA averages source pixels, which is what a downscale wants
    resized = cv2.resize(rgba, (new_width, new_height), interpolation=cv2.INTER_AREA)
    logger.debug(f"Downsampled {width}x{height} to {new_width}x{new_height}")
    return resized


def extract_samples(bitmap: Bitmap) -> SampleSet:
    """
    Flatten a decoded bitmap into a SampleSet, one sample per pixel.

    Samples are emitted in row-major order. Alpha is normalized to 0.0-1.0;
    bitmaps without an alpha channel are treated as fully opaque. A bitmap
    with no pixels yields an empty SampleSet.
    """
    rgba = to_rgba_array(bitmap)
    data = rgba.reshape(-1, 4).astype(np.float64)
    data[:, 3] /= 255.0
    # Built from uint8 channels, so already whole and in range
    return SampleSet._wrap(data)
