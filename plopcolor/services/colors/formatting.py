"""
Palette text formatting.

Produces the clipboard-ready strings shown next to each swatch.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .samples import Centroid


@dataclass(frozen=True)
class PaletteEntry:
    """A final centroid with its hex and RGBA text."""
    centroid: Centroid
    hex: str
    rgba: str
    ratio: Optional[float] = None


def format_hex(centroid: Centroid) -> str:
    """Format as ``#RRGGBB`` (uppercase, alpha omitted)."""
    r, g, b = centroid.rgb
    return f"#{r:02X}{g:02X}{b:02X}"


def format_rgba(centroid: Centroid) -> str:
    """Format as ``rgba(R, G, B, A)`` with alpha to two decimals."""
    r, g, b = centroid.rgb
    return f"rgba({r}, {g}, {b}, {centroid.alpha:.2f})"


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """Convert hex color string to RGB tuple."""
    digits = hex_color.lstrip('#')
    if len(digits) != 6:
        raise ValueError(f"Expected 6 hex digits, got {hex_color!r}")
    try:
        return tuple(int(digits[i:i+2], 16) for i in (0, 2, 4))
    except ValueError:
        raise ValueError(f"Invalid hex color {hex_color!r}") from None


def format_entry(centroid: Centroid, ratio: Optional[float] = None) -> PaletteEntry:
    return PaletteEntry(
        centroid=centroid,
        hex=format_hex(centroid),
        rgba=format_rgba(centroid),
        ratio=ratio,
    )


def format_palette(centroids: Iterable[Centroid],
                   ratios: Optional[Sequence[float]] = None) -> List[PaletteEntry]:
    """
    One PaletteEntry per centroid, in input order.

    ``ratios``, when given, must line up with ``centroids`` and records each
    cluster's share of the samples.
    """
    centroids = list(centroids)
    if ratios is not None and len(ratios) != len(centroids):
        raise ValueError(f"Got {len(ratios)} ratios for {len(centroids)} centroids")

    return [
        format_entry(centroid, None if ratios is None else float(ratios[i]))
        for i, centroid in enumerate(centroids)
    ]
