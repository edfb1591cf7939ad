"""
PlopColor API Schemas
Pydantic models for palette responses.
"""
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, Field

from plopcolor.services.colors.formatting import PaletteEntry


class ColorValue(BaseModel):
    """One color with its clipboard text."""
    hex: str = Field(..., pattern="^#[0-9A-F]{6}$", description="Uppercase #RRGGBB")
    rgba: str = Field(..., description="rgba(R, G, B, A) with alpha to two decimals")
    r: int = Field(..., ge=0, le=255)
    g: int = Field(..., ge=0, le=255)
    b: int = Field(..., ge=0, le=255)
    a: float = Field(..., ge=0.0, le=1.0)
    ratio: Optional[float] = Field(
        None, ge=0.0, le=1.0,
        description="Share of sampled pixels assigned to this color (palette only)"
    )

    @classmethod
    def from_entry(cls, entry: PaletteEntry) -> "ColorValue":
        centroid = entry.centroid
        return cls(
            hex=entry.hex,
            rgba=entry.rgba,
            r=centroid.red,
            g=centroid.green,
            b=centroid.blue,
            a=centroid.alpha,
            ratio=entry.ratio,
        )


class PaletteResponse(BaseModel):
    """Background and palette for an uploaded image."""
    request_id: str = Field(..., description="Request correlation ID")
    width: int = Field(..., description="Decoded image width in pixels")
    height: int = Field(..., description="Decoded image height in pixels")
    sampled_width: int = Field(..., description="Width after downsampling")
    sampled_height: int = Field(..., description="Height after downsampling")
    k: int = Field(..., description="Palette size actually used")
    background: ColorValue = Field(..., description="Area-average color of the full image")
    palette: List[ColorValue] = Field(..., description="Palette colors in the requested order")
    iterations: int = Field(..., description="k-means iterations performed")
    converged: bool = Field(..., description="False if the iteration cap stopped clustering")
    duration_ms: float = Field(..., description="Server-side analysis time")


class HealthResponse(BaseModel):
    """Health check response."""
    ok: bool = Field(True, description="Service health status")
    version: str = Field(..., description="Service version")
    service: str = Field("plopcolor", description="Service name")


class MetricsResponse(BaseModel):
    """In-process metrics summary."""
    uptime_seconds: float
    counters: Dict[str, int]
    timing_stats: Dict[str, Dict[str, float]]
    kmeans_iteration_stats: Dict[str, Any]


class ErrorResponse(BaseModel):
    """Error response."""
    detail: str = Field(..., description="Error message")
