"""
PlopColor Configuration
Manages environment variables and defaults for the palette engine and API.
"""
import os
from typing import Optional


def _optional_int(name: str) -> Optional[int]:
    value = os.environ.get(name, "").strip()
    return int(value) if value else None


class Config:
    """Configuration class for PlopColor services."""

    # Palette engine thresholds
    MAX_DIMENSION: int = int(os.environ.get("PLOPCOLOR_MAX_DIMENSION", "300"))
    PALETTE_SIZE: int = int(os.environ.get("PLOPCOLOR_PALETTE_SIZE", "5"))
    ITERATION_CAP: int = int(os.environ.get("PLOPCOLOR_ITERATION_CAP", "100"))

    # Unset means fresh entropy on every run
    RANDOM_SEED: Optional[int] = _optional_int("PLOPCOLOR_RANDOM_SEED")

    # Upload limits
    MAX_FILE_MB: int = int(os.environ.get("PLOPCOLOR_MAX_FILE_MB", "10"))

    # Logging
    LOG_LEVEL: str = os.environ.get("PLOPCOLOR_LOG_LEVEL", "INFO")

    # CORS settings
    ALLOWED_ORIGINS: str = os.environ.get("PLOPCOLOR_ALLOWED_ORIGINS", "")

    # Neutral fallback used when there is nothing to average
    NEUTRAL_COLOR = (255, 255, 255, 1.0)

    # Supported image formats
    SUPPORTED_MIME_TYPES = [
        "image/jpeg", "image/png", "image/gif",
        "image/bmp", "image/tiff", "image/webp",
    ]

    PALETTE_ORDERS = ("seed", "population", "luminance")

    # Request parameter bounds
    K_MIN = 1
    K_MAX = 16
    MAX_DIMENSION_MIN = 16
    MAX_DIMENSION_MAX = 2048

    @classmethod
    def validate_iteration_cap(cls, cap: int) -> bool:
        """Validate k-means safety cap."""
        return cap >= 1

    @classmethod
    def validate_order(cls, order: str) -> bool:
        """Validate palette ordering mode."""
        return order in cls.PALETTE_ORDERS

    @classmethod
    def allowed_origins(cls) -> list:
        """Parse comma-separated CORS origins."""
        return [o.strip() for o in cls.ALLOWED_ORIGINS.split(",") if o.strip()]


# Global config instance
config = Config()
