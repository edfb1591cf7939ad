"""
PlopColor error taxonomy.

Both errors are precondition violations reported synchronously to the caller;
they subclass ValueError so callers that only catch ValueError keep working.
"""


class PaletteError(ValueError):
    """Base class for palette engine input errors."""


class EmptySampleSetError(PaletteError):
    """Clustering was requested on a sample set with no pixels."""

    def __init__(self, message: str = "Cannot cluster an empty sample set"):
        super().__init__(message)


class InvalidKError(PaletteError):
    """Palette size is not in ``1..sample_count``."""

    def __init__(self, k: int, sample_count: int):
        self.k = k
        self.sample_count = sample_count
        super().__init__(f"Invalid palette size k={k} for {sample_count} samples")
