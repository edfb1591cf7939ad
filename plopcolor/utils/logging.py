"""
PlopColor Structured Logging
Centralized loguru configuration shared by the engine and the API.
"""
import sys
from contextlib import contextmanager
from typing import Dict, Any, Iterator, Optional

from loguru import logger

from plopcolor.config import config

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level} | {message} | {extra}"


class StructuredLogger:
    """Structured logger with a single stdout sink."""

    def __init__(self, level: Optional[str] = None, serialize: bool = False):
        self.level = (level or config.LOG_LEVEL).upper()
        self.serialize = serialize
        self._configure_logger()

    def _configure_logger(self):
        """Replace loguru's default handler with the structured sink."""
        logger.remove()
        logger.add(
            sys.stdout,
            format=LOG_FORMAT,
            level=self.level,
            serialize=self.serialize,
        )

    def _emit(self, level: str, message: str, extra: Optional[Dict[str, Any]]):
        bound = logger.bind(**extra) if extra else logger
        bound.opt(depth=2).log(level, message)

    def info(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log info message with optional extra data."""
        self._emit("INFO", message, extra)

    def warning(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log warning message with optional extra data."""
        self._emit("WARNING", message, extra)

    def error(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log error message with optional extra data."""
        self._emit("ERROR", message, extra)

    def debug(self, message: str, extra: Optional[Dict[str, Any]] = None):
        """Log debug message with optional extra data."""
        self._emit("DEBUG", message, extra)

    @contextmanager
    def request_context(self, request_id: str) -> Iterator[None]:
        """Attach ``request_id`` to every record emitted inside the block,
        including records from engine modules that log through loguru directly."""
        with logger.contextualize(request_id=request_id):
            yield


# Global logger instance
_logger: Optional[StructuredLogger] = None


def get_logger() -> StructuredLogger:
    """Get or create global logger instance."""
    global _logger
    if _logger is None:
        _logger = StructuredLogger()
    return _logger
