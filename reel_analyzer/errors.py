"""
Error taxonomy for the reel analyzer.

Only DownloadError and ExtractionError are fatal to an analysis; every
classification and gating stage converts its failures into a default
value through run_fail_open.
"""

import logging
from typing import Awaitable, Dict, Optional, TypeVar

logger = logging.getLogger("reel_analyzer")

T = TypeVar("T")


class AnalyzerError(Exception):
    """Base exception for the reel analyzer."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message)
        self.details = details or {}


class DownloadError(AnalyzerError):
    """Raised when no provider yields downloadable video content."""
    pass


class ExtractionError(AnalyzerError):
    """Raised when the video cannot be decoded into frames."""
    pass


class ClassificationError(AnalyzerError):
    """Raised when a single classification call fails or cannot be parsed."""
    pass


class VisionError(ClassificationError):
    """Raised when every frame classification attempt failed."""
    pass


class GateError(AnalyzerError):
    """Raised when an admission gate cannot reach a verdict."""
    pass


class PipelineTimeout(AnalyzerError):
    """Raised when the analysis exceeds its wall-clock budget."""
    pass


class ConfigurationError(AnalyzerError):
    """Raised when configuration is invalid."""
    pass


async def run_fail_open(stage: str, awaitable: Awaitable[T], default: T) -> T:
    """
    Await a non-fatal stage and substitute its default on any error.

    Args:
        stage: Stage name used in the log line
        awaitable: The stage call
        default: Value returned when the stage raises

    Returns:
        The stage result, or default if it failed
    """
    try:
        return await awaitable
    except Exception as e:
        logger.warning(f"{stage} failed, using default {default!r}: {e}")
        return default
