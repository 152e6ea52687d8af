"""Errors raised by the similarity and ranking core."""

from typing import List, Optional


class CineMatchError(Exception):
    """Base class for all recommendation errors."""

    error_code = "PROCESSING_ERROR"


class DimensionMismatch(CineMatchError):
    """Two vectors of unequal length were compared."""

    def __init__(self, left: int, right: int):
        super().__init__(f"Vector dimensions mismatch: {left} vs {right}")
        self.left = left
        self.right = right


class UnsupportedMetric(CineMatchError):
    error_code = "UNSUPPORTED_METRIC"

    def __init__(self, metric):
        super().__init__(f"Unknown similarity metric: {metric}")
        self.metric = metric


class NotFound(CineMatchError):
    """A referenced title is absent from the catalog."""

    error_code = "MOVIE_NOT_FOUND"

    def __init__(self, message: str, suggestions: Optional[List[str]] = None):
        super().__init__(message)
        self.suggestions = suggestions or []


class EmptySelection(CineMatchError):
    """A taste profile request resolved to no catalog entries."""

    error_code = "INVALID_INPUT"


class InvalidInput(CineMatchError):
    error_code = "INVALID_INPUT"
