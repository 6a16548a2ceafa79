"""Exceptions raised by the geo-near query layer.

Every error carries a human-readable ``message`` attribute so callers
observing the callback channel and the awaited future see the same text.
"""

from __future__ import annotations

from typing import Any

GENERIC_POINT_MESSAGE = (
    "Must pass either a legacy coordinate array or GeoJSON Point to geoNear"
)
LEGACY_SIZE_MESSAGE = (
    "If using legacy coordinates, must be an array of size 2 for geoNear"
)


class GeoNearError(Exception):
    """Root exception for the geo-near query layer."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class InvalidPointError(GeoNearError):
    """Raised when the query point is neither a legacy pair nor a GeoJSON Point."""


class CastError(GeoNearError):
    """Raised when a filter value cannot be coerced to its declared field type."""

    def __init__(self, path: str, value: Any, expected: str) -> None:
        self.path = path
        self.value = value
        self.expected = expected
        super().__init__(
            f"Cast to {expected} failed for value {value!r} at path {path!r}"
        )


class MongoPersistenceError(GeoNearError):
    """Base for MongoDB persistence errors."""


class MongoConnectionError(MongoPersistenceError):
    """Raised when connection to MongoDB fails."""


class MongoQueryError(MongoPersistenceError):
    """Raised when a near query or its output is malformed."""


class InvalidOptionsError(GeoNearError):
    """Raised when near-query options have the wrong shape or types."""
