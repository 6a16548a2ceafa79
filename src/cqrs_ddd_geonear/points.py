"""Query point classification: legacy coordinate pairs vs. GeoJSON Points.

``normalize_point`` is the single place that inspects caller input. It
returns one of the two immutable variants below or raises
:class:`~cqrs_ddd_geonear.exceptions.InvalidPointError`.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from numbers import Real
from typing import Any, ClassVar, Literal, Union

from .exceptions import GENERIC_POINT_MESSAGE, LEGACY_SIZE_MESSAGE, InvalidPointError


@dataclass(frozen=True)
class LegacyPoint:
    """A ``[x, y]`` pair, planar or spherical depending on the query options."""

    kind: ClassVar[Literal["legacy"]] = "legacy"

    x: float
    y: float

    def to_near(self) -> list[float]:
        return [self.x, self.y]


@dataclass(frozen=True)
class GeoJSONPoint:
    """A GeoJSON ``{"type": "Point", "coordinates": [x, y]}`` object."""

    kind: ClassVar[Literal["geojson"]] = "geojson"

    coordinates: tuple[float, float]

    def to_near(self) -> dict[str, Any]:
        return {"type": "Point", "coordinates": list(self.coordinates)}


NearPoint = Union[LegacyPoint, GeoJSONPoint]


def _is_finite_number(value: Any) -> bool:
    # bool is an int subclass; True/False are never coordinates
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    return math.isfinite(value)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(
        value, (str, bytes, bytearray)
    )


def _as_pair(value: Any) -> tuple[float, float] | None:
    """Return ``value`` as a float pair if it holds exactly two finite numbers."""
    if not _is_sequence(value) or len(value) != 2:
        return None
    if not all(_is_finite_number(v) for v in value):
        return None
    return float(value[0]), float(value[1])


def normalize_point(raw: Any) -> NearPoint:
    """Classify ``raw`` into a :data:`NearPoint`.

    Accepts a two-element sequence of finite numbers, a mapping shaped like
    a GeoJSON Point, or a pydantic model (e.g. ``geojson_pydantic.Point``)
    that dumps to one.
    """
    if hasattr(raw, "model_dump") and not isinstance(raw, Mapping):
        raw = raw.model_dump()

    if isinstance(raw, Mapping):
        if raw.get("type") != "Point":
            raise InvalidPointError(GENERIC_POINT_MESSAGE)
        pair = _as_pair(raw.get("coordinates"))
        if pair is None:
            raise InvalidPointError(GENERIC_POINT_MESSAGE)
        return GeoJSONPoint(coordinates=pair)

    if _is_sequence(raw):
        if len(raw) != 2:
            raise InvalidPointError(LEGACY_SIZE_MESSAGE)
        pair = _as_pair(raw)
        if pair is None:
            raise InvalidPointError(GENERIC_POINT_MESSAGE)
        return LegacyPoint(x=pair[0], y=pair[1])

    raise InvalidPointError(GENERIC_POINT_MESSAGE)
