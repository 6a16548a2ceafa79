"""Near-query options and their translation into ``$geoNear`` parameters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .exceptions import InvalidOptionsError

if TYPE_CHECKING:
    from .casting import FilterCaster


class NearOptions(BaseModel):
    """
    Caller-facing options for a near query.

    Fields accept either snake_case names or the native camelCase aliases
    (``maxDistance``, ``minDistance``, ``distanceMultiplier``,
    ``includeLocs``). Unknown keys are kept and forwarded to the
    ``$geoNear`` stage untouched.

    Attributes:
        spherical: Use spherical geometry instead of planar.
        max_distance: Upper distance bound. Radians for legacy points queried
            spherically, metres for GeoJSON points.
        min_distance: Lower distance bound, same units as ``max_distance``.
        num: Maximum number of results.
        limit: Same as ``num``; wins when both are given.
        query: Filter predicate, cast against the model schema.
        lean: Return raw records instead of hydrated model instances.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    spherical: bool = False
    max_distance: float | None = Field(default=None, alias="maxDistance")
    min_distance: float | None = Field(default=None, alias="minDistance")
    num: int | None = None
    limit: int | None = None
    query: dict[str, Any] | None = None
    lean: bool = False
    distance_multiplier: float | None = Field(
        default=None, alias="distanceMultiplier"
    )
    include_locs: str | None = Field(default=None, alias="includeLocs")
    key: str | None = None


@dataclass(frozen=True)
class GeoNearParams:
    """Native ``$geoNear`` parameters for one call, ready for execution."""

    stage: dict[str, Any] = field(default_factory=dict)
    limit: int | None = None
    lean: bool = False


_NATIVE_NAMES = {
    "max_distance": "maxDistance",
    "min_distance": "minDistance",
    "distance_multiplier": "distanceMultiplier",
    "include_locs": "includeLocs",
    "key": "key",
}


def coerce_options(options: NearOptions | Mapping[str, Any] | None) -> NearOptions:
    """Return ``options`` as a :class:`NearOptions` instance."""
    if options is None:
        return NearOptions()
    if isinstance(options, NearOptions):
        return options
    if not isinstance(options, Mapping):
        raise InvalidOptionsError(
            f"geoNear options must be a mapping, got {type(options).__name__}"
        )
    try:
        return NearOptions.model_validate(dict(options))
    except PydanticValidationError as e:
        raise InvalidOptionsError(str(e)) from e


def translate_options(
    options: NearOptions | Mapping[str, Any] | None,
    caster: FilterCaster,
) -> GeoNearParams:
    """Translate caller options into :class:`GeoNearParams`.

    The filter predicate goes through ``caster``; a cast failure propagates
    and no parameters are produced.
    """
    opts = coerce_options(options)

    stage: dict[str, Any] = {"spherical": opts.spherical}
    for attr, native in _NATIVE_NAMES.items():
        value = getattr(opts, attr)
        if value is not None:
            stage[native] = value
    if opts.query is not None:
        stage["query"] = caster.cast(opts.query)
    if opts.model_extra:
        stage.update(opts.model_extra)

    limit = opts.limit if opts.limit is not None else opts.num
    return GeoNearParams(stage=stage, limit=limit, lean=opts.lean)
