"""Nearest-neighbour ($geoNear) queries for MongoDB read models.

Accepts legacy coordinate pairs or GeoJSON Points, casts filter predicates
against the read model schema and maps results back to pydantic models or
lean records.
"""

from __future__ import annotations

from .casting import FilterCaster, SchemaCaster
from .command import build_pipeline, execute_geo_near
from .connection import MongoConnectionManager
from .exceptions import (
    CastError,
    GeoNearError,
    InvalidOptionsError,
    InvalidPointError,
    MongoConnectionError,
    MongoPersistenceError,
    MongoQueryError,
)
from .indexes import create_2d_index, create_2dsphere_index
from .instrumentation import NearCall, NearHooks, near_hooks, use_near_hooks
from .model_mapper import MongoDBModelMapper
from .options import GeoNearParams, NearOptions, translate_options
from .points import GeoJSONPoint, LegacyPoint, NearPoint, normalize_point
from .repository import MongoGeoNearRepository
from .results import NearResult, map_results, select_result_builder

__all__ = [
    # Entry point
    "MongoGeoNearRepository",
    "MongoConnectionManager",
    # Pipeline stages
    "normalize_point",
    "translate_options",
    "build_pipeline",
    "execute_geo_near",
    "map_results",
    "select_result_builder",
    # Types
    "NearPoint",
    "LegacyPoint",
    "GeoJSONPoint",
    "NearOptions",
    "GeoNearParams",
    "NearResult",
    "FilterCaster",
    "SchemaCaster",
    "MongoDBModelMapper",
    # Indexes & instrumentation
    "create_2dsphere_index",
    "create_2d_index",
    "NearCall",
    "NearHooks",
    "near_hooks",
    "use_near_hooks",
    # Exceptions
    "GeoNearError",
    "InvalidPointError",
    "InvalidOptionsError",
    "CastError",
    "MongoPersistenceError",
    "MongoConnectionError",
    "MongoQueryError",
]
