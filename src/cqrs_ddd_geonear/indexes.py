"""Geospatial index helpers — ``$geoNear`` requires exactly one geo index."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .connection import MongoConnectionManager

GEO_INDEX_TYPES = frozenset({"2d", "2dsphere"})


def geo_index_names(index_information: Mapping[str, Any]) -> list[str]:
    """Names of the geospatial indexes in an ``index_information()`` result."""
    return [
        name
        for name, index in index_information.items()
        if any(kind in GEO_INDEX_TYPES for _, kind in index.get("key", ()))
    ]


async def create_2dsphere_index(
    connection: MongoConnectionManager,
    collection: str,
    field: str,
    *,
    database: str | None = None,
    name: str | None = None,
) -> str:
    """Create a 2dsphere index (GeoJSON and legacy pairs, spherical math)."""
    coll = connection.collection(collection, database=database)
    return await coll.create_index(
        [(field, "2dsphere")],
        name=name or f"geo_{field}",
    )


async def create_2d_index(
    connection: MongoConnectionManager,
    collection: str,
    field: str,
    *,
    database: str | None = None,
    name: str | None = None,
) -> str:
    """Create a 2d index (legacy pairs on a flat plane)."""
    coll = connection.collection(collection, database=database)
    return await coll.create_index(
        [(field, "2d")],
        name=name or f"geo2d_{field}",
    )
