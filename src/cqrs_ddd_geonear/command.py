"""Issue the native near command and collect raw ``{dis, obj}`` entries."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import MongoQueryError
from .instrumentation import NearCall, near_hooks

if TYPE_CHECKING:
    from .options import GeoNearParams
    from .points import NearPoint

logger = logging.getLogger("cqrs_ddd.mongo.geo_near.command")

DISTANCE_FIELD = "__geo_near_dis"


def build_pipeline(point: NearPoint, params: GeoNearParams) -> list[dict[str, Any]]:
    """Build the aggregation pipeline: one ``$geoNear`` stage plus ``$limit``."""
    stage = dict(params.stage)
    stage["near"] = point.to_near()
    stage["distanceField"] = DISTANCE_FIELD
    pipeline: list[dict[str, Any]] = [{"$geoNear": stage}]
    if params.limit is not None:
        pipeline.append({"$limit": params.limit})
    return pipeline


def _split_entry(doc: dict[str, Any]) -> dict[str, Any]:
    obj = dict(doc)
    try:
        dis = obj.pop(DISTANCE_FIELD)
    except KeyError as e:
        raise MongoQueryError(
            f"$geoNear result is missing its distance field: {doc!r}"
        ) from e
    return {"dis": dis, "obj": obj}


async def execute_geo_near(
    collection: Any,
    point: NearPoint,
    params: GeoNearParams,
) -> list[dict[str, Any]]:
    """Run one near query against ``collection`` (a Motor collection).

    Returns raw entries ``{"dis": float, "obj": dict}`` in server order.
    Transport and server errors propagate unchanged; nothing is retried.
    """
    pipeline = build_pipeline(point, params)
    name = getattr(collection, "name", "unknown")
    logger.debug("geoNear on %s: %r", name, pipeline)

    async def send() -> list[dict[str, Any]]:
        cursor = collection.aggregate(pipeline)
        return [_split_entry(doc) async for doc in cursor]

    call = NearCall(collection=name, point=point, params=params, pipeline=pipeline)
    entries = await near_hooks().around(call, send)
    logger.debug("geoNear on %s returned %d result(s)", name, len(entries))
    return entries
