"""MongoGeoNearRepository[T] — near queries over a pydantic read model."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel

from .casting import FilterCaster, SchemaCaster
from .command import execute_geo_near
from .model_mapper import MongoDBModelMapper
from .options import translate_options
from .points import normalize_point
from .results import NearResult, map_results

if TYPE_CHECKING:
    from .connection import MongoConnectionManager
    from .options import NearOptions

logger = logging.getLogger("cqrs_ddd.mongo.geo_near")

T = TypeVar("T", bound=BaseModel)

NearCallback = Callable[
    [BaseException | None, "list[NearResult[Any]] | None"], object
]


def _callback_listener(
    callback: NearCallback,
) -> Callable[[asyncio.Future[list[NearResult[Any]]]], None]:
    """Adapt an error-first callback into a future done-callback."""

    def on_done(future: asyncio.Future[list[NearResult[Any]]]) -> None:
        if future.cancelled():
            error: BaseException | None = asyncio.CancelledError()
            results = None
        else:
            error = future.exception()
            results = None if error is not None else future.result()
        try:
            callback(error, results)
        except Exception:  # noqa: BLE001
            logger.warning("geoNear callback %r raised", callback, exc_info=True)

    return on_done


class MongoGeoNearRepository(Generic[T]):
    """
    Nearest-neighbour queries for one collection and read model.

    Usage::

        repo = MongoGeoNearRepository(connection, "places", Place)

        # awaitable
        results = await repo.geo_near([-73.99, 40.75], {"spherical": True})

        # error-first callback; the future is returned either way
        repo.geo_near(point, {"maxDistance": 300}, callback=on_results)

    The query point is a legacy ``[x, y]`` pair or a GeoJSON Point. The
    filter in ``options["query"]`` is cast against ``model_cls`` unless a
    different ``caster`` is injected.
    """

    def __init__(
        self,
        connection: MongoConnectionManager,
        collection: str,
        model_cls: type[T],
        *,
        id_field: str = "id",
        field_map: dict[str, str] | None = None,
        database: str | None = None,
        caster: FilterCaster | None = None,
    ) -> None:
        self._connection = connection
        self._collection_name = collection
        self._model_cls = model_cls
        self._database = database
        self._mapper: MongoDBModelMapper[T] = MongoDBModelMapper(
            model_cls, id_field=id_field, field_map=field_map
        )
        self._caster = caster or SchemaCaster(
            model_cls, id_field=id_field, field_map=field_map
        )

    @property
    def mapper(self) -> MongoDBModelMapper[T]:
        return self._mapper

    def _collection(self) -> Any:
        return self._connection.collection(
            self._collection_name, database=self._database
        )

    async def near(
        self,
        near: Any,
        options: NearOptions | Mapping[str, Any] | None = None,
    ) -> list[NearResult[T]]:
        """Run the near query and return results ordered by distance."""
        point = normalize_point(near)
        params = translate_options(options, self._caster)
        entries = await execute_geo_near(self._collection(), point, params)
        return map_results(entries, lean=params.lean, mapper=self._mapper)

    def geo_near(
        self,
        near: Any,
        options: NearOptions | Mapping[str, Any] | None = None,
        callback: NearCallback | None = None,
    ) -> asyncio.Future[list[NearResult[T]]]:
        """Schedule :meth:`near` and return its future.

        Every failure of the query itself (bad point, cast error, server
        error) rejects the future and is never raised from this call; when
        ``callback`` is given it receives the same outcome as
        ``callback(error, results)``.

        Raises:
            RuntimeError: If called without a running event loop. Nothing is
                scheduled and ``callback`` is not invoked.
        """
        loop = asyncio.get_running_loop()
        future: asyncio.Future[list[NearResult[T]]] = loop.create_task(
            self.near(near, options)
        )
        if callback is not None:
            future.add_done_callback(_callback_listener(callback))
        return future
