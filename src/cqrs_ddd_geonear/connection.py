"""MongoConnectionManager — Motor client, database resolution, geo readiness."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from .exceptions import MongoConnectionError
from .indexes import geo_index_names

if TYPE_CHECKING:
    from motor.motor_asyncio import (
        AsyncIOMotorClient,
        AsyncIOMotorCollection,
        AsyncIOMotorDatabase,
    )

logger = logging.getLogger("cqrs_ddd.mongo.connection")


class MongoConnectionManager:
    """
    Own the Motor client that near queries run on.

    ``database`` is the default for repositories and index helpers that do
    not name one. The manager can be used as an async context manager::

        async with MongoConnectionManager(url, database="geo") as connection:
            repo = MongoGeoNearRepository(connection, "places", Place)
            if not await connection.health_check("places"):
                ...
    """

    def __init__(
        self,
        url: str = "mongodb://localhost:27017",
        *,
        database: str | None = None,
        server_selection_timeout_ms: int = 5000,
        connect_timeout_ms: int = 10000,
        **kwargs: Any,
    ) -> None:
        self._url = url
        self._database = database
        self._client_options = {
            "serverSelectionTimeoutMS": server_selection_timeout_ms,
            "connectTimeoutMS": connect_timeout_ms,
            **kwargs,
        }
        self._client: AsyncIOMotorClient[Any] | None = None

    async def __aenter__(self) -> MongoConnectionManager:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.close()

    async def connect(self) -> AsyncIOMotorClient[Any]:
        """Create the Motor client on first call; later calls reuse it."""
        if self._client is None:
            from motor.motor_asyncio import AsyncIOMotorClient

            try:
                self._client = AsyncIOMotorClient(self._url, **self._client_options)
            except Exception as e:
                raise MongoConnectionError(str(e)) from e
            logger.debug("Motor client created for %s", self._url)
        return self._client

    @property
    def client(self) -> AsyncIOMotorClient[Any]:
        if self._client is None:
            raise MongoConnectionError("Not connected; call connect() first")
        return self._client

    def database(self, name: str | None = None) -> AsyncIOMotorDatabase[Any]:
        """Return ``name`` or the configured default database."""
        database_name = name or self._database
        if not database_name:
            raise MongoConnectionError(
                "Database name must be set on repository or connection"
            )
        return self.client.get_database(database_name)

    def collection(
        self, name: str, *, database: str | None = None
    ) -> AsyncIOMotorCollection[Any]:
        return self.database(database).get_collection(name)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    async def health_check(
        self, collection: str | None = None, *, database: str | None = None
    ) -> bool:
        """Return True if the server answers a ping.

        With ``collection``, also require exactly one geospatial index on it
        (``$geoNear`` needs exactly one).
        """
        if self._client is None:
            return False
        try:
            await self._client.admin.command("ping")
            if collection is None:
                return True
            coll = self.collection(collection, database=database)
            info = await coll.index_information()
        except Exception:  # noqa: BLE001
            logger.debug("MongoDB health check failed", exc_info=True)
            return False
        geo = geo_index_names(info)
        if len(geo) != 1:
            logger.debug("%s has %d geo index(es): %s", collection, len(geo), geo)
        return len(geo) == 1
