"""Test configuration for the geo-near package."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import BaseModel

from cqrs_ddd_geonear import MongoConnectionManager
from cqrs_ddd_geonear.command import DISTANCE_FIELD

pytest_plugins = ["pytest_asyncio"]


TEST_LOCATIONS = {
    "MONGODB_NYC_OFFICE": [-73.987732, 40.757471],
    "BRYANT_PARK_NY": [-73.983677, 40.753628],
    "EAST_HARLEM_SHOP": [-73.93831, 40.794963],
    "CENTRAL_PARK_ZOO": [-73.972299, 40.767732],
    "PORT_AUTHORITY_STATION": [-73.990147, 40.757253],
}


def meters_to_radians(meters: float) -> float:
    """Convert metres to radians for legacy coordinate distances."""
    return meters / (6371 * 1000)


class Place(BaseModel):
    """Read model used across the geo-near tests."""

    id: str
    coordinates: list[float]
    type: str | None = None
    priority: int | None = None


class _AsyncCursor:
    """Async iterator over canned documents, raising ``error`` when iterated."""

    def __init__(self, docs: list[dict[str, Any]], error: Exception | None) -> None:
        self._docs = list(docs)
        self._error = error

    def __aiter__(self) -> _AsyncCursor:
        return self

    async def __anext__(self) -> dict[str, Any]:
        if self._error is not None:
            raise self._error
        if not self._docs:
            raise StopAsyncIteration
        return self._docs.pop(0)


class FakeGeoCollection:
    """Motor-like collection answering ``$geoNear`` pipelines with canned rows.

    ``rows`` are ``(distance, document)`` pairs returned in the given order.
    """

    def __init__(
        self,
        rows: list[tuple[float, dict[str, Any]]] | None = None,
        *,
        error: Exception | None = None,
        name: str = "places",
    ) -> None:
        self.name = name
        self.rows = rows or []
        self.error = error
        self.pipelines: list[list[dict[str, Any]]] = []

    def aggregate(self, pipeline: list[dict[str, Any]]) -> _AsyncCursor:
        self.pipelines.append(pipeline)
        docs = [{**doc, DISTANCE_FIELD: dis} for dis, doc in self.rows]
        return _AsyncCursor(docs, self.error)


def make_connection(collection: Any) -> MongoConnectionManager:
    """Create a connection manager whose client serves ``collection``."""
    connection = MongoConnectionManager(database="test_db")
    client = MagicMock()
    client.get_database.return_value.get_collection.return_value = collection
    connection._client = client
    return connection


@pytest.fixture
def fake_collection() -> FakeGeoCollection:
    return FakeGeoCollection()


@pytest.fixture
def fake_connection(fake_collection: FakeGeoCollection) -> MongoConnectionManager:
    return make_connection(fake_collection)


@pytest.fixture(scope="module")
def mongo_container():
    """Create a MongoDB container using testcontainers."""
    pytest.importorskip("testcontainers")

    from testcontainers.mongodb import MongoDbContainer

    try:
        container = MongoDbContainer("mongo:7.0")
        container.start()
    except Exception as e:  # noqa: BLE001
        pytest.skip(f"MongoDB container unavailable: {e}")
    yield container
    container.stop()


@pytest.fixture
async def real_mongo_connection(mongo_container):
    """Real MongoDB connection; function scoped to stay on the test's loop."""
    connection = MongoConnectionManager(
        url=mongo_container.get_connection_url(), database="test_geo_db"
    )
    await connection.connect()
    yield connection
    await connection.client.drop_database("test_geo_db")
    connection.close()
