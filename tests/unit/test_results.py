"""Unit tests for result builders."""

import pytest

from cqrs_ddd_geonear.model_mapper import MongoDBModelMapper
from cqrs_ddd_geonear.results import (
    HydratedResultBuilder,
    NearResult,
    build_lean_result,
    map_results,
    select_result_builder,
)
from tests.conftest import Place

ENTRIES = [
    {"dis": 0.5, "obj": {"_id": "near", "coordinates": [1, 1], "priority": 1}},
    {"dis": 9.0, "obj": {"_id": "far", "coordinates": [5, 5], "priority": 2}},
    {"dis": 3.0, "obj": {"_id": "mid", "coordinates": [2, 2], "priority": 3}},
]


@pytest.fixture
def mapper():
    return MongoDBModelMapper(Place)


def test_select_lean_builder(mapper):
    assert select_result_builder(True, mapper) is build_lean_result


def test_select_hydrated_builder(mapper):
    assert isinstance(select_result_builder(False, mapper), HydratedResultBuilder)


def test_lean_results_are_plain_records(mapper):
    results = map_results(ENTRIES, lean=True, mapper=mapper)

    first = results[0]
    assert isinstance(first, NearResult)
    assert first.distance == 0.5
    assert isinstance(first.object, dict)
    assert not isinstance(first.object, Place)
    assert first.object["_id"] == "near"
    assert first.raw is ENTRIES[0]["obj"]


def test_hydrated_results_are_model_instances(mapper):
    results = map_results(ENTRIES, lean=False, mapper=mapper)

    first = results[0]
    assert isinstance(first.object, Place)
    assert first.object.id == "near"
    assert first.object.coordinates == [1.0, 1.0]
    assert first.raw == {"_id": "near", "coordinates": [1, 1], "priority": 1}


def test_order_is_preserved(mapper):
    results = map_results(ENTRIES, lean=False, mapper=mapper)

    assert [r.distance for r in results] == [0.5, 9.0, 3.0]
    assert [r.object.id for r in results] == ["near", "far", "mid"]


def test_native_aliases(mapper):
    result = map_results(ENTRIES[:1], lean=False, mapper=mapper)[0]

    assert result.dis == result.distance
    assert result.obj is result.object


def test_results_are_frozen(mapper):
    result = map_results(ENTRIES[:1], lean=True, mapper=mapper)[0]

    with pytest.raises(AttributeError):
        result.distance = 1.0


def test_empty_entries(mapper):
    assert map_results([], lean=False, mapper=mapper) == []
