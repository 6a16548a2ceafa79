"""Unit tests for NearOptions and option translation."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from cqrs_ddd_geonear.casting import SchemaCaster
from cqrs_ddd_geonear.exceptions import CastError, InvalidOptionsError
from cqrs_ddd_geonear.options import NearOptions, coerce_options, translate_options
from tests.conftest import Place


@pytest.fixture
def caster():
    return SchemaCaster(Place)


class TestNearOptions:
    def test_defaults(self):
        opts = NearOptions()

        assert opts.spherical is False
        assert opts.lean is False
        assert opts.max_distance is None
        assert opts.query is None

    def test_accepts_native_and_snake_case_names(self):
        native = NearOptions.model_validate({"maxDistance": 300, "minDistance": 1})
        snake = NearOptions(max_distance=300, min_distance=1)

        assert native.max_distance == snake.max_distance == 300
        assert native.min_distance == snake.min_distance == 1

    def test_unknown_keys_are_kept(self):
        opts = coerce_options({"spherical": True, "comment": "nearby"})

        assert opts.model_extra == {"comment": "nearby"}

    def test_none_becomes_defaults(self):
        assert coerce_options(None) == NearOptions()

    def test_instance_is_returned_as_is(self):
        opts = NearOptions(lean=True)

        assert coerce_options(opts) is opts

    def test_non_mapping_rejected(self):
        with pytest.raises(InvalidOptionsError, match="must be a mapping"):
            coerce_options(["spherical"])

    def test_wrong_types_rejected(self):
        with pytest.raises(InvalidOptionsError):
            coerce_options({"maxDistance": "far"})


class TestTranslateOptions:
    def test_recognised_keys_copied_with_native_names(self, caster):
        params = translate_options(
            {
                "spherical": True,
                "maxDistance": 300,
                "minDistance": 10,
                "distanceMultiplier": 6371,
                "includeLocs": "loc",
                "key": "coordinates",
            },
            caster,
        )

        assert params.stage == {
            "spherical": True,
            "maxDistance": 300,
            "minDistance": 10,
            "distanceMultiplier": 6371,
            "includeLocs": "loc",
            "key": "coordinates",
        }

    def test_lean_and_limit_stay_out_of_stage(self, caster):
        params = translate_options({"lean": True, "num": 5}, caster)

        assert params.lean is True
        assert params.limit == 5
        assert "lean" not in params.stage
        assert "num" not in params.stage

    def test_limit_wins_over_num(self, caster):
        params = translate_options({"num": 5, "limit": 2}, caster)

        assert params.limit == 2

    def test_no_limit_by_default(self, caster):
        assert translate_options({}, caster).limit is None

    def test_query_is_cast(self, caster):
        params = translate_options({"query": {"priority": "1"}}, caster)

        assert params.stage["query"] == {"priority": 1}

    def test_cast_failure_aborts_translation(self, caster):
        with pytest.raises(CastError):
            translate_options({"query": {"priority": "high"}}, caster)

    def test_injected_caster_is_used(self):
        stub = MagicMock()
        stub.cast.return_value = {"priority": 42}

        params = translate_options({"query": {"priority": "x"}}, stub)

        stub.cast.assert_called_once_with({"priority": "x"})
        assert params.stage["query"] == {"priority": 42}

    def test_caster_not_called_without_query(self):
        stub = MagicMock()

        translate_options({"spherical": True}, stub)

        stub.cast.assert_not_called()

    def test_unknown_keys_pass_through(self, caster):
        params = translate_options({"comment": "nearby", "uniqueDocs": True}, caster)

        assert params.stage["comment"] == "nearby"
        assert params.stage["uniqueDocs"] is True
