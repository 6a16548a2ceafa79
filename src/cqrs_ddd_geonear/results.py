"""Mapping of raw ``{dis, obj}`` entries to :class:`NearResult` values.

Two builders exist, one per output shape. :func:`select_result_builder`
picks one before any entry is mapped.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from .model_mapper import MongoDBModelMapper

T = TypeVar("T")

ResultBuilder = Callable[[dict[str, Any]], "NearResult[Any]"]


@dataclass(frozen=True)
class NearResult(Generic[T]):
    """One matched document and its distance from the query point.

    ``object`` is a hydrated model instance, or the raw record when the
    query ran with ``lean=True``.
    """

    distance: float
    object: T | dict[str, Any]
    raw: dict[str, Any]

    @property
    def dis(self) -> float:
        return self.distance

    @property
    def obj(self) -> T | dict[str, Any]:
        return self.object


def build_lean_result(entry: dict[str, Any]) -> NearResult[Any]:
    record = entry["obj"]
    return NearResult(distance=entry["dis"], object=record, raw=record)


class HydratedResultBuilder(Generic[T]):
    """Builds results whose ``object`` went through the model mapper."""

    def __init__(self, mapper: MongoDBModelMapper[Any]) -> None:
        self._mapper = mapper

    def __call__(self, entry: dict[str, Any]) -> NearResult[T]:
        record = entry["obj"]
        return NearResult(
            distance=entry["dis"],
            object=self._mapper.from_doc(record),
            raw=record,
        )


def select_result_builder(
    lean: bool, mapper: MongoDBModelMapper[Any]
) -> ResultBuilder:
    if lean:
        return build_lean_result
    return HydratedResultBuilder(mapper)


def map_results(
    entries: list[dict[str, Any]],
    *,
    lean: bool,
    mapper: MongoDBModelMapper[Any],
) -> list[NearResult[Any]]:
    """Map raw entries in the order received."""
    build = select_result_builder(lean, mapper)
    return [build(entry) for entry in entries]
