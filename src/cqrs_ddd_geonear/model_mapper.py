"""Read model <-> MongoDB document mapping with BSON type preservation."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from enum import Enum
from typing import Any, Generic, TypeVar

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from .exceptions import MongoPersistenceError

T_Model = TypeVar("T_Model", bound=BaseModel)


def _walk(value: Any, convert: Callable[[Any], Any]) -> Any:
    if isinstance(value, dict):
        return {k: _walk(v, convert) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_walk(v, convert) for v in value]
    return convert(value)


def _to_bson(value: Any) -> Any:
    if isinstance(value, Decimal):
        return Decimal128(str(value))
    if isinstance(value, Enum):
        return value.value
    return value


def _from_bson(value: Any) -> Any:
    return value.to_decimal() if isinstance(value, Decimal128) else value


def to_storage(value: Any) -> Any:
    """Convert a python value (possibly nested) to the form documents store."""
    return _walk(value, _to_bson)


class MongoDBModelMapper(Generic[T_Model]):
    """
    Map pydantic read models to documents and back.

    Hydration is the path every fetch goes through: ``_id`` becomes the
    model's id field, ``Decimal128`` becomes ``Decimal`` and pydantic
    validation casts fields and applies defaults. ``field_map`` renames
    model fields to document keys (``{"name": "title"}`` stores ``name``
    under ``title``).
    """

    def __init__(
        self,
        model_cls: type[T_Model],
        *,
        id_field: str = "id",
        field_map: dict[str, str] | None = None,
    ) -> None:
        self.model_cls = model_cls
        self.id_field = id_field
        self.field_map = dict(field_map or {})
        self._reverse_map = {v: k for k, v in self.field_map.items()}

    def to_doc(self, model: T_Model) -> dict[str, Any]:
        """Convert a model to a BSON-ready document (id -> ``_id``)."""
        data = model.model_dump(mode="python")
        doc = {self.field_map.get(k, k): v for k, v in data.items()}
        if self.id_field in data:
            doc.pop(self.field_map.get(self.id_field, self.id_field), None)
            doc["_id"] = data[self.id_field]
        converted: dict[str, Any] = to_storage(doc)
        return converted

    def from_doc(self, doc: dict[str, Any]) -> T_Model:
        """Hydrate a model instance from a raw document."""
        if not isinstance(doc, dict):
            raise MongoPersistenceError("Document must be a dict")
        data = {self._reverse_map.get(k, k): v for k, v in doc.items()}
        if "_id" in data:
            data[self.id_field] = self._hydrate_id(data.pop("_id"))
        try:
            return self.model_cls.model_validate(_walk(data, _from_bson))
        except PydanticValidationError as e:
            raise MongoPersistenceError(
                f"Cannot hydrate {self.model_cls.__name__}: {e}"
            ) from e

    def _hydrate_id(self, value: Any) -> Any:
        if not isinstance(value, ObjectId):
            return value
        field = self.model_cls.model_fields.get(self.id_field)
        if field is not None and field.annotation is str:
            return str(value)
        return value
