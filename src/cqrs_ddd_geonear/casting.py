"""Schema-driven casting of near-query filter predicates.

Filter values are coerced with pydantic's lax validation against the
annotation declared on the read model, so ``{"priority": "1"}`` reaches
MongoDB as ``{"priority": 1}`` when ``priority`` is an ``int`` field.
Keys that do not name a declared field are passed through uncast.

Cast values are dumped back to their stored form (``Decimal`` as
``Decimal128``, embedded models as plain dicts), the same form
:meth:`MongoDBModelMapper.to_doc` writes. Values that are already native
BSON types are sent as given.
"""

from __future__ import annotations

import re
import types
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, Union, get_args, get_origin

from bson.decimal128 import Decimal128
from bson.objectid import ObjectId
from bson.regex import Regex
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .exceptions import CastError
from .model_mapper import to_storage

if TYPE_CHECKING:
    from pydantic import BaseModel

_LOGICAL_OPERATORS = frozenset({"$and", "$or", "$nor"})
_OPERAND_OPERATORS = frozenset({"$eq", "$ne", "$gt", "$gte", "$lt", "$lte"})
_LIST_OPERATORS = frozenset({"$in", "$nin", "$all"})
_LIST_ORIGINS = (list, tuple, set, frozenset, Sequence)
_NATIVE_TYPES = (re.Pattern, Regex, ObjectId, Decimal128)


class FilterCaster(Protocol):
    """Capability that casts a raw filter predicate against a schema."""

    def cast(self, predicate: Mapping[str, Any]) -> dict[str, Any]:
        """Return a copy of ``predicate`` with declared fields coerced."""
        ...


def _strip_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) == 1:
            return args[0]
    return annotation


def _type_name(annotation: Any) -> str:
    return getattr(annotation, "__name__", None) or repr(annotation)


def _is_operator_doc(value: Any) -> bool:
    return (
        isinstance(value, Mapping)
        and bool(value)
        and all(str(k).startswith("$") for k in value)
    )


class _FieldCaster:
    """Casts values destined for one declared field."""

    def __init__(self, path: str, annotation: Any) -> None:
        self._path = path
        self._annotation = annotation
        self._adapter: TypeAdapter[Any] = TypeAdapter(annotation)
        inner = _strip_optional(annotation)
        self._item_adapter: TypeAdapter[Any] | None = None
        self._item_annotation: Any = None
        if get_origin(inner) in _LIST_ORIGINS and get_args(inner):
            self._item_annotation = get_args(inner)[0]
            self._item_adapter = TypeAdapter(self._item_annotation)

    def _validate(
        self, adapter: TypeAdapter[Any], annotation: Any, value: Any
    ) -> Any:
        try:
            validated = adapter.validate_python(value)
        except PydanticValidationError as e:
            raise CastError(self._path, value, _type_name(annotation)) from e
        return to_storage(adapter.dump_python(validated, mode="python"))

    def cast_value(self, value: Any) -> Any:
        if value is None or isinstance(value, _NATIVE_TYPES):
            return value
        if self._item_adapter is not None and not (
            isinstance(value, (list, tuple, set, frozenset))
        ):
            # scalar compared against an array field matches its elements
            return self._validate(self._item_adapter, self._item_annotation, value)
        return self._validate(self._adapter, self._annotation, value)

    def cast_operators(self, ops: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for op, operand in ops.items():
            if op in _OPERAND_OPERATORS:
                result[op] = self.cast_value(operand)
            elif op in _LIST_OPERATORS and isinstance(operand, (list, tuple)):
                result[op] = [self.cast_value(v) for v in operand]
            elif op == "$not" and _is_operator_doc(operand):
                result[op] = self.cast_operators(operand)
            else:
                result[op] = operand
        return result

    def cast(self, value: Any) -> Any:
        if _is_operator_doc(value):
            return self.cast_operators(value)
        return self.cast_value(value)


class _IdCaster(_FieldCaster):
    """Casts ``_id`` values; 24-hex strings become ObjectIds."""

    def cast_value(self, value: Any) -> Any:
        if isinstance(value, str) and ObjectId.is_valid(value):
            return ObjectId(value)
        return super().cast_value(value)


class SchemaCaster:
    """FilterCaster backed by a pydantic model's declared fields.

    Document keys follow the mapper conventions: the model's ``id_field`` is
    stored as ``_id`` and ``field_map`` renames model fields to document keys.
    With ``object_ids`` left on, ``_id`` strings that are valid ObjectId hex
    are sent as ``ObjectId``; turn it off for collections keyed by 24-hex
    strings.
    """

    def __init__(
        self,
        model_cls: type[BaseModel],
        *,
        id_field: str = "id",
        field_map: dict[str, str] | None = None,
        object_ids: bool = True,
    ) -> None:
        self.model_cls = model_cls
        self.object_ids = object_ids
        field_map = field_map or {}
        self.field_types: dict[str, Any] = {}
        for name, info in model_cls.model_fields.items():
            key = "_id" if name == id_field else field_map.get(name, name)
            self.field_types[key] = info.annotation
        self._casters: dict[str, _FieldCaster] = {}

    def _caster_for(self, key: str) -> _FieldCaster | None:
        if key not in self.field_types:
            return None
        caster = self._casters.get(key)
        if caster is None:
            factory = _IdCaster if key == "_id" and self.object_ids else _FieldCaster
            caster = factory(key, self.field_types[key])
            self._casters[key] = caster
        return caster

    def cast(self, predicate: Mapping[str, Any]) -> dict[str, Any]:
        result: dict[str, Any] = {}
        for key, value in predicate.items():
            if key in _LOGICAL_OPERATORS and isinstance(value, (list, tuple)):
                result[key] = [self.cast(sub) for sub in value]
                continue
            caster = self._caster_for(key)
            result[key] = value if caster is None else caster.cast(value)
        return result
