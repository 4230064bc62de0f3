"""Model <-> MongoDB document mapping with ``_id`` renaming and BSON types."""

from __future__ import annotations

from collections.abc import Callable
from decimal import Decimal
from typing import Any, Generic, TypeVar

from bson import ObjectId
from bson.decimal128 import Decimal128
from pydantic import BaseModel

T = TypeVar("T")
TModel = TypeVar("TModel", bound=BaseModel)

FromJson = Callable[[dict[str, Any]], T]
ToJson = Callable[[T], dict[str, Any]]


def _serialize_value(value: Any) -> Any:
    """Convert Python types to BSON-safe types (Decimal -> Decimal128)."""
    if isinstance(value, Decimal):
        return Decimal128(value)
    if isinstance(value, dict):
        return {k: _serialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_serialize_value(v) for v in value]
    return value


def _deserialize_value(value: Any) -> Any:
    """Convert BSON types back to Python types (Decimal128 -> Decimal)."""
    if isinstance(value, Decimal128):
        return value.to_decimal()
    if isinstance(value, dict):
        return {k: _deserialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_deserialize_value(v) for v in value]
    return value


class MongoDocumentMapper(Generic[T]):
    """
    Model <-> document mapper built from a caller-supplied codec pair.

    ``from_json`` decodes a plain dict (with the string id under ``id_field``)
    into ``T``; ``to_json`` encodes ``T`` into a plain dict. The mapper owns
    the ``_id`` <-> ``id_field`` rename and BSON-specific value conversion.
    """

    def __init__(
        self,
        from_json: FromJson[T],
        to_json: ToJson[T],
        *,
        id_field: str = "id",
    ) -> None:
        self._from_json = from_json
        self._to_json = to_json
        self._id_field = id_field

    @classmethod
    def for_model(
        cls, model_cls: type[TModel], *, id_field: str = "id"
    ) -> MongoDocumentMapper[TModel]:
        """Build a mapper for a Pydantic model.

        Uses ``model_dump(mode="python")`` so datetimes and Decimals keep
        their native types for PyMongo.
        """
        return MongoDocumentMapper(
            model_cls.model_validate,
            lambda model: model.model_dump(mode="python"),
            id_field=id_field,
        )

    @property
    def id_field(self) -> str:
        return self._id_field

    def to_model(self, doc: dict[str, Any]) -> T:
        """Convert a MongoDB document to ``T``. ``doc`` is left untouched."""
        data = dict(doc)
        if "_id" in data:
            native_id = data.pop("_id")
            data[self._id_field] = (
                str(native_id) if isinstance(native_id, ObjectId) else native_id
            )
        return self._from_json(_deserialize_value(data))

    def to_document(self, model: T) -> dict[str, Any]:
        """Convert ``T`` to a document body without any identifier field.

        The store holds the primary key; on update it comes from the selector.
        """
        return self.to_document_with_id(model)[1]

    def to_document_with_id(self, model: T) -> tuple[Any, dict[str, Any]]:
        """Encode ``T`` once, returning its application id and document body."""
        data = dict(self._to_json(model))
        identifier = data.pop(self._id_field, None)
        data.pop("_id", None)
        return identifier, _serialize_value(data)
