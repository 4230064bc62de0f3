"""Unit tests for MongoDocumentMapper: id rename, BSON types, round-trip."""

from dataclasses import asdict, dataclass
from decimal import Decimal

import pytest
from bson import ObjectId
from bson.decimal128 import Decimal128
from pydantic import BaseModel

from data_client_mongo.model_mapper import MongoDocumentMapper


class SimpleModel(BaseModel):
    id: str | None = None
    name: str = ""
    value: int = 0


class ModelWithDecimal(BaseModel):
    id: str | None = None
    amount: Decimal = Decimal("0")
    history: list[Decimal] = []


@dataclass
class PlainItem:
    key: str
    label: str


@pytest.fixture
def simple_mapper():
    return MongoDocumentMapper.for_model(SimpleModel)


def test_to_model_maps_underscore_id_to_hex_string(simple_mapper):
    oid = ObjectId()
    model = simple_mapper.to_model({"_id": oid, "name": "x", "value": 1})
    assert model == SimpleModel(id=str(oid), name="x", value=1)


def test_to_model_does_not_mutate_document(simple_mapper):
    oid = ObjectId()
    doc = {"_id": oid, "name": "x", "value": 1}
    simple_mapper.to_model(doc)
    assert doc == {"_id": oid, "name": "x", "value": 1}


def test_to_document_drops_id(simple_mapper):
    doc = simple_mapper.to_document(SimpleModel(id=str(ObjectId()), name="x"))
    assert doc == {"name": "x", "value": 0}


def test_round_trip_with_generated_id(simple_mapper):
    model = SimpleModel(id=str(ObjectId()), name="test", value=42)
    doc = simple_mapper.to_document(model)
    doc["_id"] = ObjectId(model.id)
    assert simple_mapper.to_model(doc) == model


def test_to_document_with_id(simple_mapper):
    model = SimpleModel(id="abc", name="x")
    identifier, doc = simple_mapper.to_document_with_id(model)
    assert identifier == "abc"
    assert doc == {"name": "x", "value": 0}
    assert simple_mapper.to_document_with_id(SimpleModel())[0] is None


def test_to_document_with_id_encodes_once():
    calls = []

    def to_json(item):
        calls.append(item)
        return asdict(item)

    mapper = MongoDocumentMapper(
        lambda data: PlainItem(**data), to_json, id_field="key"
    )
    assert mapper.to_document_with_id(PlainItem("k1", "a")) == ("k1", {"label": "a"})
    assert len(calls) == 1


def test_decimal_round_trip():
    mapper = MongoDocumentMapper.for_model(ModelWithDecimal)
    model = ModelWithDecimal(amount=Decimal("12.50"), history=[Decimal("1.1")])
    doc = mapper.to_document(model)
    assert doc["amount"] == Decimal128("12.50")
    assert doc["history"] == [Decimal128("1.1")]

    doc["_id"] = ObjectId()
    back = mapper.to_model(doc)
    assert back.amount == Decimal("12.50")
    assert back.history == [Decimal("1.1")]


def test_custom_codec_pair_and_id_field():
    mapper = MongoDocumentMapper(
        lambda data: PlainItem(**data),
        asdict,
        id_field="key",
    )
    oid = ObjectId()
    assert mapper.to_model({"_id": oid, "label": "a"}) == PlainItem(str(oid), "a")
    assert mapper.to_document(PlainItem("k1", "a")) == {"label": "a"}
    assert mapper.to_document_with_id(PlainItem("k1", "a"))[0] == "k1"
