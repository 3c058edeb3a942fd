"""Tests for the document model."""

import pytest
from pydantic import ValidationError

from swfpatcher.models.document import (
    DefineShape,
    DefineSprite,
    DoAbc,
    Document,
    Edge,
    PlaceObject,
    RawTag,
    ShowFrame,
    StyleChange,
    character_id,
)


def test_payload_accepts_hex_and_int_list():
    assert DoAbc(data="00ff").data == b"\x00\xff"
    assert DoAbc(data=[1, 2, 3]).data == b"\x01\x02\x03"


def test_payload_rejects_bad_hex():
    with pytest.raises(ValidationError):
        DoAbc(data="zz")


def test_payload_serializes_as_hex_in_json(document):
    dumped = document.model_dump(mode="json", by_alias=True)
    script = next(t for t in dumped["tags"] if t["type"] == "DoAbc")
    assert script["data"] == "10002e004d61696e00"


def test_camel_and_snake_names_accepted():
    a = PlaceObject.model_validate({"depth": 1, "characterId": 5})
    b = PlaceObject.model_validate({"depth": 1, "character_id": 5})
    assert a.character_id == b.character_id == 5


def test_tags_discriminated_by_type():
    doc = Document.model_validate(
        {
            "tags": [
                {
                    "type": "DefineShape",
                    "id": 1,
                    "shape": {"records": [{"type": "StyleChange"}, {"type": "Edge", "delta": {"x": 1}}]},
                },
                {"type": "Raw", "code": 99, "data": "beef"},
                {"type": "ShowFrame"},
            ]
        }
    )
    shape, raw, frame = doc.tags
    assert isinstance(shape, DefineShape)
    assert isinstance(shape.shape.records[0], StyleChange)
    assert isinstance(shape.shape.records[1], Edge)
    assert isinstance(raw, RawTag) and raw.data == b"\xbe\xef"
    assert isinstance(frame, ShowFrame)


def test_unknown_tag_type_rejected():
    with pytest.raises(ValidationError):
        Document.model_validate({"tags": [{"type": "Bogus"}]})


def test_tags_keep_unknown_fields():
    tag = DefineShape.model_validate({"id": 4, "version": 3})
    assert tag.model_dump()["version"] == 3


def test_find_definition_top_level_only():
    doc = Document(tags=[DefineSprite(id=2, tags=[DefineShape(id=5)])])
    assert doc.find_definition(2) is doc.tags[0]
    assert doc.find_definition(5) is None


def test_character_id():
    assert character_id(DefineShape(id=3)) == 3
    assert character_id(PlaceObject(depth=1, character_id=3)) is None
    assert character_id(RawTag(code=37, data=bytes([0x2C, 0x01, 0]))) == 300
    assert character_id(RawTag(code=37, data=b"\x2c")) is None
    assert character_id(RawTag(code=99, data=bytes([5, 0]))) is None
