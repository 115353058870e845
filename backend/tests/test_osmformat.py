"""Tests for the PBF protobuf schema."""
import ast
from pathlib import Path

import pytest

from osmrest.pbf import osmformat


def _stub_slots():
    stub = Path(osmformat.__file__).with_suffix(".pyi")
    tree = ast.parse(stub.read_text())
    slots = {}
    for node in tree.body:
        if not isinstance(node, ast.ClassDef):
            continue
        for statement in node.body:
            if isinstance(statement, ast.Assign) and statement.targets[0].id == "__slots__":
                slots[node.name] = list(ast.literal_eval(statement.value))
    return slots


STUB_SLOTS = _stub_slots()


def test_primitive_block_defaults():
    block = osmformat.PrimitiveBlock()
    assert block.granularity == 100
    assert block.date_granularity == 1000
    assert block.lat_offset == 0
    assert block.lon_offset == 0


def test_info_fields_track_presence():
    info = osmformat.Info()
    assert info.version == -1
    assert not info.HasField("version")
    assert not info.HasField("user_sid")
    info.uid = 5
    assert info.HasField("uid")


def test_refs_are_packed_zigzag():
    way = osmformat.Way(id=1)
    way.refs.extend([1, -1])
    # id: field 1 varint; refs: field 8 length-delimited, zigzag 1 -> 2, -1 -> 1
    assert way.SerializeToString() == b"\x08\x01\x42\x02\x02\x01"


def test_relation_member_types():
    assert osmformat.MEMBER_TYPES == {0: "node", 1: "way", 2: "relation"}
    relation = osmformat.Relation(id=1)
    relation.types.extend([0, 1, 2])
    assert list(relation.types) == [0, 1, 2]


def test_blob_header_parses_back():
    header = osmformat.BlobHeader(type="OSMData", datasize=42)
    parsed = osmformat.BlobHeader.FromString(header.SerializeToString())
    assert parsed.type == "OSMData"
    assert parsed.datasize == 42


def test_stub_declares_every_message():
    assert set(STUB_SLOTS) == set(osmformat._SCHEMA)


@pytest.mark.parametrize("name", sorted(osmformat._SCHEMA))
def test_stub_fields_match_descriptor(name):
    message_class = getattr(osmformat, name)
    assert STUB_SLOTS[name] == [f.name for f in message_class.DESCRIPTOR.fields]


def test_stub_member_type_values():
    enum = osmformat.Relation.DESCRIPTOR.enum_types_by_name["MemberType"]
    assert {v.name: v.number for v in enum.values} == {"NODE": 0, "WAY": 1, "RELATION": 2}
    assert osmformat.Relation.NODE == 0
    assert osmformat.Relation.RELATION == 2
