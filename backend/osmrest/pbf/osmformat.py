"""Protobuf message classes for the OSM PBF exchange format.

The schema mirrors ``fileformat.proto`` (the container: ``BlobHeader`` and
``Blob``) and ``osmformat.proto`` (the content: ``HeaderBlock`` and
``PrimitiveBlock`` with its groups). Instead of shipping ``protoc`` output,
the file descriptor is assembled here from a compact table and registered in
a private descriptor pool, so the classes behave exactly like generated ones.
"""

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "OSMPBF"

_F = descriptor_pb2.FieldDescriptorProto

_SCALARS = {
    "bool": _F.TYPE_BOOL,
    "bytes": _F.TYPE_BYTES,
    "int32": _F.TYPE_INT32,
    "int64": _F.TYPE_INT64,
    "sint32": _F.TYPE_SINT32,
    "sint64": _F.TYPE_SINT64,
    "string": _F.TYPE_STRING,
    "uint32": _F.TYPE_UINT32,
}

OPTIONAL = "optional"
REPEATED = "repeated"
PACKED = "packed"

# Relation member types, as stored in Relation.types
MEMBER_TYPES = {0: "node", 1: "way", 2: "relation"}

_ENUMS = {
    "Relation": {"MemberType": {"NODE": 0, "WAY": 1, "RELATION": 2}},
}

# message -> (name, number, type[, label[, default]])
_SCHEMA = {
    "BlobHeader": (
        ("type", 1, "string"),
        ("indexdata", 2, "bytes"),
        ("datasize", 3, "int32"),
    ),
    "Blob": (
        ("raw", 1, "bytes"),
        ("raw_size", 2, "int32"),
        ("zlib_data", 3, "bytes"),
        ("lzma_data", 4, "bytes"),
        ("OBSOLETE_bzip2_data", 5, "bytes"),
        ("lz4_data", 6, "bytes"),
        ("zstd_data", 7, "bytes"),
    ),
    "HeaderBBox": (
        ("left", 1, "sint64"),
        ("right", 2, "sint64"),
        ("top", 3, "sint64"),
        ("bottom", 4, "sint64"),
    ),
    "HeaderBlock": (
        ("bbox", 1, "HeaderBBox"),
        ("required_features", 4, "string", REPEATED),
        ("optional_features", 5, "string", REPEATED),
        ("writingprogram", 16, "string"),
        ("source", 17, "string"),
        ("osmosis_replication_timestamp", 32, "int64"),
        ("osmosis_replication_sequence_number", 33, "int64"),
        ("osmosis_replication_base_url", 34, "string"),
    ),
    "StringTable": (
        ("s", 1, "bytes", REPEATED),
    ),
    "PrimitiveBlock": (
        ("stringtable", 1, "StringTable"),
        ("primitivegroup", 2, "PrimitiveGroup", REPEATED),
        ("granularity", 17, "int32", OPTIONAL, "100"),
        ("date_granularity", 18, "int32", OPTIONAL, "1000"),
        ("lat_offset", 19, "int64", OPTIONAL, "0"),
        ("lon_offset", 20, "int64", OPTIONAL, "0"),
    ),
    "PrimitiveGroup": (
        ("nodes", 1, "Node", REPEATED),
        ("dense", 2, "DenseNodes"),
        ("ways", 3, "Way", REPEATED),
        ("relations", 4, "Relation", REPEATED),
        ("changesets", 5, "ChangeSet", REPEATED),
    ),
    "Info": (
        ("version", 1, "int32", OPTIONAL, "-1"),
        ("timestamp", 2, "int64"),
        ("changeset", 3, "int64"),
        ("uid", 4, "int32"),
        ("user_sid", 5, "uint32"),
        ("visible", 6, "bool"),
    ),
    "DenseInfo": (
        ("version", 1, "int32", PACKED),
        ("timestamp", 2, "sint64", PACKED),
        ("changeset", 3, "sint64", PACKED),
        ("uid", 4, "sint32", PACKED),
        ("user_sid", 5, "sint32", PACKED),
        ("visible", 6, "bool", PACKED),
    ),
    "ChangeSet": (
        ("id", 1, "int64"),
    ),
    "Node": (
        ("id", 1, "sint64"),
        ("keys", 2, "uint32", PACKED),
        ("vals", 3, "uint32", PACKED),
        ("info", 4, "Info"),
        ("lat", 8, "sint64"),
        ("lon", 9, "sint64"),
    ),
    "DenseNodes": (
        ("id", 1, "sint64", PACKED),
        ("denseinfo", 5, "DenseInfo"),
        ("lat", 8, "sint64", PACKED),
        ("lon", 9, "sint64", PACKED),
        ("keys_vals", 10, "int32", PACKED),
    ),
    "Way": (
        ("id", 1, "int64"),
        ("keys", 2, "uint32", PACKED),
        ("vals", 3, "uint32", PACKED),
        ("info", 4, "Info"),
        ("refs", 8, "sint64", PACKED),
    ),
    "Relation": (
        ("id", 1, "int64"),
        ("keys", 2, "uint32", PACKED),
        ("vals", 3, "uint32", PACKED),
        ("info", 4, "Info"),
        ("roles_sid", 8, "int32", PACKED),
        ("memids", 9, "sint64", PACKED),
        ("types", 10, "Relation.MemberType", PACKED),
    ),
}


def _add_field(message, name, number, type_name, label=OPTIONAL, default=None):
    field = message.field.add(name=name, number=number)
    field.label = _F.LABEL_OPTIONAL if label == OPTIONAL else _F.LABEL_REPEATED
    if label == PACKED:
        field.options.packed = True

    if type_name in _SCALARS:
        field.type = _SCALARS[type_name]
    elif "." in type_name:
        field.type = _F.TYPE_ENUM
        field.type_name = f".{PACKAGE}.{type_name}"
    else:
        field.type = _F.TYPE_MESSAGE
        field.type_name = f".{PACKAGE}.{type_name}"

    if default is not None:
        field.default_value = default


def _build_file() -> descriptor_pb2.FileDescriptorProto:
    proto = descriptor_pb2.FileDescriptorProto(
        name="osmrest/osmpbf.proto", package=PACKAGE, syntax="proto2"
    )
    for message_name, fields in _SCHEMA.items():
        message = proto.message_type.add(name=message_name)
        for enum_name, values in _ENUMS.get(message_name, {}).items():
            enum = message.enum_type.add(name=enum_name)
            for value_name, number in values.items():
                enum.value.add(name=value_name, number=number)
        for spec in fields:
            _add_field(message, *spec)
    return proto


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_build_file().SerializeToString())


def _message_class(name: str):
    return message_factory.GetMessageClass(
        _pool.FindMessageTypeByName(f"{PACKAGE}.{name}")
    )


BlobHeader = _message_class("BlobHeader")
Blob = _message_class("Blob")
HeaderBBox = _message_class("HeaderBBox")
HeaderBlock = _message_class("HeaderBlock")
StringTable = _message_class("StringTable")
PrimitiveBlock = _message_class("PrimitiveBlock")
PrimitiveGroup = _message_class("PrimitiveGroup")
Info = _message_class("Info")
DenseInfo = _message_class("DenseInfo")
ChangeSet = _message_class("ChangeSet")
Node = _message_class("Node")
DenseNodes = _message_class("DenseNodes")
Way = _message_class("Way")
Relation = _message_class("Relation")
