"""Stream the elements of an OSM PBF file.

A PBF file is a sequence of blocks, each laid out as:

* a 4-byte big-endian length,
* a ``BlobHeader`` of that length naming the block type and the blob size,
* a ``Blob`` holding the (usually zlib-compressed) block payload.

``OSMHeader`` blocks declare the features a reader must support and
``OSMData`` blocks carry a ``PrimitiveBlock`` of nodes, dense nodes, ways,
relations and changesets. Blocks of any other type are skipped.
"""

import logging
import lzma
import os
import struct
import zlib
from contextlib import closing
from itertools import accumulate
from typing import Iterator, NamedTuple

from google.protobuf import message as protobuf_message

from osmrest.exceptions import DecodeError, FileUnavailable
from osmrest.pbf import osmformat
from osmrest.pbf.elements import (
    DenseNodeBlock,
    RawDenseNode,
    RawInfo,
    RawMember,
    RawNode,
    RawOther,
    RawRelation,
    RawWay,
)

logger = logging.getLogger(__name__)

# Size limits from the format definition
MAX_BLOB_HEADER_SIZE = 64 * 1024
MAX_BLOB_SIZE = 32 * 1024 * 1024

SUPPORTED_FEATURES = frozenset({"OsmSchema-V0.6", "DenseNodes", "HistoricalInformation"})

_LENGTH_PREFIX = struct.Struct(">I")


class FileBlock(NamedTuple):
    """One decompressed block of the file."""

    type: str
    offset: int
    data: bytes


def _parse(message_class, data: bytes, offset: int):
    message = message_class()
    try:
        message.ParseFromString(data)
    except protobuf_message.DecodeError as e:
        raise DecodeError(
            f"Malformed {message_class.DESCRIPTOR.name} at offset {offset}: {e}"
        ) from e
    return message


def _read_exact(f, size: int, what: str, offset: int) -> bytes:
    data = f.read(size)
    if len(data) != size:
        raise DecodeError(
            f"Truncated {what} at offset {offset}: expected {size} bytes, got {len(data)}"
        )
    return data


def _decompress(blob, offset: int) -> bytes:
    """Return the uncompressed payload of a ``Blob`` message.

    Inflation stops one byte past ``MAX_BLOB_SIZE``, so an oversized payload
    is rejected without being expanded in full.
    """
    if blob.HasField("raw_size") and not 0 <= blob.raw_size <= MAX_BLOB_SIZE:
        raise DecodeError(
            f"Blob at offset {offset} announces {blob.raw_size} bytes, limit is {MAX_BLOB_SIZE}"
        )

    try:
        if blob.HasField("raw"):
            data = blob.raw
            complete = True
        elif blob.HasField("zlib_data"):
            decompressor = zlib.decompressobj()
            data = decompressor.decompress(blob.zlib_data, MAX_BLOB_SIZE + 1)
            complete = decompressor.eof
        elif blob.HasField("lzma_data"):
            decompressor = lzma.LZMADecompressor()
            data = decompressor.decompress(blob.lzma_data, max_length=MAX_BLOB_SIZE + 1)
            complete = decompressor.eof
        else:
            raise DecodeError(f"Unsupported blob compression at offset {offset}")
    except (zlib.error, lzma.LZMAError) as e:
        raise DecodeError(f"Corrupt compressed blob at offset {offset}: {e}") from e

    if len(data) > MAX_BLOB_SIZE:
        raise DecodeError(
            f"Blob at offset {offset} inflates past {MAX_BLOB_SIZE} bytes"
        )
    if not complete:
        raise DecodeError(f"Truncated compressed blob at offset {offset}")
    if blob.HasField("raw_size") and len(data) != blob.raw_size:
        raise DecodeError(
            f"Blob at offset {offset} inflated to {len(data)} bytes, "
            f"header announced {blob.raw_size}"
        )
    return data


class BlockDecoder:
    """Decode the primitives of one ``PrimitiveBlock``.

    Holds the block-wide string table, coordinate granularity and offsets
    that every element of the block is expressed against.
    """

    def __init__(self, block):
        self.strings = list(block.stringtable.s)
        self.granularity = block.granularity
        self.lat_offset = block.lat_offset
        self.lon_offset = block.lon_offset
        self.date_granularity = block.date_granularity

    def string(self, index: int) -> bytes | None:
        if 0 <= index < len(self.strings):
            return self.strings[index]
        return None

    def lat(self, raw: int) -> float:
        return 1e-9 * (self.lat_offset + self.granularity * raw)

    def lon(self, raw: int) -> float:
        return 1e-9 * (self.lon_offset + self.granularity * raw)

    def tags(self, element) -> list:
        if len(element.keys) != len(element.vals):
            raise DecodeError(
                f"Element {element.id} has {len(element.keys)} tag keys "
                f"but {len(element.vals)} values"
            )
        return [(self.string(k), self.string(v)) for k, v in zip(element.keys, element.vals)]

    def info(self, element) -> RawInfo:
        if not element.HasField("info"):
            return RawInfo()
        info = element.info
        return RawInfo(
            version=info.version if info.HasField("version") else None,
            milli_timestamp=(
                info.timestamp * self.date_granularity if info.HasField("timestamp") else None
            ),
            changeset=info.changeset if info.HasField("changeset") else None,
            uid=info.uid if info.HasField("uid") else None,
            user=self.string(info.user_sid) if info.HasField("user_sid") else None,
            visible=info.visible if info.HasField("visible") else None,
        )

    def node(self, node) -> RawNode:
        return RawNode(
            id=node.id,
            lat=self.lat(node.lat),
            lon=self.lon(node.lon),
            tags=self.tags(node),
            info=self.info(node),
        )

    @staticmethod
    def check_dense(dense) -> None:
        """Validate the layout of a ``DenseNodes`` group without expanding it.

        Runs when the group is reached in the stream, so a malformed group
        fails the scan whether or not its nodes are ever iterated.
        """
        if not len(dense.id) == len(dense.lat) == len(dense.lon):
            raise DecodeError(
                f"Dense node group has {len(dense.id)} ids, {len(dense.lat)} "
                f"latitudes and {len(dense.lon)} longitudes"
            )

        keys_vals = dense.keys_vals
        if not keys_vals:
            return
        cursor = 0
        for index in range(len(dense.id)):
            while cursor < len(keys_vals) and keys_vals[cursor] != 0:
                if cursor + 1 >= len(keys_vals):
                    raise DecodeError(
                        f"Dense node #{index} of its group has a tag key without a value"
                    )
                cursor += 2
            cursor += 1

    def dense_nodes(self, dense) -> Iterator[RawDenseNode]:
        """Undo the delta coding of a ``DenseNodes`` group, one node at a time.

        ``keys_vals`` holds, for every node, key/value string indices
        followed by a 0 terminator. It is empty when no node has tags.
        The group is expected to have passed :meth:`check_dense`.
        """
        keys_vals = dense.keys_vals
        cursor = 0
        node_id = lat = lon = 0
        for delta_id, delta_lat, delta_lon in zip(dense.id, dense.lat, dense.lon):
            node_id += delta_id
            lat += delta_lat
            lon += delta_lon

            tags = []
            if keys_vals:
                while cursor < len(keys_vals) and keys_vals[cursor] != 0:
                    tags.append((self.string(keys_vals[cursor]), self.string(keys_vals[cursor + 1])))
                    cursor += 2
                cursor += 1

            yield RawDenseNode(id=node_id, lat=self.lat(lat), lon=self.lon(lon), tags=tags)

    def way(self, way) -> RawWay:
        return RawWay(
            id=way.id,
            tags=self.tags(way),
            refs=list(accumulate(way.refs)),
            info=self.info(way),
        )

    def relation(self, relation) -> RawRelation:
        if not len(relation.roles_sid) == len(relation.memids) == len(relation.types):
            raise DecodeError(f"Relation {relation.id} has mismatched member arrays")
        members = [
            RawMember(
                type=osmformat.MEMBER_TYPES.get(member_type, "unknown"),
                ref=ref,
                role=self.string(role),
            )
            for role, ref, member_type in zip(
                relation.roles_sid, accumulate(relation.memids), relation.types
            )
        ]
        return RawRelation(
            id=relation.id,
            tags=self.tags(relation),
            members=members,
            info=self.info(relation),
        )

    def elements(self, block) -> Iterator:
        for group in block.primitivegroup:
            for node in group.nodes:
                yield self.node(node)
            if group.HasField("dense"):
                self.check_dense(group.dense)
                yield DenseNodeBlock(group.dense, self)
            for way in group.ways:
                yield self.way(way)
            for relation in group.relations:
                yield self.relation(relation)
            for changeset in group.changesets:
                yield RawOther(kind="changeset", id=changeset.id)


class ElementReader:
    """Lazy, forward-only reader over the elements of a PBF file.

    Every iteration opens the file anew and walks it from the start::

        for element in ElementReader("extract.osm.pbf"):
            ...

    Raises:
        FileUnavailable: If the file cannot be opened.
        DecodeError: If the file is truncated or malformed. Elements already
            yielded stay valid, but the scan cannot be resumed.
    """

    def __init__(self, path):
        self.path = os.fspath(path)

    def __iter__(self) -> Iterator:
        for block in self.blocks():
            if block.type == "OSMHeader":
                self._check_header(_parse(osmformat.HeaderBlock, block.data, block.offset))
            elif block.type == "OSMData":
                primitive_block = _parse(osmformat.PrimitiveBlock, block.data, block.offset)
                yield from BlockDecoder(primitive_block).elements(primitive_block)
            else:
                logger.debug("Skipping %r block at offset %d", block.type, block.offset)

    def blocks(self) -> Iterator[FileBlock]:
        """Yield every block of the file with its payload decompressed."""
        try:
            f = open(self.path, "rb")
        except OSError as e:
            raise FileUnavailable(f"Cannot open {self.path}: {e.strerror or e}") from e

        with f:
            offset = 0
            while True:
                prefix = f.read(_LENGTH_PREFIX.size)
                if not prefix:
                    return
                if len(prefix) != _LENGTH_PREFIX.size:
                    raise DecodeError(f"Truncated block length at offset {offset}")
                (header_size,) = _LENGTH_PREFIX.unpack(prefix)
                if header_size > MAX_BLOB_HEADER_SIZE:
                    raise DecodeError(
                        f"BlobHeader at offset {offset} is {header_size} bytes, "
                        f"limit is {MAX_BLOB_HEADER_SIZE}"
                    )

                header = _parse(
                    osmformat.BlobHeader,
                    _read_exact(f, header_size, "BlobHeader", offset),
                    offset,
                )
                if not header.HasField("type") or not header.HasField("datasize"):
                    raise DecodeError(f"BlobHeader at offset {offset} lacks type or datasize")
                if not 0 <= header.datasize <= MAX_BLOB_SIZE:
                    raise DecodeError(
                        f"Blob at offset {offset} is {header.datasize} bytes, "
                        f"limit is {MAX_BLOB_SIZE}"
                    )

                blob = _parse(
                    osmformat.Blob,
                    _read_exact(f, header.datasize, "Blob", offset),
                    offset,
                )
                yield FileBlock(type=header.type, offset=offset, data=_decompress(blob, offset))
                offset += _LENGTH_PREFIX.size + header_size + header.datasize

    def header(self):
        """Return the file's ``HeaderBlock``, or ``None`` if it does not start with one."""
        with closing(self.blocks()) as blocks:
            for block in blocks:
                if block.type == "OSMHeader":
                    return _parse(osmformat.HeaderBlock, block.data, block.offset)
                return None
        return None

    @staticmethod
    def _check_header(header) -> None:
        missing = [f for f in header.required_features if f not in SUPPORTED_FEATURES]
        if missing:
            raise DecodeError(f"Unsupported required features: {', '.join(missing)}")
