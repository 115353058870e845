"""Raw elements yielded by :class:`~osmrest.pbf.reader.ElementReader`.

Coordinates, timestamps and delta-coded ids are already decoded here.
Strings are left as the raw bytes found in the block's string table; turning
them into text is up to the consumer. A string reference that points outside
the string table is reported as ``None``.
"""

from dataclasses import dataclass, field
from typing import Iterator

RawTags = list[tuple[bytes | None, bytes | None]]


@dataclass(frozen=True)
class RawInfo:
    """Revision metadata exactly as carried by the source element."""

    version: int | None = None
    milli_timestamp: int | None = None
    changeset: int | None = None
    uid: int | None = None
    user: bytes | None = None
    visible: bool | None = None


@dataclass(frozen=True)
class RawNode:
    id: int
    lat: float
    lon: float
    tags: RawTags = field(default_factory=list)
    info: RawInfo = field(default_factory=RawInfo)


@dataclass(frozen=True)
class RawDenseNode:
    id: int
    lat: float
    lon: float
    tags: RawTags = field(default_factory=list)


@dataclass(frozen=True)
class RawWay:
    id: int
    tags: RawTags = field(default_factory=list)
    refs: list[int] = field(default_factory=list)
    info: RawInfo = field(default_factory=RawInfo)


@dataclass(frozen=True)
class RawMember:
    type: str
    ref: int
    role: bytes | None


@dataclass(frozen=True)
class RawRelation:
    id: int
    tags: RawTags = field(default_factory=list)
    members: list[RawMember] = field(default_factory=list)
    info: RawInfo = field(default_factory=RawInfo)


@dataclass(frozen=True)
class RawOther:
    """A block-level record the service has no entity for (e.g. a changeset)."""

    kind: str
    id: int


class DenseNodeBlock:
    """A dense node group, expanded lazily into :class:`RawDenseNode` records.

    Iterating twice decodes the group twice; nothing is cached.
    """

    def __init__(self, dense, decoder):
        self._dense = dense
        self._decoder = decoder

    def __len__(self) -> int:
        return len(self._dense.id)

    def __iter__(self) -> Iterator[RawDenseNode]:
        return self._decoder.dense_nodes(self._dense)

    def __repr__(self) -> str:
        return f"DenseNodeBlock(nodes={len(self)})"
