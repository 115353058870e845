"""Turn raw PBF elements into the entities served by the API.

Every function here is pure. Strings come out of the PBF string table as
bytes; a string that is not valid UTF-8 is dropped on its own, never taking
the rest of its entity down with it.
"""

from osmrest.models.schemas import Info, Node, Way
from osmrest.pbf.elements import RawDenseNode, RawInfo, RawNode, RawWay


def decode_text(raw: bytes | None) -> str | None:
    """Decode a string-table entry, or return ``None`` if it is not text."""
    if raw is None:
        return None
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        return None


def make_tags(raw_tags) -> dict[str, str]:
    """Build a tag mapping, skipping pairs whose key or value does not decode.

    A key repeated within one element keeps its last value.
    """
    tags = {}
    for raw_key, raw_value in raw_tags:
        key, value = decode_text(raw_key), decode_text(raw_value)
        if key is not None and value is not None:
            tags[key] = value
    return tags


def make_info(info: RawInfo) -> Info:
    return Info(
        version=info.version,
        milli_timestamp=info.milli_timestamp,
        changeset=info.changeset,
        uid=info.uid,
        user=decode_text(info.user),
        visible=info.visible if info.visible is not None else True,
        deleted=info.visible is False,
    )


def make_node(node: RawNode) -> Node:
    return Node(
        id=node.id,
        tags=make_tags(node.tags),
        lat=node.lat,
        lon=node.lon,
        info=make_info(node.info),
    )


def make_node_from_dense_node(node: RawDenseNode) -> Node:
    # Dense groups keep metadata in parallel arrays that are not decoded per node
    return Node(
        id=node.id,
        tags=make_tags(node.tags),
        lat=node.lat,
        lon=node.lon,
        info=None,
    )


def make_way(way: RawWay) -> Way:
    return Way(
        id=way.id,
        tags=make_tags(way.tags),
        info=make_info(way.info),
        refs=list(way.refs),
    )


def normalize(element) -> Node | Way | None:
    """Map one raw element to its entity.

    Relations, changesets and any other kind the API does not serve map to
    ``None``. A :class:`~osmrest.pbf.elements.DenseNodeBlock` is a container,
    not an element: normalize its members instead.
    """
    if isinstance(element, RawNode):
        return make_node(element)
    if isinstance(element, RawDenseNode):
        return make_node_from_dense_node(element)
    if isinstance(element, RawWay):
        return make_way(element)
    return None
