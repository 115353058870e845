"""Answer entity queries by scanning the whole PBF file.

There is no index and no cache: every call opens its own
:class:`~osmrest.pbf.reader.ElementReader` and walks the file from start to
end, so two calls on the same file do two full scans. Nothing is shared
between calls, which keeps concurrent scans of the same file safe.
"""

import logging
import time

from osmrest.models.schemas import Node, Way
from osmrest.pbf.elements import DenseNodeBlock, RawNode, RawWay
from osmrest.pbf.reader import ElementReader
from osmrest.services.normalizer import normalize

logger = logging.getLogger(__name__)

# Raw element kinds that normalize into each entity kind
_SOURCES = {
    "nodes": (RawNode, DenseNodeBlock),
    "ways": (RawWay,),
}


def _scan(path, kind: str) -> list:
    sources = _SOURCES[kind]
    started = time.monotonic()

    entities = []
    for element in ElementReader(path):
        if not isinstance(element, sources):
            continue
        members = element if isinstance(element, DenseNodeBlock) else (element,)
        for member in members:
            entity = normalize(member)
            if entity is not None:
                entities.append(entity)

    logger.info(
        "Scanned %s: %d %s in %.3fs", path, len(entities), kind, time.monotonic() - started
    )
    return entities


def list_nodes(path) -> list[Node]:
    """Return every plain and dense node of the file, in file order.

    Raises:
        FileUnavailable: If the file cannot be opened.
        DecodeError: If the file is truncated or malformed.
    """
    return _scan(path, "nodes")


def list_ways(path) -> list[Way]:
    """Return every way of the file, in file order.

    Raises:
        FileUnavailable: If the file cannot be opened.
        DecodeError: If the file is truncated or malformed.
    """
    return _scan(path, "ways")


class OsmQueryService:
    """Query entry point bound to one source file.

    The path is fixed at construction; each query still re-reads the file.
    """

    def __init__(self, osm_file):
        self.osm_file = osm_file

    def list_nodes(self) -> list[Node]:
        return list_nodes(self.osm_file)

    def list_ways(self) -> list[Way]:
        return list_ways(self.osm_file)
