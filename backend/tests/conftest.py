"""Pytest fixtures for osmrest tests."""
import pytest

from tests.pbfkit import BlockBuilder, header_block, pack_block


@pytest.fixture
def write_pbf(tmp_path):
    """Write a PBF file from data blocks (bytes or BlockBuilder)."""
    def write(*blocks, name="test.osm.pbf", header=True, compression="zlib"):
        content = b""
        if header:
            content += pack_block("OSMHeader", header_block(), compression)
        for data in blocks:
            if isinstance(data, BlockBuilder):
                data = data.build()
            content += pack_block("OSMData", data, compression)
        path = tmp_path / name
        path.write_bytes(content)
        return path
    return write


@pytest.fixture
def sample_pbf(write_pbf):
    """Plain nodes, a dense group, ways, a relation and a changeset."""
    first = (
        BlockBuilder()
        .node(1, 51.5, -0.1, tags={"amenity": "cafe", "name": "Test Cafe"},
              info={"version": 3, "timestamp": 1600000000, "changeset": 42,
                    "uid": 7, "user": "alice", "visible": True})
        .dense([
            (10, 51.51, -0.11, {"highway": "crossing"}),
            (11, 51.52, -0.12, {}),
            (15, 51.53, -0.13, {"barrier": "gate"}),
        ])
        .node(2, 51.54, -0.14)
    )
    second = (
        BlockBuilder()
        .way(100, [5, 3, 5, 9], tags={"highway": "primary"},
             info={"version": 1, "timestamp": 1500000000, "uid": 9, "user": "bob"})
        .way(101, [], tags={"building": "yes"})
        .relation(200, [(1, 100, "outer"), (0, 1, "label")], tags={"type": "multipolygon"})
        .changeset(300)
    )
    return write_pbf(first, second, name="sample.osm.pbf")


@pytest.fixture
def nodes_only_pbf(write_pbf):
    """A file holding nodes but no ways."""
    return write_pbf(
        BlockBuilder().node(1, 10.0, 20.0).dense([(2, 10.5, 20.5, {})]),
        name="nodes_only.osm.pbf",
    )


@pytest.fixture
def truncated_pbf(sample_pbf, tmp_path):
    """The sample file cut off in the middle of its last block."""
    content = sample_pbf.read_bytes()
    path = tmp_path / "truncated.osm.pbf"
    path.write_bytes(content[:-10])
    return path
