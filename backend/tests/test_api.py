"""Tests for the HTTP endpoints."""
import pytest
from fastapi.testclient import TestClient

from osmrest.main import create_app
from tests.pbfkit import BlockBuilder


@pytest.fixture
def client(sample_pbf):
    return TestClient(create_app(sample_pbf))


def _client_for(path):
    return TestClient(create_app(path))


def test_banner(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert resp.text == "OSM Rest Server"
    assert resp.headers["content-type"].startswith("text/plain")


class TestNodes:

    def test_node_fields(self, client):
        resp = client.get("/v1/nodes")
        assert resp.status_code == 200
        first = resp.json()[0]
        assert list(first) == ["id", "tags", "lat", "lon", "info"]
        assert first["id"] == 1
        assert first["tags"] == {"amenity": "cafe", "name": "Test Cafe"}
        assert first["lat"] == pytest.approx(51.5)
        assert first["info"] == {
            "version": 3,
            "milli_timestamp": 1_600_000_000_000,
            "changeset": 42,
            "uid": 7,
            "user": "alice",
            "visible": True,
            "deleted": False,
        }

    def test_dense_nodes_have_null_info(self, client):
        nodes = {n["id"]: n for n in client.get("/v1/nodes").json()}
        assert nodes[10]["info"] is None
        assert nodes[15]["tags"] == {"barrier": "gate"}

    def test_info_fields_may_be_null(self, client):
        nodes = {n["id"]: n for n in client.get("/v1/nodes").json()}
        info = nodes[2]["info"]
        assert info["version"] is None
        assert info["user"] is None
        assert info["visible"] is True

    def test_repeated_requests_identical(self, client):
        assert client.get("/v1/nodes").json() == client.get("/v1/nodes").json()

    def test_invalid_user_is_null(self, write_pbf):
        path = write_pbf(BlockBuilder().node(1, 0.0, 0.0, info={"uid": 3, "user": b"\xc3\x28"}))
        [node] = _client_for(path).get("/v1/nodes").json()
        assert node["info"]["user"] is None
        assert node["info"]["uid"] == 3


class TestWays:

    def test_way_fields(self, client):
        ways = client.get("/v1/ways").json()
        assert [list(w) for w in ways] == [["id", "tags", "info", "refs"]] * 2
        assert ways[0]["refs"] == [5, 3, 5, 9]
        assert ways[1]["refs"] == []
        assert ways[1]["info"] is not None

    def test_no_ways_is_empty_array(self, nodes_only_pbf):
        resp = _client_for(nodes_only_pbf).get("/v1/ways")
        assert resp.status_code == 200
        assert resp.json() == []


class TestErrors:

    @pytest.mark.parametrize("route", ["/v1/nodes", "/v1/ways"])
    def test_malformed_dense_group_fails_every_route(self, write_pbf, route):
        builder = BlockBuilder().way(1, [1, 2])
        dense = builder.block.primitivegroup.add().dense
        dense.id.extend([1, 1])
        dense.lat.extend([0])
        dense.lon.extend([0, 0])
        resp = _client_for(write_pbf(builder)).get(route)
        assert resp.status_code == 500
        assert "Dense node group" in resp.json()["detail"]

    def test_truncated_file(self, truncated_pbf):
        resp = _client_for(truncated_pbf).get("/v1/nodes")
        assert resp.status_code == 500
        assert "Truncated" in resp.json()["detail"]

    def test_service_survives_failure(self, truncated_pbf):
        client = _client_for(truncated_pbf)
        assert client.get("/v1/ways").status_code == 500
        assert client.get("/").status_code == 200
        assert client.get("/v1/ways").status_code == 500

    def test_missing_file(self, tmp_path):
        resp = _client_for(tmp_path / "gone.osm.pbf").get("/v1/nodes")
        assert resp.status_code == 503
        assert "gone.osm.pbf" in resp.json()["detail"]

    def test_unknown_route(self, client):
        assert client.get("/v1/relations").status_code == 404


def test_access_log(client, caplog):
    with caplog.at_level("INFO", logger="osmrest.access"):
        client.get("/v1/ways")
    assert "GET /v1/ways 200" in caplog.text
