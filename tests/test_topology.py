"""Tests for TopoJSON decoding and the HTTP geometry source."""

import asyncio
import json

import httpx
import pytest

from wandermap.config import MapConfig
from wandermap.topology import (
    GeometryLoadError,
    GeometrySource,
    decode_arcs,
    decode_countries,
    read_topology,
    stitch_ring,
)

URL = "https://atlas.test/countries-110m.json"


def _source(handler, **kwargs) -> GeometrySource:
    return GeometrySource(URL, transport=httpx.MockTransport(handler), **kwargs)


class TestDecode:
    def test_quantized_arcs(self, topology):
        arcs = decode_arcs(topology)
        assert arcs[0] == [(130, 30), (140, 30), (140, 40), (130, 40), (130, 30)]

    def test_transform_applied(self):
        topo = {
            "transform": {"scale": [0.5, 2.0], "translate": [-180, -90]},
            "arcs": [[[2, 1], [2, 1]]],
        }
        assert decode_arcs(topo) == [[(-179.0, -88.0), (-178.0, -86.0)]]

    def test_unquantized_arcs(self):
        assert decode_arcs({"arcs": [[[1.5, 2.5], [3, 4]]]}) == [[(1.5, 2.5), (3.0, 4.0)]]

    def test_reversed_arc(self, geometries):
        """France is stitched from arc 1 and arc 2 walked backwards."""
        france = next(g for g in geometries if g.id == "250")
        assert france.rings == (((0, 40), (10, 40), (10, 50), (0, 50), (0, 40)),)

    def test_short_ring_padded(self):
        ring = stitch_ring([0], [[(0.0, 0.0), (1.0, 1.0)]])
        assert len(ring) == 3
        assert ring[-1] == ring[0]

    def test_ids_normalized(self, geometries):
        assert [g.id for g in geometries] == ["392", "250", "010", "999"]

    def test_null_geometry_has_no_rings(self, geometries):
        nowhere = next(g for g in geometries if g.id == "999")
        assert nowhere.rings == ()
        assert nowhere.display_name == "Nowhere"

    def test_missing_id_uses_name(self):
        topo = {
            "arcs": [],
            "objects": {"countries": {"geometries": [{"type": None, "properties": {"name": "Kosovo"}}]}},
        }
        assert decode_countries(topo)[0].id == "Kosovo"

    def test_excluded(self, topology):
        ids = [g.id for g in decode_countries(topology, excluded=frozenset({"010"}))]
        assert "010" not in ids

    def test_missing_object(self, topology):
        with pytest.raises(GeometryLoadError):
            decode_countries(topology, object_name="land")

    @pytest.mark.parametrize(
        "geometry",
        ["not-a-geometry", {"type": "Polygon", "id": 1, "arcs": [], "properties": ["x"]}],
    )
    def test_non_object_entries(self, geometry):
        """Entries that are not JSON objects fail as one load error."""
        topo = {"arcs": [], "objects": {"countries": {"geometries": [geometry]}}}
        with pytest.raises(GeometryLoadError):
            decode_countries(topo)

    def test_bad_arc_index(self):
        topo = {
            "arcs": [],
            "objects": {"countries": {"geometries": [{"type": "Polygon", "id": 1, "arcs": [[5]]}]}},
        }
        with pytest.raises(GeometryLoadError):
            decode_countries(topo)

    def test_read_topology(self, tmp_path, topology):
        path = tmp_path / "atlas.json"
        path.write_text(json.dumps(topology), encoding="utf-8")
        assert read_topology(path) == topology

    def test_read_topology_missing_file(self, tmp_path):
        with pytest.raises(GeometryLoadError):
            read_topology(tmp_path / "nope.json")


class TestGeometrySource:
    def test_fetch(self, topology):
        seen = []

        def handler(request):
            seen.append(str(request.url))
            return httpx.Response(200, json=topology)

        countries = _source(handler, excluded=frozenset({"010"})).fetch()
        assert seen == [URL]
        assert [c.id for c in countries] == ["392", "250", "999"]

    def test_http_error_status(self):
        source = _source(lambda request: httpx.Response(500, text="oops"))
        with pytest.raises(GeometryLoadError):
            source.fetch()

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(GeometryLoadError):
            _source(handler).fetch()

    def test_invalid_json(self):
        source = _source(lambda request: httpx.Response(200, text="<html>not json</html>"))
        with pytest.raises(GeometryLoadError):
            source.fetch()

    def test_wrong_document(self):
        source = _source(lambda request: httpx.Response(200, json=["not", "a", "topology"]))
        with pytest.raises(GeometryLoadError):
            source.fetch()

    def test_fetch_async(self, topology):
        source = _source(lambda request: httpx.Response(200, json=topology))
        countries = asyncio.run(source.fetch_async())
        assert len(countries) == 4

    def test_fetch_async_error(self):
        source = _source(lambda request: httpx.Response(404))
        with pytest.raises(GeometryLoadError):
            asyncio.run(source.fetch_async())

    def test_from_config(self):
        config = MapConfig(topology_url=URL, topology_object="land", timeout_s=3.0)
        source = GeometrySource.from_config(config)
        assert (source.url, source.object_name, source.timeout) == (URL, "land", 3.0)
        assert source.excluded == frozenset({"010"})
