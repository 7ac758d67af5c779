"""Geometry source: fetches a TopoJSON world atlas and decodes it into country rings.

TopoJSON stores each shared border once, as an "arc". Quantized documents
delta-encode arc points as integers; the ``transform`` block maps them back
to longitude/latitude. Polygons reference arcs by index, with ``~i``
(i.e. ``-i - 1``) meaning arc ``i`` traversed backwards.
"""

import json
import logging
from pathlib import Path
from typing import Any

import httpx

from wandermap.config import MapConfig
from wandermap.models import CountryGeometry, Ring

_LOGGER = logging.getLogger("wandermap.topology")

UNKNOWN_NAME = "Unknown Country"

Point = tuple[float, float]


class GeometryLoadError(Exception):
    """Topology could not be fetched or decoded."""


def decode_arcs(topology: dict[str, Any]) -> list[list[Point]]:
    """Return every arc as absolute (lon, lat) points."""
    transform = topology.get("transform")
    decoded: list[list[Point]] = []
    if not transform:
        for arc in topology["arcs"]:
            decoded.append([(float(p[0]), float(p[1])) for p in arc])
        return decoded

    sx, sy = transform["scale"]
    tx, ty = transform["translate"]
    for arc in topology["arcs"]:
        x = y = 0
        points: list[Point] = []
        for dx, dy, *_ in arc:
            x += dx
            y += dy
            points.append((x * sx + tx, y * sy + ty))
        decoded.append(points)
    return decoded


def stitch_ring(arc_indexes: list[int], arcs: list[list[Point]]) -> Ring:
    """Concatenate the referenced arcs into one closed ring.

    Consecutive arcs share their join point, so it is kept only once.
    """
    points: list[Point] = []
    for index in arc_indexes:
        arc = arcs[~index][::-1] if index < 0 else arcs[index]
        if points:
            points.pop()
        points.extend(arc)
    if points and len(points) < 4:
        points.append(points[0])
    return tuple(points)


def _normalize_id(raw_id: Any, name: str) -> str:
    if raw_id is None:
        return name
    if isinstance(raw_id, int):
        return f"{raw_id:03d}"
    return str(raw_id)


def _geometry_rings(geometry: dict[str, Any], arcs: list[list[Point]]) -> tuple[Ring, ...]:
    kind = geometry.get("type")
    if kind == "Polygon":
        polygons = [geometry["arcs"]]
    elif kind == "MultiPolygon":
        polygons = geometry["arcs"]
    else:
        return ()
    rings = (stitch_ring(ring, arcs) for polygon in polygons for ring in polygon)
    return tuple(r for r in rings if r)


def decode_countries(
    topology: dict[str, Any],
    object_name: str = "countries",
    excluded: frozenset[str] = frozenset(),
) -> tuple[CountryGeometry, ...]:
    """Decode one geometry collection of a topology into CountryGeometry records.

    Args:
        topology: Parsed TopoJSON document.
        object_name: Key under ``objects`` holding the country collection.
        excluded: Country ids to drop (e.g. Antarctica).

    Returns:
        Tuple of CountryGeometry in document order.

    Raises:
        GeometryLoadError: If the document does not have the expected structure.
    """
    try:
        collection = topology["objects"][object_name]
        arcs = decode_arcs(topology)
        countries: list[CountryGeometry] = []
        for geometry in collection["geometries"]:
            props = geometry.get("properties") or {}
            name = props.get("name") or UNKNOWN_NAME
            country_id = _normalize_id(geometry.get("id"), name)
            if country_id in excluded:
                continue
            countries.append(
                CountryGeometry(
                    id=country_id,
                    display_name=name,
                    rings=_geometry_rings(geometry, arcs),
                )
            )
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as exc:
        raise GeometryLoadError(f"Malformed topology: {exc!r}") from exc
    return tuple(countries)


def read_topology(path: Path) -> dict[str, Any]:
    """Load a TopoJSON document from disk."""
    try:
        with path.open(encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        raise GeometryLoadError(f"Cannot read topology {path}: {exc}") from exc


class GeometrySource:
    """Remote TopoJSON country boundaries, decoded once per call.

    ``transport`` is handed to the httpx client; tests pass an
    ``httpx.MockTransport`` here.
    """

    def __init__(
        self,
        url: str,
        object_name: str = "countries",
        excluded: frozenset[str] = frozenset(),
        timeout: float = 10.0,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.object_name = object_name
        self.excluded = excluded
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_config(cls, config: MapConfig, **kwargs: Any) -> "GeometrySource":
        return cls(
            config.topology_url,
            object_name=config.topology_object,
            excluded=config.excluded_ids,
            timeout=config.timeout_s,
            **kwargs,
        )

    def _decode(self, payload: Any) -> tuple[CountryGeometry, ...]:
        if not isinstance(payload, dict):
            raise GeometryLoadError("Malformed topology: top level is not an object")
        countries = decode_countries(payload, self.object_name, self.excluded)
        _LOGGER.info("Loaded %d countries from %s", len(countries), self.url)
        return countries

    def fetch(self) -> tuple[CountryGeometry, ...]:
        """Download and decode the topology.

        Raises:
            GeometryLoadError: On transport error, non-2xx status, invalid JSON
                or unexpected document structure.
        """
        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                resp = client.get(self.url)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise GeometryLoadError(f"HTTP error: {exc}") from exc
        except ValueError as exc:
            raise GeometryLoadError(f"Invalid JSON from {self.url}") from exc
        return self._decode(payload)

    async def fetch_async(self) -> tuple[CountryGeometry, ...]:
        """Async variant of :meth:`fetch`. Suspends only on the network read."""
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.get(self.url)
                resp.raise_for_status()
                payload = resp.json()
        except httpx.HTTPError as exc:
            raise GeometryLoadError(f"HTTP error: {exc}") from exc
        except ValueError as exc:
            raise GeometryLoadError(f"Invalid JSON from {self.url}") from exc
        return self._decode(payload)
