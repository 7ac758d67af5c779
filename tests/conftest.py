import matplotlib

matplotlib.use("Agg")

import pytest  # noqa: E402

from wandermap.models import ProjectionParams  # noqa: E402
from wandermap.topology import decode_countries  # noqa: E402

# Quantized with scale 1 / translate 0, so decoded points are whole degrees.
#   arc 0: Japan square 130..140 E, 30..40 N
#   arcs 1, 2: France square 0..10 E, 40..50 N; arc 2 is used reversed
#   arc 3: a strip near the pole that crosses the antimeridian after rotation
TOPOLOGY = {
    "type": "Topology",
    "transform": {"scale": [1, 1], "translate": [0, 0]},
    "arcs": [
        [[130, 30], [10, 0], [0, 10], [-10, 0], [0, -10]],
        [[0, 40], [10, 0], [0, 10]],
        [[0, 40], [0, 10], [10, 0]],
        [[-50, -80], [100, 0], [0, 10], [-100, 0], [0, -10]],
    ],
    "objects": {
        "countries": {
            "type": "GeometryCollection",
            "geometries": [
                {"type": "Polygon", "id": 392, "arcs": [[0]], "properties": {"name": "Japan"}},
                {
                    "type": "MultiPolygon",
                    "id": "250",
                    "arcs": [[[1, -3]]],
                    "properties": {"name": "France"},
                },
                {"type": "Polygon", "id": 10, "arcs": [[3]], "properties": {"name": "Antarctica"}},
                {"type": None, "id": "999", "properties": {"name": "Nowhere"}},
            ],
        }
    },
}

POLAR_STRIP = (
    (-50.0, -80.0), (-25.0, -80.0), (0.0, -80.0), (25.0, -80.0), (50.0, -80.0),
    (50.0, -70.0), (25.0, -70.0), (0.0, -70.0), (-25.0, -70.0), (-50.0, -70.0),
    (-50.0, -80.0),
)


@pytest.fixture
def topology():
    return TOPOLOGY


@pytest.fixture
def geometries():
    return decode_countries(TOPOLOGY)


@pytest.fixture
def params():
    return ProjectionParams()


@pytest.fixture
def polar_strip():
    return POLAR_STRIP
