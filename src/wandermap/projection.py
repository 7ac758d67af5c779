"""Projection engine: Mercator forward projection and the viewport fit transform.

Coordinate system:
  Intrinsic space: pixels of a Mercator map centred on (center_lon, center_lat)
  at (viewport_width / 2, viewport_height / 2), y growing downwards.
  Fitted space: intrinsic coordinates after ``scale`` then ``translate``, so
  that every drawn country fits the viewport.
"""

import logging
import math
from collections.abc import Iterable, Sequence

import numpy as np

from wandermap.models import (
    CountryGeometry,
    FitTransform,
    ProjectedCountry,
    ProjectedMap,
    ProjectionParams,
)

_LOGGER = logging.getLogger("wandermap.projection")

# Web-Mercator latitude limit; keeps ln(tan(...)) finite near the poles.
_MAX_LAT = 85.0511287798
_IDENTITY = FitTransform(scale=1.0, translate_x=0.0, translate_y=0.0)

Bounds = tuple[float, float, float, float]


def _rotate_lon(lon: np.ndarray, rotation: float) -> np.ndarray:
    """Shift longitudes by ``rotation`` and wrap into [-180, 180)."""
    return (lon + rotation + 180.0) % 360.0 - 180.0


def _mercator_y(lat_deg: np.ndarray) -> np.ndarray:
    phi = np.radians(np.clip(lat_deg, -_MAX_LAT, _MAX_LAT))
    return np.log(np.tan(np.pi / 4 + phi / 2))


def _forward(lam_deg: np.ndarray, lat_deg: np.ndarray, params: ProjectionParams) -> np.ndarray:
    k = params.base_scale
    cx = math.radians(params.center_lon)
    cy = float(_mercator_y(np.asarray(params.center_lat)))
    x = params.viewport_width / 2 + k * (np.radians(lam_deg) - cx)
    y = params.viewport_height / 2 - k * (_mercator_y(lat_deg) - cy)
    return np.column_stack([x, y])


def project(lon: float, lat: float, params: ProjectionParams) -> tuple[float, float]:
    """Project one (lon, lat) pair in degrees to intrinsic pixel coordinates."""
    lam = _rotate_lon(np.asarray([lon], dtype=float), params.rotation)
    xy = _forward(lam, np.asarray([lat], dtype=float), params)
    return float(xy[0, 0]), float(xy[0, 1])


def project_ring(ring: Sequence[tuple[float, float]], params: ProjectionParams) -> list[np.ndarray]:
    """Project a closed ring, splitting it where it crosses the wrapped antimeridian.

    Each returned piece is an (n, 2) array in intrinsic pixels. A ring that
    never crosses the cut comes back as a single piece. Rings with fewer than
    three points, and pieces that collapse below three points, are dropped.
    """
    if len(ring) < 3:
        return []
    pts = np.asarray(ring, dtype=float)
    lam = _rotate_lon(pts[:, 0], params.rotation)
    xy = _forward(lam, pts[:, 1], params)

    cuts = np.nonzero(np.abs(np.diff(lam)) > 180.0)[0] + 1
    pieces = np.split(xy, cuts)
    if len(pieces) > 1:
        # The ring is closed, so its tail and head lie on the same side of the cut.
        pieces = [np.vstack([pieces[-1], pieces[0]]), *pieces[1:-1]]
    return [p for p in pieces if len(p) >= 3]


def bounds(pieces: Iterable[np.ndarray]) -> Bounds | None:
    """Axis-aligned bounding box (x0, y0, x1, y1) of projected pieces."""
    arrays = [p for p in pieces if len(p)]
    if not arrays:
        return None
    stacked = np.vstack(arrays)
    x0, y0 = stacked.min(axis=0)
    x1, y1 = stacked.max(axis=0)
    return float(x0), float(y0), float(x1), float(y1)


def fit_to_viewport(
    box: Bounds | None, width: float, height: float, margin: float = 0.9
) -> FitTransform:
    """Uniform scale and translation that centres ``box`` in a width×height viewport.

    scale = margin * min(width / dx, height / dy). A missing or zero-area box
    yields the identity transform.
    """
    if box is None:
        return _IDENTITY
    x0, y0, x1, y1 = box
    dx, dy = x1 - x0, y1 - y0
    ratios = []
    if dx > 0:
        ratios.append(width / dx)
    if dy > 0:
        ratios.append(height / dy)
    if not ratios:
        return _IDENTITY
    scale = margin * min(ratios)
    return FitTransform(
        scale=scale,
        translate_x=width / 2 - scale * (x0 + x1) / 2,
        translate_y=height / 2 - scale * (y0 + y1) / 2,
    )


def apply_fit(piece: np.ndarray, fit: FitTransform) -> np.ndarray:
    return piece * fit.scale + np.array([fit.translate_x, fit.translate_y])


def _project_all(
    geometries: Iterable[CountryGeometry],
    params: ProjectionParams,
    excluded: frozenset[str],
) -> list[tuple[CountryGeometry, list[np.ndarray]]]:
    projected = []
    for geom in geometries:
        if geom.id in excluded:
            continue
        pieces: list[np.ndarray] = []
        for ring in geom.rings:
            pieces.extend(project_ring(ring, params))
        projected.append((geom, pieces))
    return projected


def compute_fit_transform(
    geometries: Iterable[CountryGeometry],
    params: ProjectionParams,
    margin: float = 0.9,
    excluded: frozenset[str] = frozenset(),
) -> FitTransform:
    """Fit transform for every non-excluded geometry in the set."""
    projected = _project_all(geometries, params, excluded)
    box = bounds(p for _, pieces in projected for p in pieces)
    return fit_to_viewport(box, params.viewport_width, params.viewport_height, margin)


def build_projected_map(
    geometries: Iterable[CountryGeometry],
    params: ProjectionParams,
    margin: float = 0.9,
    excluded: frozenset[str] = frozenset(),
) -> ProjectedMap:
    """Project and fit all geometry once. Paint passes reuse the result.

    Excluded ids are neither drawn nor counted in the fit bounding box.
    """
    projected = _project_all(geometries, params, excluded)
    box = bounds(p for _, pieces in projected for p in pieces)
    fit = fit_to_viewport(box, params.viewport_width, params.viewport_height, margin)

    countries: list[ProjectedCountry] = []
    for geom, pieces in projected:
        rings = tuple(
            tuple((float(x), float(y)) for x, y in np.round(apply_fit(p, fit), 3))
            for p in pieces
        )
        countries.append(
            ProjectedCountry(id=geom.id, display_name=geom.display_name, rings=rings)
        )

    _LOGGER.info(
        "Projected %d countries (scale=%.4f, translate=(%.2f, %.2f))",
        len(countries),
        fit.scale,
        fit.translate_x,
        fit.translate_y,
    )
    return ProjectedMap(
        countries=tuple(countries),
        fit=fit,
        width=params.viewport_width,
        height=params.viewport_height,
    )
