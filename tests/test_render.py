"""Tests for the paint pass: fills, stroke widths, hover colors and the error scene."""

import pytest

from wandermap import projection
from wandermap.models import PathCommand, TextCommand
from wandermap.projection import build_projected_map
from wandermap.render import (
    ERROR_FILL,
    ERROR_MESSAGE,
    HOVER_STROKE_WIDTH,
    SELECTED_STROKE_WIDTH,
    STROKE_WIDTH,
    UNVISITED_FILL,
    UNVISITED_HOVER_FILL,
    base_style,
    brighter,
    hover_style,
    render,
    render_error,
)
from wandermap.store import SearchSelection, VisitState


@pytest.fixture
def projected(geometries, params):
    return build_projected_map(geometries, params, 0.9, frozenset({"010"}))


def _path(scene, country_id) -> PathCommand:
    return next(p for p in scene.paths if p.country_id == country_id)


class TestBrighter:
    def test_visited_hover_color(self):
        assert brighter("#2196F3", 0.2) == "#23a1ff"

    def test_clamped(self):
        assert brighter("#ffffff", 1.0) == "#ffffff"

    def test_short_hex(self):
        assert brighter("#000", 0.2) == "#000000"

    def test_unparseable_passthrough(self):
        assert brighter("rebeccapurple") == "rebeccapurple"


class TestStyles:
    def test_unvisited_hover_round_trip(self):
        visits, selected = VisitState(), SearchSelection()
        assert hover_style("392", visits) == (UNVISITED_HOVER_FILL, HOVER_STROKE_WIDTH)
        assert base_style("392", visits, selected) == (UNVISITED_FILL, STROKE_WIDTH)

    def test_visited_hover_round_trip(self):
        visits = VisitState().toggle("392", "#2196F3")
        assert hover_style("392", visits) == ("#23a1ff", HOVER_STROKE_WIDTH)
        assert base_style("392", visits, SearchSelection()) == ("#2196F3", STROKE_WIDTH)

    def test_selected_stroke(self):
        selected = SearchSelection().toggle("392")
        assert base_style("392", VisitState(), selected) == (UNVISITED_FILL, SELECTED_STROKE_WIDTH)


class TestRender:
    def test_fills_follow_visits(self, projected):
        scene = render(projected, VisitState().toggle("392", "#2196F3"))
        assert _path(scene, "392").fill == "#2196F3"
        assert _path(scene, "392").hover_fill == "#23a1ff"
        assert _path(scene, "250").fill == UNVISITED_FILL
        assert _path(scene, "250").hover_fill == UNVISITED_HOVER_FILL

    def test_every_drawn_country_once(self, projected):
        scene = render(projected, VisitState())
        ids = [p.country_id for p in scene.paths]
        assert sorted(ids) == ["250", "392"]

    def test_country_without_rings_not_drawn(self, projected):
        scene = render(projected, VisitState().toggle("999", "#2196F3"))
        assert all(p.country_id != "999" for p in scene.paths)

    def test_deterministic(self, projected):
        visits = VisitState().toggle("250", "#ff0000")
        assert render(projected, visits) == render(projected, visits)

    def test_does_not_project(self, projected, monkeypatch):
        """Repainting reuses the projected map."""

        def fail(*args, **kwargs):
            raise AssertionError("projection called during paint")

        monkeypatch.setattr(projection, "project_ring", fail)
        monkeypatch.setattr(projection, "_forward", fail)
        render(projected, VisitState().toggle("392", "#2196F3"))

    def test_geometry_unchanged_by_state(self, projected):
        a = render(projected, VisitState())
        b = render(projected, VisitState().toggle("392", "#00ff00"), SearchSelection().toggle("250"))
        assert [p.rings for p in a.paths] == [p.rings for p in b.paths]


class TestRenderError:
    def test_centred_message(self):
        scene = render_error(1200, 800)
        assert scene.paths == ()
        (text,) = scene.texts
        assert isinstance(text, TextCommand)
        assert (text.x, text.y) == (600, 400)
        assert text.text == ERROR_MESSAGE
        assert text.fill == ERROR_FILL
