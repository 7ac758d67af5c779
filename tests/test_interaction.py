"""Tests for the map view: lifetime, pointer handling and selection events."""

import asyncio

import httpx
import pytest

from wandermap.interaction import TOOLTIP_OFFSET_Y, MapView
from wandermap.models import PulseCommand, StyleCommand, TooltipHide, TooltipMove, TooltipShow
from wandermap.render import (
    ERROR_MESSAGE,
    HOVER_STROKE_WIDTH,
    STROKE_WIDTH,
    UNVISITED_FILL,
    UNVISITED_HOVER_FILL,
)
from wandermap.store import SearchSelection, VisitState
from wandermap.topology import GeometrySource


@pytest.fixture
def view(geometries):
    v = MapView(excluded=frozenset({"010"}))
    v.mount()
    v.set_geometry(geometries)
    return v


class TestLifetime:
    def test_subscribe_requires_mount(self):
        with pytest.raises(RuntimeError):
            MapView().subscribe(lambda event: None)

    def test_released_subscription_stops_events(self, view):
        events = []
        sub = view.subscribe(events.append)
        view.click("392")
        sub.release()
        view.click("392")
        assert len(events) == 1
        assert not sub.active

    def test_unmount_releases_subscriptions(self, view):
        events = []
        sub = view.subscribe(events.append)
        view.unmount()
        assert not sub.active
        assert view.click("392") == ()
        assert events == []

    def test_unmount_hides_visible_tooltip(self, view):
        view.update(VisitState())
        view.pointer_enter("392", 100, 100)
        assert view.unmount() == (TooltipHide(),)

    def test_unmount_without_tooltip(self, view):
        assert view.unmount() == ()

    def test_unmount_suppresses_pending_load(self, topology):
        """Geometry arriving after teardown is discarded."""

        async def scenario():
            release = asyncio.Event()

            async def handler(request):
                await release.wait()
                return httpx.Response(200, json=topology)

            source = GeometrySource("https://atlas.test/a.json", transport=httpx.MockTransport(handler))
            view = MapView()
            view.mount()
            load = asyncio.ensure_future(view.load(source))
            await asyncio.sleep(0)
            view.unmount()
            release.set()
            return view, await load

        view, loaded = asyncio.run(scenario())
        assert loaded is False
        assert view.projected is None

    def test_start_load_cancelled_by_unmount(self, topology):
        async def scenario():
            async def handler(request):
                await asyncio.sleep(10)
                return httpx.Response(200, json=topology)

            source = GeometrySource("https://atlas.test/a.json", transport=httpx.MockTransport(handler))
            view = MapView()
            view.mount()
            task = view.start_load(source)
            await asyncio.sleep(0)
            view.unmount()
            with pytest.raises(asyncio.CancelledError):
                await task
            return view

        assert asyncio.run(scenario()).projected is None

    def test_load_success(self, topology):
        source = GeometrySource(
            "https://atlas.test/a.json",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=topology)),
        )
        view = MapView()
        view.mount()
        assert asyncio.run(view.load(source)) is True
        assert view.projected.country("392") is not None

    def test_load_failure_shows_error(self):
        source = GeometrySource(
            "https://atlas.test/a.json",
            transport=httpx.MockTransport(lambda request: httpx.Response(503)),
        )
        view = MapView()
        view.mount()
        assert asyncio.run(view.load(source)) is False
        scene = view.update(VisitState())
        assert scene.paths == ()
        assert scene.texts[0].text == ERROR_MESSAGE

    def test_malformed_entry_shows_error(self):
        """A garbled geometry entry ends in the error scene, not an exception."""
        payload = {"type": "Topology", "arcs": [], "objects": {"countries": {"geometries": ["x"]}}}
        source = GeometrySource(
            "https://atlas.test/a.json",
            transport=httpx.MockTransport(lambda request: httpx.Response(200, json=payload)),
        )
        view = MapView()
        view.mount()
        assert asyncio.run(view.load(source)) is False
        assert view.error is not None
        scene = view.update(VisitState())
        assert scene.paths == ()
        assert scene.texts[0].text == ERROR_MESSAGE


class TestDrawing:
    def test_update_uses_latest_snapshot(self, view):
        view.update(VisitState())
        scene = view.update(VisitState().toggle("392", "#2196F3"))
        assert next(p for p in scene.paths if p.country_id == "392").fill == "#2196F3"

    def test_is_current(self, view):
        old = view.update(VisitState())
        new = view.update(VisitState())
        assert not view.is_current(old)
        assert view.is_current(new)

    def test_empty_before_load(self):
        view = MapView()
        view.mount()
        assert view.update(VisitState()).commands == ()


class TestPointer:
    def test_hover_unvisited(self, view):
        view.update(VisitState())
        batch = view.pointer_enter("392", 100, 200)
        assert StyleCommand("392", UNVISITED_HOVER_FILL, HOVER_STROKE_WIDTH) in batch
        assert TooltipShow("Japan", 100, 200 - TOOLTIP_OFFSET_Y) in batch

        batch = view.pointer_leave("392")
        assert batch == (StyleCommand("392", UNVISITED_FILL, STROKE_WIDTH), TooltipHide())

    def test_hover_visited(self, view):
        view.update(VisitState().toggle("392", "#2196F3"))
        batch = view.pointer_enter("392", 0, 0)
        assert batch[0] == StyleCommand("392", "#23a1ff", HOVER_STROKE_WIDTH)
        assert view.pointer_leave("392")[0] == StyleCommand("392", "#2196F3", STROKE_WIDTH)

    def test_move_follows_pointer(self, view):
        view.update(VisitState())
        assert view.pointer_move(10, 10) == ()
        view.pointer_enter("250", 10, 10)
        assert view.pointer_move(50, 60) == (TooltipMove(50, 60 - TOOLTIP_OFFSET_Y),)

    def test_enter_restores_previous(self, view):
        view.update(VisitState(), SearchSelection().toggle("392"))
        view.pointer_enter("392", 0, 0)
        batch = view.pointer_enter("250", 0, 0)
        assert batch[0] == StyleCommand("392", UNVISITED_FILL, 1.0)

    def test_unknown_country_ignored(self, view):
        assert view.pointer_enter("000", 0, 0) == ()
        assert view.click("000") == ()


class TestClick:
    def test_emits_event_and_pulse(self, view):
        events = []
        view.subscribe(events.append)
        assert view.click("392") == (PulseCommand("392"),)
        assert [(e.id, e.display_name) for e in events] == [("392", "Japan")]

    def test_does_not_mutate_visits(self, view):
        visits = VisitState()
        view.subscribe(lambda event: None)
        view.update(visits)
        view.click("392")
        scene = view.scene()
        assert visits.count() == 0
        assert next(p for p in scene.paths if p.country_id == "392").fill == UNVISITED_FILL

    def test_host_toggles_on_event(self, view):
        """Two clicks through a host listener leave the state unchanged."""
        state = {"visits": VisitState()}

        def host(event):
            state["visits"] = state["visits"].toggle(event.id, "#2196F3")

        view.subscribe(host)
        view.click("392")
        assert state["visits"].color_of("392") == "#2196F3"
        view.click("392")
        assert state["visits"] == VisitState()
