"""Interactive map view: lifetime, pointer handling, and selection events.

The view never mutates visit state. It reflects the snapshots it is given,
reports clicks as SelectionEvent to its subscribers, and answers pointer
input with small command batches (restyle, tooltip show/move/hide, pulse)
that a front-end applies to the drawn scene.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable

from wandermap.config import MapConfig
from wandermap.models import (
    Command,
    CountryGeometry,
    ProjectedCountry,
    ProjectedMap,
    ProjectionParams,
    PulseCommand,
    Scene,
    SelectionEvent,
    StyleCommand,
    TooltipHide,
    TooltipMove,
    TooltipShow,
)
from wandermap.projection import build_projected_map
from wandermap.render import ERROR_MESSAGE, base_style, hover_style, render, render_error
from wandermap.store import SearchSelection, VisitState
from wandermap.topology import GeometryLoadError, GeometrySource

_LOGGER = logging.getLogger("wandermap.interaction")

TOOLTIP_OFFSET_Y = 28  # Tooltip sits above the pointer

Listener = Callable[[SelectionEvent], None]


class Subscription:
    """Handle for a selection listener. Released explicitly or on unmount."""

    def __init__(self, view: "MapView", listener: Listener) -> None:
        self._view = view
        self.listener = listener

    @property
    def active(self) -> bool:
        return self in self._view._subscriptions

    def release(self) -> None:
        if self.active:
            self._view._subscriptions.remove(self)


class MapView:
    """One mounted map: projected geometry, latest snapshots, transient hover state."""

    def __init__(
        self,
        params: ProjectionParams = ProjectionParams(),
        margin: float = 0.9,
        excluded: frozenset[str] = frozenset(),
        error_message: str = ERROR_MESSAGE,
    ) -> None:
        self.params = params
        self.margin = margin
        self.excluded = excluded
        self.error_message = error_message
        self._mounted = False
        self._subscriptions: list[Subscription] = []
        self._projected: ProjectedMap | None = None
        self._error: str | None = None
        self._visits = VisitState()
        self._selected = SearchSelection()
        self._revision = 0
        self._hovered: str | None = None
        self._tooltip_visible = False
        self._load_task: asyncio.Task[bool] | None = None
        self._load_generation = 0

    @classmethod
    def from_config(cls, config: MapConfig) -> "MapView":
        return cls(config.projection, config.margin, config.excluded_ids)

    # --- lifetime ---

    @property
    def mounted(self) -> bool:
        return self._mounted

    @property
    def projected(self) -> ProjectedMap | None:
        return self._projected

    @property
    def error(self) -> str | None:
        return self._error

    def mount(self) -> None:
        self._mounted = True

    def unmount(self) -> tuple[Command, ...]:
        """Tear down: cancel a pending load, release listeners, hide the tooltip."""
        if self._load_task is not None and not self._load_task.done():
            self._load_task.cancel()
        self._load_task = None
        self._load_generation += 1
        for sub in list(self._subscriptions):
            sub.release()
        batch: tuple[Command, ...] = (TooltipHide(),) if self._tooltip_visible else ()
        self._tooltip_visible = False
        self._hovered = None
        self._mounted = False
        return batch

    def subscribe(self, listener: Listener) -> Subscription:
        if not self._mounted:
            raise RuntimeError("MapView must be mounted before subscribing")
        sub = Subscription(self, listener)
        self._subscriptions.append(sub)
        return sub

    # --- geometry ---

    async def load(self, source: GeometrySource) -> bool:
        """Fetch geometry and project it. Returns False if the result was dropped.

        A result arriving after unmount, or after a newer load started, is
        discarded without touching the view.
        """
        self._load_generation += 1
        generation = self._load_generation
        try:
            geometries = await source.fetch_async()
        except GeometryLoadError as exc:
            if generation != self._load_generation or not self._mounted:
                return False
            self.set_load_error(str(exc))
            return False
        if generation != self._load_generation or not self._mounted:
            _LOGGER.debug("Discarding geometry that arrived after teardown")
            return False
        self.set_geometry(geometries)
        return True

    def start_load(self, source: GeometrySource) -> "asyncio.Task[bool]":
        """Schedule :meth:`load` on the running event loop."""
        self._load_task = asyncio.get_running_loop().create_task(self.load(source))
        return self._load_task

    def set_geometry(self, geometries: Iterable[CountryGeometry]) -> None:
        self.set_projected(
            build_projected_map(geometries, self.params, self.margin, self.excluded)
        )

    def set_projected(self, projected: ProjectedMap) -> None:
        self._projected = projected
        self._error = None

    def set_load_error(self, detail: str) -> None:
        _LOGGER.error("Map data failed to load: %s", detail)
        self._projected = None
        self._error = detail

    # --- drawing ---

    def update(self, visits: VisitState, selected: SearchSelection = SearchSelection()) -> Scene:
        """Adopt the latest snapshots and run a full draw pass against them."""
        self._visits = visits
        self._selected = selected
        self._revision += 1
        return self.scene()

    def scene(self) -> Scene:
        width, height = self.params.viewport_width, self.params.viewport_height
        if self._error is not None:
            return render_error(width, height, self.error_message, self._revision)
        if self._projected is None:
            return Scene(width=width, height=height, revision=self._revision)
        return render(self._projected, self._visits, self._selected, self._revision)

    def is_current(self, scene: Scene) -> bool:
        """Whether ``scene`` came from the most recent draw pass."""
        return scene.revision == self._revision

    # --- pointer input ---

    def _lookup(self, country_id: str) -> ProjectedCountry | None:
        if not self._mounted or self._projected is None:
            return None
        country = self._projected.country(country_id)
        if country is None:
            _LOGGER.warning("Pointer event for unknown country id %r", country_id)
        return country

    def _restore(self, country_id: str) -> StyleCommand:
        fill, width = base_style(country_id, self._visits, self._selected)
        return StyleCommand(country_id=country_id, fill=fill, stroke_width=width)

    def pointer_enter(self, country_id: str, x: float, y: float) -> tuple[Command, ...]:
        country = self._lookup(country_id)
        if country is None:
            return ()
        batch: list[Command] = []
        if self._hovered is not None and self._hovered != country_id:
            batch.append(self._restore(self._hovered))
        fill, width = hover_style(country_id, self._visits)
        batch.append(StyleCommand(country_id=country_id, fill=fill, stroke_width=width))
        batch.append(TooltipShow(text=country.display_name, x=x, y=y - TOOLTIP_OFFSET_Y))
        self._hovered = country_id
        self._tooltip_visible = True
        return tuple(batch)

    def pointer_move(self, x: float, y: float) -> tuple[Command, ...]:
        if self._hovered is None or not self._tooltip_visible:
            return ()
        return (TooltipMove(x=x, y=y - TOOLTIP_OFFSET_Y),)

    def pointer_leave(self, country_id: str) -> tuple[Command, ...]:
        if self._lookup(country_id) is None:
            return ()
        batch: list[Command] = [self._restore(country_id)]
        if self._tooltip_visible:
            batch.append(TooltipHide())
        self._hovered = None
        self._tooltip_visible = False
        return tuple(batch)

    def click(self, country_id: str) -> tuple[Command, ...]:
        """Report a selection to every listener and acknowledge it with a pulse."""
        country = self._lookup(country_id)
        if country is None:
            return ()
        event = SelectionEvent(id=country.id, display_name=country.display_name)
        for sub in list(self._subscriptions):
            sub.listener(event)
        return (PulseCommand(country_id=country_id),)
