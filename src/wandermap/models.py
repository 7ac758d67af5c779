"""Data model definitions — the records passed between the layers of the map."""

from dataclasses import dataclass

Ring = tuple[tuple[float, float], ...]


@dataclass(frozen=True)
class CountryGeometry:
    """Boundary of a single country in geographic coordinates."""

    id: str  # ISO 3166-1 numeric code ("392")
    display_name: str  # Name carried by the topology ("Japan")
    rings: tuple[Ring, ...]  # Closed (lon, lat) rings, all polygons flattened


@dataclass(frozen=True)
class ProjectionParams:
    """Fixed Mercator parameters for the session."""

    center_lon: float = 135.0
    center_lat: float = 35.0
    base_scale: float = 250.0
    rotation: float = -160.0  # Longitude shift applied before projecting
    viewport_width: int = 1200
    viewport_height: int = 800


@dataclass(frozen=True)
class FitTransform:
    """Uniform scale + translation applied after projection."""

    scale: float
    translate_x: float
    translate_y: float


@dataclass(frozen=True)
class ProjectedCountry:
    """A country with every ring projected and fitted to viewport pixels."""

    id: str
    display_name: str
    rings: tuple[Ring, ...]  # (x, y) pixel rings; antimeridian pieces are separate rings


@dataclass(frozen=True)
class ProjectedMap:
    """Output of the one-off projection step. Reused by every paint pass."""

    countries: tuple[ProjectedCountry, ...]
    fit: FitTransform
    width: int
    height: int

    def country(self, country_id: str) -> ProjectedCountry | None:
        for c in self.countries:
            if c.id == country_id:
                return c
        return None


@dataclass(frozen=True)
class SelectionEvent:
    """Emitted by the renderer when a country is clicked."""

    id: str
    display_name: str


# --- Draw commands ---


@dataclass(frozen=True)
class PathCommand:
    """Filled and stroked country shape."""

    country_id: str
    display_name: str
    rings: tuple[Ring, ...]
    fill: str
    hover_fill: str  # Precomputed so front-ends can highlight without a round trip
    stroke: str
    stroke_width: float


@dataclass(frozen=True)
class TextCommand:
    """Text anchored at (x, y). Used for the load-failure message."""

    x: float
    y: float
    text: str
    fill: str
    anchor: str = "middle"


@dataclass(frozen=True)
class StyleCommand:
    """Restyle an already drawn country."""

    country_id: str
    fill: str
    stroke_width: float


@dataclass(frozen=True)
class TooltipShow:
    text: str
    x: float
    y: float


@dataclass(frozen=True)
class TooltipMove:
    x: float
    y: float


@dataclass(frozen=True)
class TooltipHide:
    pass


@dataclass(frozen=True)
class PulseCommand:
    """Short scale-down/scale-up acknowledgement of a click."""

    country_id: str
    scales: tuple[float, ...] = (0.95, 1.0)
    duration_ms: int = 100  # Per step


Command = (
    PathCommand
    | TextCommand
    | StyleCommand
    | TooltipShow
    | TooltipMove
    | TooltipHide
    | PulseCommand
)


@dataclass(frozen=True)
class Scene:
    """The sole input to renderer back-ends. Fully painted state."""

    width: int
    height: int
    commands: tuple[Command, ...] = ()
    background: str = "#ffffff"
    revision: int = 0  # Draw-pass counter of the view that produced it

    @property
    def paths(self) -> tuple[PathCommand, ...]:
        return tuple(c for c in self.commands if isinstance(c, PathCommand))

    @property
    def texts(self) -> tuple[TextCommand, ...]:
        return tuple(c for c in self.commands if isinstance(c, TextCommand))
