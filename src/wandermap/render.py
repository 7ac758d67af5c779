"""Paint pass: turns a projected map plus state snapshots into draw commands.

Nothing here projects coordinates: the projected map is computed once per
geometry load, and this module only decides colors and stroke widths.
"""

from wandermap.models import PathCommand, ProjectedMap, Scene, TextCommand
from wandermap.store import SearchSelection, VisitState

UNVISITED_FILL = "#f5f5f5"
UNVISITED_HOVER_FILL = "#e5e5e5"
STROKE = "#000000"
STROKE_WIDTH = 0.5
HOVER_STROKE_WIDTH = 1.5
SELECTED_STROKE_WIDTH = 1.0
HOVER_BRIGHTEN = 0.2
ERROR_FILL = "#ef4444"
ERROR_MESSAGE = "Error loading map data. Please try refreshing the page."

_DARKER = 0.7


def _parse_hex(color: str) -> tuple[int, int, int] | None:
    text = color.strip().lstrip("#")
    if len(text) == 3:
        text = "".join(ch * 2 for ch in text)
    if len(text) != 6:
        return None
    try:
        return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)
    except ValueError:
        return None


def brighter(color: str, k: float = 1.0) -> str:
    """Brighten a hex color by ``(1 / 0.7) ** k`` per channel, clamped to 255.

    Colors that are not ``#rgb``/``#rrggbb`` are returned unchanged; they are
    validated by the color input, not here.
    """
    rgb = _parse_hex(color)
    if rgb is None:
        return color
    factor = (1 / _DARKER) ** k
    r, g, b = (max(0, min(255, round(ch * factor))) for ch in rgb)
    return f"#{r:02x}{g:02x}{b:02x}"


def base_style(
    country_id: str, visits: VisitState, selected: SearchSelection
) -> tuple[str, float]:
    """Resting (fill, stroke_width) of a country."""
    fill = visits.color_of(country_id) or UNVISITED_FILL
    width = SELECTED_STROKE_WIDTH if country_id in selected else STROKE_WIDTH
    return fill, width


def hover_style(country_id: str, visits: VisitState) -> tuple[str, float]:
    """Highlighted (fill, stroke_width) while the pointer is over a country."""
    color = visits.color_of(country_id)
    fill = brighter(color, HOVER_BRIGHTEN) if color else UNVISITED_HOVER_FILL
    return fill, HOVER_STROKE_WIDTH


def render(
    projected: ProjectedMap,
    visits: VisitState,
    selected: SearchSelection = SearchSelection(),
    revision: int = 0,
) -> Scene:
    """Paint every projected country. Deterministic for identical inputs."""
    commands = []
    for country in projected.countries:
        if not country.rings:
            continue
        fill, width = base_style(country.id, visits, selected)
        hover_fill, _ = hover_style(country.id, visits)
        commands.append(
            PathCommand(
                country_id=country.id,
                display_name=country.display_name,
                rings=country.rings,
                fill=fill,
                hover_fill=hover_fill,
                stroke=STROKE,
                stroke_width=width,
            )
        )
    return Scene(
        width=projected.width,
        height=projected.height,
        commands=tuple(commands),
        revision=revision,
    )


def render_error(
    width: int, height: int, message: str = ERROR_MESSAGE, revision: int = 0
) -> Scene:
    """Scene holding only a centred error message, used in place of the map."""
    text = TextCommand(x=width / 2, y=height / 2, text=message, fill=ERROR_FILL)
    return Scene(width=width, height=height, commands=(text,), revision=revision)
