"""Bidirectional Streamlit component that shows the SVG map and reports clicks.

The frontend (frontend/index.html) mounts the SVG, binds hover/tooltip/pulse,
and sends ``{"id", "name", "nonce"}`` back for each click. Streamlit keeps
returning the last value on later reruns, so callers must compare the nonce
with the last one they handled.
"""

from pathlib import Path
from typing import Any

import streamlit.components.v1 as components

from wandermap.models import Scene
from wandermap.renderers.svg_map import render_svg

_FRONTEND = Path(__file__).parent / "frontend"
_wander_map = components.declare_component("wander_map", path=str(_FRONTEND))


def wander_map(scene: Scene, key: str | None = None) -> dict[str, Any] | None:
    """Render the scene and return the most recent click, if any."""
    return _wander_map(svg=render_svg(scene), key=key, default=None)
