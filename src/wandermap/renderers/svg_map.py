"""SVG world map renderer.

``render_svg`` produces a deterministic, self-contained SVG document for a
Scene: the same scene always yields the same bytes, so it can be captured or
downloaded at any moment. ``render_svg_html`` wraps it in a page with the
hover / tooltip / click-pulse script for standalone viewing.

Coordinate system: viewBox="0 0 W H" in fitted viewport pixels, y down.
Each country path carries its resting and hover styles as data-* attributes,
so the script never has to compute colors itself.
"""

from __future__ import annotations

from html import escape
from pathlib import Path

from wandermap.i18n import t
from wandermap.models import PathCommand, Ring, Scene, TextCommand
from wandermap.render import HOVER_STROKE_WIDTH

_FONT = "system-ui, -apple-system, 'Segoe UI', sans-serif"
_FRONTEND = Path(__file__).parent.parent / "frontend"


def _fmt(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def ring_to_path(ring: Ring) -> str:
    """SVG path data for one closed ring."""
    head, *tail = ring
    parts = [f"M{_fmt(head[0])},{_fmt(head[1])}"]
    parts.extend(f"L{_fmt(x)},{_fmt(y)}" for x, y in tail)
    parts.append("Z")
    return "".join(parts)


def _path_element(cmd: PathCommand) -> str:
    d = "".join(ring_to_path(r) for r in cmd.rings if r)
    return (
        f'<path class="country" d="{d}" fill="{escape(cmd.fill)}"'
        f' stroke="{cmd.stroke}" stroke-width="{_fmt(cmd.stroke_width)}"'
        f' data-id="{escape(cmd.country_id)}" data-name="{escape(cmd.display_name)}"'
        f' data-fill="{escape(cmd.fill)}" data-hover-fill="{escape(cmd.hover_fill)}"'
        f' data-stroke-width="{_fmt(cmd.stroke_width)}"'
        f' data-hover-stroke-width="{_fmt(HOVER_STROKE_WIDTH)}">'
        f"<title>{escape(cmd.display_name)}</title></path>"
    )


def _text_element(cmd: TextCommand) -> str:
    return (
        f'<text x="{_fmt(cmd.x)}" y="{_fmt(cmd.y)}" text-anchor="{cmd.anchor}"'
        f' dominant-baseline="middle" fill="{cmd.fill}" font-size="20"'
        f' font-family="{_FONT}">{escape(cmd.text)}</text>'
    )


def render_svg(scene: Scene) -> str:
    """Return the scene as a standalone SVG document string."""
    paths = "\n    ".join(_path_element(p) for p in scene.paths)
    texts = "\n  ".join(_text_element(tx) for tx in scene.texts)
    return (
        f'<svg id="wander-map" xmlns="http://www.w3.org/2000/svg"'
        f' viewBox="0 0 {scene.width} {scene.height}"'
        f' width="{scene.width}" height="{scene.height}"'
        f' preserveAspectRatio="xMidYMid meet">\n'
        f'  <rect x="0" y="0" width="{scene.width}" height="{scene.height}"'
        f' fill="{scene.background}"/>\n'
        f'  <g id="countries" fill-rule="evenodd" stroke-linejoin="round">\n'
        f"    {paths}\n"
        f"  </g>\n"
        f"  {texts}\n"
        f"</svg>"
    )


# Shared with the Streamlit component frontend.
INTERACTION_CSS = (_FRONTEND / "interaction.css").read_text(encoding="utf-8")
INTERACTION_JS = (_FRONTEND / "interaction.js").read_text(encoding="utf-8")


def render_svg_html(scene: Scene, lang: str = "en", filename: str = "wander-map.png") -> str:
    """Return a self-contained HTML page with the interactive SVG map.

    Args:
        scene: Painted scene to show.
        lang: Language code ('ko' or 'en') for the save button label.
        filename: Suggested filename for the downloaded PNG.

    Returns:
        HTML string suitable for st.components.v1.html() or a file.
    """
    svg = render_svg(scene)
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<style>
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ background: {scene.background}; }}
{INTERACTION_CSS}
#save-btn {{
    position: fixed; top: 0.75rem; right: 0.75rem;
    background: #2563eb; color: #fff; border: none; border-radius: 8px;
    padding: 0.4rem 0.9rem; font: 14px {_FONT}; cursor: pointer;
}}
</style>
</head>
<body>
{svg}
<div id="wm-tooltip"></div>
<button id="save-btn">{escape(t("btn_save_image", lang))}</button>
<script>
{INTERACTION_JS}
(function() {{
  var svg = document.getElementById('wander-map');
  var tooltip = document.getElementById('wm-tooltip');
  var unbind = wmBind(svg, tooltip, null);
  window.addEventListener('pagehide', unbind);

  // SVG data URI -> <img> -> canvas, white background
  document.getElementById('save-btn').addEventListener('click', function() {{
    var clone = svg.cloneNode(true);
    var paths = clone.querySelectorAll('path.country');
    for (var i = 0; i < paths.length; i++) {{
      paths[i].setAttribute('fill', paths[i].getAttribute('data-fill'));
      paths[i].setAttribute('stroke-width', paths[i].getAttribute('data-stroke-width'));
      paths[i].removeAttribute('style');
    }}
    var str = new XMLSerializer().serializeToString(clone);
    var img = new Image();
    img.onload = function() {{
      var dpr = Math.min(2, window.devicePixelRatio || 1);
      var canvas = document.createElement('canvas');
      canvas.width = {scene.width} * dpr;
      canvas.height = {scene.height} * dpr;
      var ctx = canvas.getContext('2d');
      ctx.fillStyle = '{scene.background}';
      ctx.fillRect(0, 0, canvas.width, canvas.height);
      ctx.drawImage(img, 0, 0, canvas.width, canvas.height);
      var a = document.createElement('a');
      a.href = canvas.toDataURL('image/png');
      a.download = '{escape(filename)}';
      document.body.appendChild(a);
      a.click();
      document.body.removeChild(a);
    }};
    img.src = 'data:image/svg+xml;base64,' + btoa(unescape(encodeURIComponent(str)));
  }});
}})();
</script>
</body>
</html>"""
