"""Matplotlib static PNG renderer for "Save as Image"."""

import io
from pathlib import Path

import matplotlib.pyplot as plt
from matplotlib.figure import Figure
from matplotlib.patches import PathPatch
from matplotlib.path import Path as MplPath

from wandermap.models import PathCommand, Scene

_ROOT = Path(__file__).parent.parent.parent.parent


def _country_patch(cmd: PathCommand) -> PathPatch:
    vertices: list[tuple[float, float]] = []
    codes: list[int] = []
    for ring in cmd.rings:
        if len(ring) < 3:
            continue
        vertices.extend(ring)
        vertices.append(ring[0])
        codes.append(MplPath.MOVETO)
        codes.extend([MplPath.LINETO] * (len(ring) - 1))
        codes.append(MplPath.CLOSEPOLY)
    return PathPatch(
        MplPath(vertices, codes),
        facecolor=cmd.fill,
        edgecolor=cmd.stroke,
        linewidth=cmd.stroke_width,
    )


def render_static_map(scene: Scene, dpi: int = 100) -> Figure:
    """Render a Scene as a matplotlib figure of scene.width × scene.height pixels.

    Args:
        scene: Painted scene (map or error message).
        dpi: Figure resolution; the pixel size stays width × height at any dpi
            when saved with the same dpi.

    Returns:
        matplotlib Figure object.
    """
    fig, ax = plt.subplots(figsize=(scene.width / dpi, scene.height / dpi), dpi=dpi)
    fig.patch.set_facecolor(scene.background)
    ax.set_position((0, 0, 1, 1))
    ax.set_facecolor(scene.background)

    for cmd in scene.paths:
        if any(len(r) >= 3 for r in cmd.rings):
            ax.add_patch(_country_patch(cmd))

    for text in scene.texts:
        ax.text(
            text.x,
            text.y,
            text.text,
            color=text.fill,
            ha="center" if text.anchor == "middle" else "left",
            va="center",
            fontsize=14,
        )

    # Pixel space, y down
    ax.set_xlim(0, scene.width)
    ax.set_ylim(scene.height, 0)
    ax.axis("off")
    return fig


def render_png_bytes(scene: Scene, scale: float = 2.0) -> bytes:
    """PNG bytes of the scene, ``scale`` times the viewport size."""
    fig = render_static_map(scene)
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=fig.dpi * scale, facecolor=scene.background)
    plt.close(fig)
    return buf.getvalue()


def save_static_map(scene: Scene, output_path: Path | None = None) -> Path:
    """Save the scene as a PNG file.

    Args:
        scene: Painted scene.
        output_path: Destination path. Defaults to results/wander-map.png.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        output_path = _ROOT / "results" / "wander-map.png"

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_bytes(render_png_bytes(scene))
    return output_path
