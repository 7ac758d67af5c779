"""Plotly interactive world map renderer.

Draws each country as a filled scatter trace in viewport pixels (y axis
reversed). A marker trace at the country centroids carries the country ids
as customdata, so point selection (st.plotly_chart on_select) reports which
country was clicked.
"""

import numpy as np
import plotly.graph_objects as go

from wandermap.models import PathCommand, Scene


def _ring_xy(cmd: PathCommand) -> tuple[list[float | None], list[float | None]]:
    """All rings of a country in one x/y list, separated by None."""
    xs: list[float | None] = []
    ys: list[float | None] = []
    for ring in cmd.rings:
        for x, y in ring:
            xs.append(x)
            ys.append(y)
        xs.append(None)
        ys.append(None)
    return xs, ys


def _centroid(cmd: PathCommand) -> tuple[float, float]:
    """Vertex mean of the country's largest ring."""
    ring = max(cmd.rings, key=len)
    pts = np.asarray(ring, dtype=float)
    return float(pts[:, 0].mean()), float(pts[:, 1].mean())


def render_plotly_map(scene: Scene) -> go.Figure:
    """Render a Scene as a Plotly figure.

    Args:
        scene: Painted scene.

    Returns:
        Plotly Figure object.
    """
    traces: list[go.Scatter] = []
    paths = [p for p in scene.paths if p.rings]
    for cmd in paths:
        xs, ys = _ring_xy(cmd)
        traces.append(
            go.Scatter(
                x=xs,
                y=ys,
                mode="lines",
                fill="toself",
                fillcolor=cmd.fill,
                line=dict(color=cmd.stroke, width=cmd.stroke_width),
                hoveron="fills",
                hoverinfo="text",
                text=cmd.display_name,
                name=cmd.country_id,
                showlegend=False,
            )
        )

    centroids = [_centroid(cmd) for cmd in paths]
    traces.append(
        go.Scatter(
            x=[c[0] for c in centroids],
            y=[c[1] for c in centroids],
            mode="markers",
            marker=dict(size=6, color="rgba(0,0,0,0.15)"),
            customdata=[cmd.country_id for cmd in paths],
            text=[cmd.display_name for cmd in paths],
            hoverinfo="text",
            name="countries",
            showlegend=False,
        )
    )

    fig = go.Figure(data=traces)
    fig.update_layout(
        paper_bgcolor=scene.background,
        plot_bgcolor=scene.background,
        showlegend=False,
        margin=dict(l=0, r=0, t=0, b=0),
        width=scene.width,
        height=scene.height,
        dragmode="pan",
        clickmode="event+select",
        xaxis=dict(visible=False, range=[0, scene.width], fixedrange=False),
        yaxis=dict(
            visible=False,
            range=[scene.height, 0],
            scaleanchor="x",
            fixedrange=False,
        ),
        annotations=[
            dict(
                x=text.x,
                y=text.y,
                text=text.text,
                showarrow=False,
                font=dict(color=text.fill, size=18),
            )
            for text in scene.texts
        ],
    )
    return fig


def selected_country_ids(selection: dict) -> list[str]:
    """Country ids from a st.plotly_chart selection payload."""
    points = (selection or {}).get("selection", {}).get("points", [])
    ids = []
    for point in points:
        cid = point.get("customdata")
        if isinstance(cid, list):
            cid = cid[0] if cid else None
        if cid is not None:
            ids.append(str(cid))
    return ids
