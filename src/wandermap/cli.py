"""Headless export: draw a visited-countries map straight to PNG or SVG."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv

from wandermap.codes import to_canonical
from wandermap.config import MapConfig
from wandermap.interaction import MapView
from wandermap.models import SelectionEvent
from wandermap.renderers.static import save_static_map
from wandermap.renderers.svg_map import render_svg
from wandermap.store import SearchSelection, VisitState
from wandermap.topology import (
    GeometryLoadError,
    GeometrySource,
    decode_countries,
    read_topology,
)
from wandermap.util import setup_logging

LOGGER = logging.getLogger("wandermap.cli")

EXIT_LOAD_FAILED = 1
EXIT_BAD_CODE = 2


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="wandermap-export",
        description="Export a world map with visited countries highlighted.",
    )
    parser.add_argument(
        "--visit",
        action="append",
        default=[],
        help="Country to mark as visited, ISO alpha-3 (JPN) or numeric (392). Can be repeated.",
    )
    parser.add_argument(
        "--select",
        action="append",
        default=[],
        help="Country to outline as selected. Can be repeated.",
    )
    parser.add_argument("--color", default=None, help="Fill color for visited countries.")
    parser.add_argument("--out", default=None, help="Output file path.")
    parser.add_argument("--svg", action="store_true", help="Write SVG instead of PNG.")
    parser.add_argument(
        "--topology",
        default=None,
        help="Read the TopoJSON document from a local file instead of the network.",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logs.")
    return parser


def _load_view(config: MapConfig, topology: str | None) -> MapView:
    view = MapView.from_config(config)
    view.mount()
    try:
        if topology is not None:
            document = read_topology(Path(topology))
            view.set_geometry(
                decode_countries(document, config.topology_object, config.excluded_ids)
            )
        else:
            view.set_geometry(GeometrySource.from_config(config).fetch())
    except GeometryLoadError as exc:
        view.set_load_error(str(exc))
    return view


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    load_dotenv()
    setup_logging(Path(args.log_file) if args.log_file else None, verbose=args.verbose)
    config = MapConfig.from_env()
    color = args.color or config.default_color

    try:
        visit_ids = [to_canonical(code) for code in args.visit]
        select_ids = [to_canonical(code) for code in args.select]
    except KeyError as exc:
        LOGGER.error("Unknown country code: %s", exc.args[0])
        return EXIT_BAD_CODE

    view = _load_view(config, args.topology)

    # Visits flow through the same selection events the interactive map emits.
    visits = VisitState()

    def on_select(event: SelectionEvent) -> None:
        nonlocal visits
        visits = visits.toggle(event.id, color)

    subscription = view.subscribe(on_select)
    for country_id in visit_ids:
        view.click(country_id)
    subscription.release()

    selected = SearchSelection(frozenset(select_ids))
    scene = view.update(visits, selected)
    view.unmount()

    suffix = ".svg" if args.svg else ".png"
    out = Path(args.out) if args.out else Path("results") / f"wander-map{suffix}"
    if args.svg:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(render_svg(scene), encoding="utf-8")
    else:
        save_static_map(scene, out)
    LOGGER.info("Wrote %s (%d visited)", out, visits.count())

    return EXIT_LOAD_FAILED if view.error is not None else 0


if __name__ == "__main__":
    raise SystemExit(main())
