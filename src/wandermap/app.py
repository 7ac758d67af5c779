"""Wander Map — Streamlit app for marking the countries you have visited."""

import html

import streamlit as st
from dotenv import load_dotenv
from streamlit_js_eval import streamlit_js_eval

load_dotenv()

from wandermap.codes import display_name  # noqa: E402
from wandermap.component import wander_map  # noqa: E402
from wandermap.config import TOTAL_COUNTRIES, MapConfig  # noqa: E402
from wandermap.i18n import t  # noqa: E402
from wandermap.interaction import MapView  # noqa: E402
from wandermap.models import ProjectedMap, Scene, SelectionEvent  # noqa: E402
from wandermap.projection import build_projected_map  # noqa: E402
from wandermap.renderers.plotly_map import (  # noqa: E402
    render_plotly_map,
    selected_country_ids,
)
from wandermap.renderers.static import render_png_bytes  # noqa: E402
from wandermap.renderers.svg_map import render_svg  # noqa: E402
from wandermap.store import SearchSelection, VisitState  # noqa: E402
from wandermap.topology import GeometryLoadError, GeometrySource  # noqa: E402
from wandermap.util import setup_logging  # noqa: E402

# --- Language detection (browser-first via streamlit-js-eval) ---
# navigator.language is read once and cached in session_state.
# The first run gets None; the rerun triggered by streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "ko" if _browser_lang.lower().startswith("ko") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🗺",
    layout="wide",
)


@st.cache_resource(show_spinner=False)
def _init() -> MapConfig:
    setup_logging()
    return MapConfig.from_env()


@st.cache_resource(show_spinner=False)
def _load_projected_map(_config: MapConfig) -> ProjectedMap:
    # Shared read-only by every session; failures are not cached, so a refresh retries.
    geometries = GeometrySource.from_config(_config).fetch()
    return build_projected_map(
        geometries, _config.projection, _config.margin, _config.excluded_ids
    )


@st.cache_data(show_spinner=False, max_entries=8)
def _png_bytes(_scene: Scene, visits_key: tuple, selected_key: frozenset, failed: bool) -> bytes:
    return render_png_bytes(_scene)


_config = _init()


def _on_country_select(event: SelectionEvent) -> None:
    st.session_state.visits = st.session_state.visits.toggle(event.id, st.session_state.color)


# --- Session state initialization ---
if "visits" not in st.session_state:
    st.session_state.visits = VisitState()
if "selected" not in st.session_state:
    st.session_state.selected = SearchSelection()
if "color" not in st.session_state:
    st.session_state.color = _config.default_color
if "last_click" not in st.session_state:
    st.session_state.last_click = None
if "last_plotly_pick" not in st.session_state:
    st.session_state.last_plotly_pick = ()
if "map_view" not in st.session_state:
    _view = MapView.from_config(_config)
    _view.error_message = t("error_map", _lang)
    _view.mount()
    _view.subscribe(_on_country_select)
    st.session_state.map_view = _view

view: MapView = st.session_state.map_view

if view.projected is None:
    try:
        with st.spinner(t("loading_map", _lang)):
            view.set_projected(_load_projected_map(_config))
    except GeometryLoadError as e:
        view.set_load_error(str(e))

_names: dict[str, str] = (
    {c.id: c.display_name for c in view.projected.countries} if view.projected else {}
)


def _on_search() -> None:
    country_id = st.session_state.search_choice
    if country_id is None:
        return
    st.session_state.visits = st.session_state.visits.toggle(
        country_id, st.session_state.color
    )
    st.session_state.selected = st.session_state.selected.toggle(country_id)
    st.session_state.search_choice = None


def _on_remove(country_id: str) -> None:
    st.session_state.visits = st.session_state.visits.toggle(
        country_id, st.session_state.color
    )


st.markdown(
    """
    <style>
    .wm-chip {
        display: inline-flex;
        align-items: center;
        height: 32px;
        padding: 0 12px;
        border-radius: 9999px;
        color: #fff;
        font-size: 0.875rem;
        white-space: nowrap;
        text-shadow: 0 1px 1px rgba(0,0,0,0.2);
    }
    .wm-stat { display: flex; justify-content: space-between; color: #4b5563; }
    .wm-stat b { color: #111827; }
    </style>
    """,
    unsafe_allow_html=True,
)

# --- Header: title, save buttons, color picker ---
head_title, head_png, head_svg, head_color = st.columns([6, 2, 2, 1])
with head_title:
    st.title(t("page_title", _lang))
with head_color:
    new_color = st.color_picker(t("label_color", _lang), value=st.session_state.color)
    if new_color != st.session_state.color:
        st.session_state.color = new_color
        st.session_state.visits = st.session_state.visits.recolor(new_color)

# Draw pass against the latest snapshots
scene = view.update(st.session_state.visits, st.session_state.selected)

with head_png:
    st.download_button(
        t("btn_save_image", _lang),
        data=_png_bytes(
            scene,
            st.session_state.visits.entries,
            st.session_state.selected.ids,
            view.error is not None,
        ),
        file_name="wander-map.png",
        mime="image/png",
        use_container_width=True,
    )
with head_svg:
    st.download_button(
        t("btn_save_svg", _lang),
        data=render_svg(scene),
        file_name="wander-map.svg",
        mime="image/svg+xml",
        use_container_width=True,
    )

side, main = st.columns([1, 3])

# --- Side panel: statistics, search, visited list ---
with side:
    with st.container(border=True):
        st.subheader(t("stats_title", _lang))
        st.markdown(
            f"<div class='wm-stat'><span>{t('stats_visited', _lang)}</span>"
            f"<b>{st.session_state.visits.count()}/{TOTAL_COUNTRIES}</b></div>",
            unsafe_allow_html=True,
        )

    with st.container(border=True):
        st.subheader(t("visited_title", _lang))
        st.selectbox(
            t("search_placeholder", _lang),
            options=sorted(_names, key=lambda cid: _names[cid]),
            format_func=lambda cid: _names[cid],
            index=None,
            placeholder=t("search_placeholder", _lang),
            key="search_choice",
            on_change=_on_search,
            label_visibility="collapsed",
        )
        if st.session_state.visits.count() == 0:
            st.caption(t("visited_empty", _lang))
        for country_id, color in st.session_state.visits.entries:
            chip, remove = st.columns([5, 1])
            with chip:
                st.markdown(
                    f"<span class='wm-chip' style='background:{html.escape(color)}'>"
                    f"{html.escape(display_name(country_id, _names))}</span>",
                    unsafe_allow_html=True,
                )
            with remove:
                st.button(
                    "✕",
                    key=f"remove_{country_id}",
                    help=t("btn_remove", _lang),
                    on_click=_on_remove,
                    args=(country_id,),
                )

# --- Map ---
with main:
    mode = st.radio(
        t("label_view", _lang),
        options=("svg", "plotly"),
        format_func=lambda m: t(f"view_{m}", _lang),
        horizontal=True,
        label_visibility="collapsed",
    )
    if mode == "svg":
        clicked = wander_map(scene, key="wander_map")
        if clicked and clicked.get("nonce") != st.session_state.last_click:
            st.session_state.last_click = clicked.get("nonce")
            view.click(str(clicked["id"]))
            st.rerun()
    else:
        picked = st.plotly_chart(
            render_plotly_map(scene),
            use_container_width=True,
            on_select="rerun",
            selection_mode="points",
            key="plotly_map",
            config={"scrollZoom": True, "displayModeBar": False},
        )
        picked_ids = tuple(selected_country_ids(picked))
        if picked_ids and picked_ids != st.session_state.last_plotly_pick:
            st.session_state.last_plotly_pick = picked_ids
            for country_id in picked_ids:
                view.click(country_id)
            st.rerun()
