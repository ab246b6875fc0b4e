"""ArtisanMap: Streamlit app showing artisan locations with live weather."""

import streamlit as st
import streamlit.components.v1 as components
from streamlit_js_eval import streamlit_js_eval

from artisanmap.compute import run
from artisanmap.i18n import t
from artisanmap.models import PresentationMode
from artisanmap.presentation import INITIAL_MODE, configure_presentation
from artisanmap.renderers.folium_map import render_map_html
from artisanmap.settings import configure_logging, load_settings

_MAP_HEIGHT = 720

# --- Language detection (browser-first via streamlit-js-eval) ---
# navigator.language is read once and cached in session_state.
# On the first run the JS call returns None; the rerun triggered by
# streamlit_js_eval fills it in.
if "lang" not in st.session_state:
    _browser_lang: str | None = streamlit_js_eval(
        js_expressions="navigator.language", key="_lang_detect", height=0
    )
    if _browser_lang is not None:
        st.session_state.lang = "hi" if _browser_lang.lower().startswith("hi") else "en"

_lang: str = st.session_state.get("lang", "en")

st.set_page_config(
    page_title=t("page_title", _lang),
    page_icon="🧶",
    layout="wide",
)

st.markdown(
    """
    <style>
    /* Hide streamlit_js_eval invisible iframe */
    iframe[src*="streamlit_js_eval"] { display: none !important; }
    [data-testid="stMainBlockContainer"] {
        padding-top: 1rem !important;
    }
    </style>
    """,
    unsafe_allow_html=True,
)

# --- Session state initialization ---
if "settings" not in st.session_state:
    st.session_state.settings = load_settings()
    configure_logging(st.session_state.settings.log_level)
if "feed" not in st.session_state:
    st.session_state.feed = None
if "mode" not in st.session_state:
    st.session_state.mode = INITIAL_MODE

# --- Fetch cycle: once per session, never on a mode change ---
if st.session_state.feed is None:
    with st.spinner(t("loading", _lang)):
        st.session_state.feed = run(st.session_state.settings)

# --- Mode toggle ---
col1, col2, _ = st.columns([1, 1, 6])
with col1:
    if st.button(
        t("btn_cluster", _lang),
        key="mode_cluster",
        type="primary" if st.session_state.mode is PresentationMode.CLUSTER else "secondary",
        use_container_width=True,
    ):
        st.session_state.mode = PresentationMode.CLUSTER
        st.rerun()
with col2:
    if st.button(
        t("btn_heatmap", _lang),
        key="mode_heatmap",
        type="primary" if st.session_state.mode is PresentationMode.HEATMAP else "secondary",
        use_container_width=True,
    ):
        st.session_state.mode = PresentationMode.HEATMAP
        st.rerun()

# --- Map area ---
feed = st.session_state.feed
if not feed.features:
    st.markdown(
        f"<div style='height:60vh; display:flex; align-items:center; justify-content:center;"
        f" color:#667; font-size:1.2rem;'>{t('placeholder', _lang)}</div>",
        unsafe_allow_html=True,
    )
else:
    map_html = render_map_html(
        feed,
        configure_presentation(st.session_state.mode),
        lang=_lang,
    )
    components.html(map_html, height=_MAP_HEIGHT, scrolling=False)
