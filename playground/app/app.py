# SPDX-License-Identifier: MIT
#
#  █████╗ ██████╗  █████╗ ███████╗
# ██╔══██╗██╔══██╗██╔══██╗██╔════╝
# ███████║██████╔╝███████║███████╗
# ██╔══██║██╔══██╗██╔══██║╚════██║
# ██║  ██║██║  ██║██║  ██║███████║
# ╚═╝  ╚═╝╚═╝  ╚═╝╚═╝  ╚═╝╚══════╝
# Copyright (C) 2026 Riza Emre ARAS <r.emrearas@proton.me>
#
# Licensed under the MIT License.
# See LICENSE and THIRD_PARTY_LICENSES for details.
"""Cellar SPARQL Console — Streamlit shell around the sparql_console core.

All mutable UI state lives in ``st.session_state``; the core only sees
query text and parameters and hands back plain values.

Run: streamlit run playground/app/app.py
"""

import asyncio
import html
import os
from pathlib import Path

import streamlit as st
import streamlit.components.v1 as st_components
from dotenv import load_dotenv

from sparql_console import catalog as library
from sparql_console.config import ConsoleConfig, load_config, resolve_environment
from sparql_console.payload import NO_RESULTS, Escaped, Markup, PlainText, Tabular
from sparql_console.result import Success
from sparql_console.sparql.client import submit
from sparql_console.sparql.queries import (
    DEFAULT_FORMAT,
    ConfigurationError,
    SubmissionParameters,
    build_share_url,
)
from sparql_console.validator import format_error, is_submittable, validate
from translations import t

load_dotenv()

ENVIRONMENT = os.getenv("ENVIRONMENT", "prod")

RESULT_FORMATS = [
    DEFAULT_FORMAT,
    "text/html",
    "text/x-html+tr",
    "application/vnd.ms-excel",
    "application/sparql-results+xml",
    "text/csv",
    "text/tab-separated-values",
    "text/plain",
    "application/rdf+xml",
    "text/turtle",
]


@st.cache_resource
def get_config():
    path = os.getenv("CONSOLE_CONFIG")
    return load_config(Path(path) if path else None)


@st.cache_resource(ttl=3600, show_spinner=False)
def get_catalog(_config: ConsoleConfig, base_url: str):
    return library.load_catalog(_config.catalog)


# ---------------------------------------------------------------------------
# Page Config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title=t("app.title"),
    page_icon=t("app.pageIcon"),
    layout="wide",
)

cfg_result = get_config()
if not cfg_result.ok:
    st.error(t("errors.config", error=cfg_result.error))
    st.stop()
config: ConsoleConfig = cfg_result.data

# ---------------------------------------------------------------------------
# Session State
# ---------------------------------------------------------------------------

if "query" not in st.session_state:
    st.session_state["query"] = ""
if "pending" not in st.session_state:
    st.session_state["pending"] = False
if "outcome" not in st.session_state:
    st.session_state["outcome"] = None
if "submitted" not in st.session_state:
    st.session_state["submitted"] = None
if "selected_query" not in st.session_state:
    st.session_state["selected_query"] = None


def try_query(text: str) -> None:
    st.session_state["query"] = text
    st.toast(t("library.loaded"))


def select_entry(entry: library.CatalogEntry) -> None:
    fetched = library.fetch_query_text(config.catalog, entry)
    st.session_state["selected_query"] = (
        {"entry": entry, "text": fetched.data}
        if fetched.ok
        else {"entry": entry, "error": fetched.error}
    )


# ---------------------------------------------------------------------------
# Sidebar — Query Options
# ---------------------------------------------------------------------------

with st.sidebar:
    st.header(t("sidebar.options"))
    defaults = config.defaults
    so_format = st.selectbox(
        t("sidebar.format"),
        options=RESULT_FORMATS,
        index=RESULT_FORMATS.index(defaults.result_format)
        if defaults.result_format in RESULT_FORMATS
        else 0,
    )
    so_graph = st.text_input(t("sidebar.defaultGraph"), value=defaults.default_graph_uri or "")
    so_timeout = st.text_input(
        t("sidebar.timeout"),
        value=str(defaults.timeout_millis) if defaults.timeout_millis else "",
    )
    so_strict = st.checkbox(t("sidebar.strict"), value=defaults.strict)
    so_debug = st.checkbox(t("sidebar.debug"), value=defaults.debug)
    so_report = st.checkbox(t("sidebar.report"), value=defaults.report)

try:
    params = SubmissionParameters.from_form(
        result_format=so_format,
        default_graph_uri=so_graph,
        timeout=so_timeout,
        strict=so_strict,
        debug=so_debug,
        report=so_report,
    )
    endpoint = config.submission_endpoint(ENVIRONMENT)
except ConfigurationError as exc:
    st.error(t("errors.config", error=exc))
    st.stop()

st.title(t("app.title"))
home_tab, editor_tab, library_tab, results_tab = st.tabs([
    t("tabs.home"),
    t("tabs.editor"),
    t("tabs.library"),
    t("tabs.results"),
])

# ---------------------------------------------------------------------------
# Home
# ---------------------------------------------------------------------------

with home_tab:
    st.markdown(t("home.intro"))
    st.caption(f"{t('home.endpoint')}: `{config.endpoint}` · {t('home.environment')}: `{resolve_environment(ENVIRONMENT)}`")

# ---------------------------------------------------------------------------
# Query Editor
# ---------------------------------------------------------------------------

with editor_tab:
    st.text_area(
        t("tabs.editor"),
        key="query",
        height=320,
        placeholder=t("editor.placeholder"),
        label_visibility="collapsed",
    )
    query = st.session_state["query"]
    check = validate(query)

    # Redrawn every rerun, so a new error replaces the old marker and Valid clears it.
    if not check.valid:
        st.error(check.message.splitlines()[0] if check.message else "")
        st.code(format_error(query, check), language="text")
    elif query.strip():
        st.caption(f"✅ {t('editor.valid')}")
    else:
        st.caption(t("editor.empty"))

    if st.button(
        t("editor.run"),
        type="primary",
        disabled=st.session_state["pending"] or not is_submittable(query, check),
    ):
        st.session_state["pending"] = True
        st.rerun()

if st.session_state["pending"]:
    with editor_tab:
        # noinspection PyTypeChecker
        with st.spinner(t("editor.running")):
            st.session_state["outcome"] = asyncio.run(
                submit(query, params, endpoint, timeout=config.client_timeout)
            )
            st.session_state["submitted"] = {"query": query, "params": params}
    st.session_state["pending"] = False
    st.rerun()

# ---------------------------------------------------------------------------
# Query Library
# ---------------------------------------------------------------------------

with library_tab:
    if not config.catalog.base_url:
        st.info(t("library.notConfigured"))
    else:
        loaded = get_catalog(config, config.catalog.base_url)
        if not loaded.ok:
            st.error(t("library.loadFailed", error=loaded.error))
        else:
            list_col, preview_col = st.columns([1, 2])
            with list_col:
                for category, entries in loaded.data.categories().items():
                    with st.expander(category):
                        for entry in entries:
                            st.button(
                                entry.title,
                                key=f"lib-{category}-{entry.title}",
                                on_click=select_entry,
                                args=(entry,),
                                use_container_width=True,
                            )
            with preview_col:
                selected = st.session_state["selected_query"]
                if not selected:
                    st.caption(t("library.select"))
                elif "error" in selected:
                    st.error(selected["error"])
                else:
                    st.subheader(selected["entry"].title)
                    st.markdown(selected["entry"].description)
                    st.code(selected["text"], language="sparql")
                    st.button(
                        t("library.try"),
                        on_click=try_query,
                        args=(selected["text"],),
                    )

# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

with results_tab:
    outcome = st.session_state["outcome"]
    if outcome is None:
        st.caption(t("results.none"))
    elif not isinstance(outcome, Success):
        st.error(outcome.describe())
    else:
        payload = outcome.payload
        if isinstance(payload, Tabular):
            if payload.is_empty:
                st.info(NO_RESULTS)
            else:
                st.dataframe(list(payload.rows), column_order=payload.columns, use_container_width=True)
        elif isinstance(payload, Markup):
            st_components.html(payload.html, height=600, scrolling=True)
        elif isinstance(payload, Escaped):
            st.markdown(f"<pre>{payload.text}</pre>", unsafe_allow_html=True)
        elif isinstance(payload, PlainText):
            st.markdown(f"<pre>{html.escape(payload.text)}</pre>", unsafe_allow_html=True)

        submitted = st.session_state["submitted"]
        show_share = not (isinstance(payload, Tabular) and payload.is_empty)
        if submitted and show_share:
            share_url = build_share_url(
                submitted["query"],
                submitted["params"],
                config.endpoint,
                share_timeout_millis=config.share_timeout_millis,
            )
            st.caption(t("results.share"))
            st.code(share_url, language="text")
            st.link_button(t("results.open"), share_url)

# ---------------------------------------------------------------------------
# Debug Panel (persists after rerun)
# ---------------------------------------------------------------------------

if ENVIRONMENT == "dev" and st.session_state["outcome"] is not None:
    with st.expander("🐛 DEBUG — Last Request", expanded=False):
        st.caption(f"**Endpoint:** `{endpoint}`")
        st.write(st.session_state["outcome"])
