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
"""UI strings — JSON catalogue with dot-notation key access."""

import json
import os
import streamlit as st

DEFAULT_LOCALE = "en"


def load_translations(locale: str) -> dict:
    path = os.path.join(os.path.dirname(__file__), "locales", f"{locale}.json")
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def t(key: str, **values: object) -> str:
    """Look up ``a.b.c`` and fill ``{placeholders}``; unknown keys echo back."""
    if "translations" not in st.session_state:
        st.session_state["translations"] = load_translations(DEFAULT_LOCALE)

    value = st.session_state["translations"]
    for k in key.split("."):
        if isinstance(value, dict):
            value = value.get(k, key)
        else:
            return key
    if not isinstance(value, str):
        return key
    return value.format(**values) if values else value
