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
"""SPARQL response dispatcher — content type → display payload.

Classification is an ordered list of rules; the first rule whose test
accepts ``(content_type, result_format)`` renders the body. Order matters:
``application/xhtml+xml`` must land on the HTML rule, not the XML one.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable

from lxml import etree, html as lxml_html

from sparql_console.logger import get_logger
from sparql_console.payload import Escaped, Markup, PlainText, RenderedPayload, Tabular

log = get_logger(__name__)

HTML_FORMATS = frozenset({"text/html", "text/x-html+tr", "application/vnd.ms-excel"})

_PRE_WRAP = "white-space: pre-wrap; word-break: break-word; overflow-x: hidden"

# `&` first so the other entities are not escaped twice.
_XML_ESCAPES = (
    ("&", "&amp;"),
    ("<", "&lt;"),
    (">", "&gt;"),
    ('"', "&quot;"),
    ("'", "&#039;"),
)


class ResponseDecodeError(ValueError):
    """Body could not be decoded as its declared content type."""


# ── Renderers ──────────────────────────────────────────────────

def render_bindings(body: str) -> Tabular:
    """Parse SPARQL JSON results into columns + string rows.

    Columns are the keys of the first binding, in document order. Cells
    with no binding or an empty ``value`` render as ``""``.
    """
    try:
        data: Any = json.loads(body)
    except json.JSONDecodeError as exc:
        raise ResponseDecodeError(f"Invalid JSON in SPARQL response: {exc}") from exc

    results = data.get("results") if isinstance(data, dict) else None
    bindings = results.get("bindings") if isinstance(results, dict) else None
    if not isinstance(bindings, list) or not bindings:
        return Tabular(columns=(), rows=())

    first = bindings[0] if isinstance(bindings[0], dict) else {}
    columns = tuple(first.keys())

    rows: list[dict[str, str]] = []
    for binding in bindings:
        row: dict[str, str] = {}
        for column in columns:
            cell = binding.get(column) if isinstance(binding, dict) else None
            value = cell.get("value") if isinstance(cell, dict) else None
            row[column] = str(value) if value not in (None, "") else ""
        rows.append(row)

    log.info("Tabular result: %d columns, %d rows", len(columns), len(rows))
    return Tabular(columns=columns, rows=tuple(rows))


def _promote_header_row(table: etree._Element) -> bool:
    """Move a leading ``<th>`` row into a new ``<thead>`` when none exists."""
    if table.find(".//thead") is not None:
        return False
    first_row = next(table.iter("tr"), None)
    if first_row is None or first_row.find("th") is None:
        return False

    first_row.getparent().remove(first_row)
    thead = lxml_html.Element("thead")
    thead.append(first_row)

    index = 0
    if len(table) and table[0].tag == "caption":
        index = 1
    table.insert(index, thead)
    return True


def render_markup(body: str) -> Markup:
    """Tidy server-rendered HTML tables for display.

    Bodies without a table are passed through untouched.
    """
    if "<table" not in body.lower():
        return Markup(html=body)

    try:
        root = lxml_html.fromstring(body)
    except (etree.ParserError, ValueError) as exc:
        log.warning("HTML body not parseable, passing through: %s", exc)
        return Markup(html=body)

    table = root if root.tag == "table" else root.find(".//table")
    if table is None:
        return Markup(html=body)

    if _promote_header_row(table):
        log.info("Promoted leading header row into <thead>")
    for pre in table.iterfind(".//td//pre"):
        existing = (pre.get("style") or "").strip().rstrip(";")
        pre.set("style", f"{existing}; {_PRE_WRAP}" if existing else _PRE_WRAP)

    # full pages keep their doctype so the frame does not fall into quirks mode
    doctype = root.getroottree().docinfo.doctype if root.tag == "html" else ""
    return Markup(html=lxml_html.tostring(root, encoding="unicode", doctype=doctype or None))


def escape_xml(text: str) -> str:
    """HTML-escape ``& < > " '`` for preformatted display."""
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text


def render_xml(body: str) -> Escaped:
    return Escaped(text=escape_xml(body))


def render_text(body: str) -> PlainText:
    return PlainText(text=body)


# ── Rules ──────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Rule:
    """One classification rule: a test and the renderer it selects."""

    name: str
    matches: Callable[[str, str], bool]
    render: Callable[[str], RenderedPayload]


RULES: tuple[Rule, ...] = (
    Rule("json", lambda ct, fmt: "json" in ct, render_bindings),
    Rule("html", lambda ct, fmt: "html" in ct or fmt in HTML_FORMATS, render_markup),
    Rule("xml", lambda ct, fmt: "xml" in ct, render_xml),
    Rule("csv", lambda ct, fmt: "csv" in ct, render_text),
    Rule("text", lambda ct, fmt: True, render_text),
)


def classify(content_type: str | None, result_format: str) -> Rule:
    """Return the first rule accepting this content type / requested format."""
    ct = (content_type or "").lower()
    for rule in RULES:
        if rule.matches(ct, result_format):
            return rule
    return RULES[-1]


def dispatch(content_type: str | None, result_format: str, body: str) -> RenderedPayload:
    """Classify a 2xx response and render its body.

    Raises ``ResponseDecodeError`` when a JSON-declared body is not JSON.
    """
    rule = classify(content_type, result_format)
    log.info("Response classified as '%s' (content type: %s)", rule.name, content_type or "none")
    return rule.render(body)
