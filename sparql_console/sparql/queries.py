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
"""SPARQL request builder.

Turns query text + submission parameters into the form fields the
endpoint expects, either as a POST body or as a shareable GET URL.
Pure string work — no I/O.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field

DEFAULT_FORMAT = "application/sparql-results+json"
DEFAULT_SHARE_TIMEOUT_MS = 30000
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ConfigurationError(ValueError):
    """Endpoint or parameter is unusable; raised before any request is made."""


# ── Parameters ─────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class SubmissionParameters:
    """Options sent alongside the query. ``None`` optionals are omitted."""

    result_format: str = DEFAULT_FORMAT
    default_graph_uri: str | None = None
    timeout_millis: int | None = None
    strict: bool = False
    debug: bool = False
    report: bool = False

    def __post_init__(self) -> None:
        if not self.result_format or not self.result_format.strip():
            raise ConfigurationError("Result format must not be empty")
        if self.timeout_millis is not None:
            if isinstance(self.timeout_millis, bool) or not isinstance(self.timeout_millis, int):
                raise ConfigurationError(f"Timeout must be an integer, got {self.timeout_millis!r}")
            if self.timeout_millis <= 0:
                raise ConfigurationError(f"Timeout must be positive, got {self.timeout_millis}")

    @classmethod
    def from_form(
        cls,
        *,
        result_format: str = "",
        default_graph_uri: str = "",
        timeout: str | int | None = "",
        strict: bool = False,
        debug: bool = False,
        report: bool = False,
    ) -> SubmissionParameters:
        """Build parameters from raw form/CLI values (blank means absent)."""
        timeout_millis: int | None = None
        if isinstance(timeout, int):
            timeout_millis = timeout
        elif timeout is not None and timeout.strip():
            try:
                timeout_millis = int(timeout.strip())
            except ValueError as exc:
                raise ConfigurationError(f"Timeout is not a number: {timeout!r}") from exc

        return cls(
            result_format=result_format.strip() or DEFAULT_FORMAT,
            default_graph_uri=default_graph_uri.strip() or None,
            timeout_millis=timeout_millis,
            strict=strict,
            debug=debug,
            report=report,
        )


@dataclass(frozen=True, slots=True)
class SubmissionRequest:
    """One outgoing POST. Built fresh per submission, never retained."""

    url: str
    body: str
    method: str = "POST"
    headers: dict[str, str] = field(
        default_factory=lambda: {"Content-Type": FORM_CONTENT_TYPE}
    )


# ── Fields ─────────────────────────────────────────────────────

def _flag(value: bool) -> str:
    return "true" if value else "false"


def form_fields(
    query: str,
    params: SubmissionParameters,
    *,
    timeout_millis: int | None = None,
) -> list[tuple[str, str]]:
    """Ordered field list: query, format, [default-graph-uri], [timeout], flags."""
    fields: list[tuple[str, str]] = [
        ("query", query),
        ("format", params.result_format),
    ]
    if params.default_graph_uri:
        fields.append(("default-graph-uri", params.default_graph_uri))

    timeout = params.timeout_millis if params.timeout_millis is not None else timeout_millis
    if timeout is not None:
        fields.append(("timeout", str(timeout)))

    fields.extend([
        ("strict", _flag(params.strict)),
        ("debug", _flag(params.debug)),
        ("report", _flag(params.report)),
    ])
    return fields


def check_endpoint(endpoint: str) -> str:
    """Return the endpoint unchanged, or raise if it is not an http(s) URL."""
    if not isinstance(endpoint, str) or not endpoint.strip():
        raise ConfigurationError("SPARQL endpoint is not configured")
    parts = urllib.parse.urlsplit(endpoint.strip())
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ConfigurationError(f"Invalid SPARQL endpoint: {endpoint!r}")
    return endpoint.strip()


def build_request(query: str, params: SubmissionParameters, endpoint: str) -> SubmissionRequest:
    """Assemble the url-encoded POST for one submission."""
    url = check_endpoint(endpoint)
    body = urllib.parse.urlencode(form_fields(query, params))
    return SubmissionRequest(url=url, body=body)


def build_share_url(
    query: str,
    params: SubmissionParameters,
    endpoint: str,
    *,
    minify: bool = True,
    share_timeout_millis: int | None = DEFAULT_SHARE_TIMEOUT_MS,
) -> str:
    """GET URL carrying the same fields, for copy/open-in-new-tab.

    ``share_timeout_millis`` fills in ``timeout`` when the parameters
    leave it unset.
    """
    base = check_endpoint(endpoint)
    text = minify_query(query) if minify else query
    encoded = urllib.parse.urlencode(
        form_fields(text, params, timeout_millis=share_timeout_millis),
        quote_via=urllib.parse.quote,
    )
    separator = "&" if urllib.parse.urlsplit(base).query else "?"
    if base.endswith(("?", "&")):
        separator = ""
    return f"{base}{separator}{encoded}"


def relay_url(relay_base: str, endpoint: str) -> str:
    """Wrap a real endpoint in the dev relay's ``?url=`` form."""
    check_endpoint(relay_base)
    check_endpoint(endpoint)
    return f"{relay_base}?{urllib.parse.urlencode({'url': endpoint}, quote_via=urllib.parse.quote)}"


# ── Minify ─────────────────────────────────────────────────────

_TOKEN = re.compile(
    r'(?P<literal>"""(?:[^"\\]|\\.|"(?!""))*"""'
    r"|'''(?:[^'\\]|\\.|'(?!''))*'''"
    r'|"(?:[^"\\\n]|\\.)*"'
    r"|'(?:[^'\\\n]|\\.)*')"
    r'|(?P<iri><[^<>"{}|^`\\\s]*>)'
    r"|(?P<comment>#[^\n]*)"
    r"|(?P<space>\s+)"
    r"|(?P<other>[^\s\"'<#]+|.)",
    re.DOTALL,
)


def minify_query(query: str) -> str:
    """Drop comments and collapse whitespace outside IRIs and literals."""
    out: list[str] = []
    for match in _TOKEN.finditer(query):
        kind = match.lastgroup
        if kind in ("space", "comment"):
            if out and out[-1] != " ":
                out.append(" ")
            continue
        out.append(match.group())
    return "".join(out).strip()
