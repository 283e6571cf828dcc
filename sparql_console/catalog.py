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

"""Query library — remote catalog of example queries.

The catalog is a YAML index (``queries: [{category, title, description,
sparql}]``) next to the ``.rq`` files it references. Both are plain GETs
relative to one base URL. Loaded text goes back to the editor, which runs
it through validation and submission like typed input.
"""

from __future__ import annotations

import ssl
import time
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any

import certifi
import yaml

from sparql_console.config import CatalogConfig, RetryConfig
from sparql_console.logger import get_logger
from sparql_console.result import Fail, Ok, Result

log = get_logger(__name__)

_ssl_ctx = ssl.create_default_context(cafile=certifi.where())


@dataclass(frozen=True, slots=True)
class CatalogEntry:
    category: str
    title: str
    description: str
    sparql: str


@dataclass(frozen=True, slots=True)
class Catalog:
    entries: tuple[CatalogEntry, ...]

    def categories(self) -> dict[str, list[CatalogEntry]]:
        """Entries grouped by category, categories in first-seen order."""
        grouped: dict[str, list[CatalogEntry]] = {}
        for entry in self.entries:
            grouped.setdefault(entry.category, []).append(entry)
        return grouped

    def find(self, title: str) -> CatalogEntry | None:
        return next((e for e in self.entries if e.title == title), None)


# ── Download ───────────────────────────────────────────────────

def _download(url: str, timeout: int = 30) -> Result[bytes]:
    """Single download attempt."""
    req = urllib.request.Request(url, method="GET")
    try:
        with urllib.request.urlopen(req, timeout=timeout, context=_ssl_ctx) as resp:
            return Ok(data=resp.read())
    except urllib.error.HTTPError as exc:
        return Fail(error=f"HTTP {exc.code}: {exc.reason}", context=url)
    except urllib.error.URLError as exc:
        return Fail(error=f"Connection error: {exc.reason}", context=url)
    except TimeoutError:
        return Fail(error=f"Timeout after {timeout}s", context=url)


def fetch_text(url: str, retry: RetryConfig) -> Result[str]:
    """GET a URL with retry and decode it as UTF-8."""
    last_error = ""
    for attempt in range(1, retry.attempts + 1):
        result = _download(url)
        if result.ok:
            log.info("Downloaded %d bytes from %s", len(result.data), url)
            return Ok(data=result.data.decode("utf-8", errors="replace"))
        last_error = result.error
        log.warning("Attempt %d/%d for %s failed: %s", attempt, retry.attempts, url, last_error)
        if attempt < retry.attempts:
            time.sleep(retry.delay_seconds)

    return Fail(error=f"All {retry.attempts} download attempts failed: {last_error}", context=url)


# ── Catalog ────────────────────────────────────────────────────

def parse_catalog(text: str) -> Result[Catalog]:
    """Parse index YAML into a Catalog. Entries without a title or file are errors."""
    try:
        raw: Any = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        return Fail(error=f"Catalog YAML parse error: {exc}")

    queries = raw.get("queries") if isinstance(raw, dict) else None
    if not isinstance(queries, list):
        return Fail(error="Catalog index has no 'queries' list")

    entries: list[CatalogEntry] = []
    for position, item in enumerate(queries, start=1):
        if not isinstance(item, dict):
            return Fail(error=f"Catalog entry {position} is not a mapping")
        try:
            entries.append(CatalogEntry(
                category=str(item.get("category") or "Uncategorized"),
                title=str(item["title"]),
                description=str(item.get("description") or ""),
                sparql=str(item["sparql"]),
            ))
        except KeyError as exc:
            return Fail(error=f"Catalog entry {position} is missing {exc}", context=item)

    return Ok(data=Catalog(entries=tuple(entries)))


def _base_url(config: CatalogConfig) -> Result[str]:
    if not config.base_url:
        return Fail(error="Query library is not configured (catalog.base_url)")
    return Ok(data=config.base_url)


def load_catalog(config: CatalogConfig) -> Result[Catalog]:
    """Fetch ``{base_url}{index_file}`` and parse it."""
    base = _base_url(config)
    if not base.ok:
        return base  # type: ignore[return-value]

    text = fetch_text(f"{base.data}{config.index_file}", config.retry)
    if not text.ok:
        return text  # type: ignore[return-value]

    catalog = parse_catalog(text.data)
    if catalog.ok:
        log.info(
            "Loaded %d queries in %d categories",
            len(catalog.data.entries),
            len(catalog.data.categories()),
        )
    return catalog


def fetch_query_text(config: CatalogConfig, entry: CatalogEntry) -> Result[str]:
    """Fetch the SPARQL text an entry points to."""
    base = _base_url(config)
    if not base.ok:
        return base  # type: ignore[return-value]
    return fetch_text(f"{base.data}{entry.sparql}", config.retry)
