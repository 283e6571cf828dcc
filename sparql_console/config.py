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

"""Loads console.yaml into typed dataclasses.

Every section is optional; missing keys fall back to the public Cellar
defaults. The environment (``ENVIRONMENT=dev|prod``) decides whether
submissions go straight to the endpoint or through the local relay.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from sparql_console.result import Fail, Ok, Result
from sparql_console.sparql.client import DEFAULT_CLIENT_TIMEOUT
from sparql_console.sparql.queries import (
    DEFAULT_SHARE_TIMEOUT_MS,
    ConfigurationError,
    SubmissionParameters,
    check_endpoint,
    relay_url,
)

DEFAULT_ENDPOINT = "https://publications.europa.eu/webapi/rdf/sparql"
ENVIRONMENTS = ("dev", "prod")


# ── Relay ──────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class RelayConfig:
    host: str = "localhost"
    port: int = 8080
    path: str = "/proxy"
    verify_tls: bool = True

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}{self.path}"


# ── Catalog ────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class RetryConfig:
    attempts: int = 3
    delay_seconds: int = 1


@dataclass(frozen=True, slots=True)
class CatalogConfig:
    base_url: str | None = None
    index_file: str = "index.yaml"
    retry: RetryConfig = field(default_factory=RetryConfig)


# ── Top-level ──────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ConsoleConfig:
    endpoint: str = DEFAULT_ENDPOINT
    client_timeout: int = DEFAULT_CLIENT_TIMEOUT
    share_timeout_millis: int = DEFAULT_SHARE_TIMEOUT_MS
    defaults: SubmissionParameters = field(default_factory=SubmissionParameters)
    relay: RelayConfig = field(default_factory=RelayConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)

    def submission_endpoint(self, environment: str | None = None) -> str:
        """Endpoint to POST to: the relay in dev, the real endpoint otherwise."""
        env = resolve_environment(environment)
        if env == "dev":
            return relay_url(self.relay.base_url, self.endpoint)
        return self.endpoint


def resolve_environment(environment: str | None = None) -> str:
    """Explicit value, else ``ENVIRONMENT``, else ``prod``."""
    env = (environment or os.getenv("ENVIRONMENT") or "prod").strip().lower()
    if env not in ENVIRONMENTS:
        raise ConfigurationError(f"Unknown environment {env!r}, expected one of {ENVIRONMENTS}")
    return env


# ── Loader ─────────────────────────────────────────────────────

def _build_defaults(raw: dict[str, Any]) -> SubmissionParameters:
    return SubmissionParameters.from_form(
        result_format=str(raw.get("format") or ""),
        default_graph_uri=str(raw.get("default_graph_uri") or ""),
        timeout=raw.get("timeout"),
        strict=bool(raw.get("strict", False)),
        debug=bool(raw.get("debug", False)),
        report=bool(raw.get("report", False)),
    )


def _build_catalog(raw: dict[str, Any]) -> CatalogConfig:
    base_url = raw.get("base_url") or None
    if base_url is not None:
        base_url = check_endpoint(str(base_url))
        if not base_url.endswith("/"):
            base_url += "/"
    retry = raw.get("retry") or {}
    return CatalogConfig(
        base_url=base_url,
        index_file=str(raw.get("index_file") or "index.yaml"),
        retry=RetryConfig(
            attempts=int(retry.get("attempts", 3)),
            delay_seconds=int(retry.get("delay_seconds", 1)),
        ),
    )


def build_config(raw: dict[str, Any]) -> ConsoleConfig:
    """Build a ConsoleConfig from an already-parsed mapping.

    Raises ``ConfigurationError`` on bad values, ``KeyError``/``TypeError``
    on bad structure.
    """
    relay = raw.get("relay") or {}
    config = ConsoleConfig(
        endpoint=check_endpoint(str(raw.get("endpoint") or DEFAULT_ENDPOINT)),
        client_timeout=int(raw.get("client_timeout", DEFAULT_CLIENT_TIMEOUT)),
        share_timeout_millis=int(raw.get("share_timeout", DEFAULT_SHARE_TIMEOUT_MS)),
        defaults=_build_defaults(raw.get("defaults") or {}),
        relay=RelayConfig(
            host=str(relay.get("host", "localhost")),
            port=int(relay.get("port", 8080)),
            path="/" + str(relay.get("path", "/proxy")).lstrip("/"),
            verify_tls=bool(relay.get("verify_tls", True)),
        ),
        catalog=_build_catalog(raw.get("catalog") or {}),
    )
    if config.catalog.retry.attempts < 1:
        raise ConfigurationError("catalog.retry.attempts must be at least 1")
    return config


def load_config(path: Path | None) -> Result[ConsoleConfig]:
    """Load console.yaml into ConsoleConfig; ``None`` yields the defaults."""
    if path is None:
        return Ok(data=ConsoleConfig())
    if not path.exists():
        return Fail(error=f"Config file not found: {path}")

    try:
        raw: Any = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        return Fail(error=f"YAML parse error: {exc}", context=str(path))

    if not isinstance(raw, dict):
        return Fail(error="Config root must be a mapping", context=str(path))

    try:
        config = build_config(raw)
    except ConfigurationError as exc:
        return Fail(error=f"Config value error: {exc}", context=str(path))
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        return Fail(error=f"Config structure error: {exc}", context=str(path))

    return Ok(data=config)
