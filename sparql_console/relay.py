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

"""Development relay — forwards browser requests to the real endpoint.

Local use only. ``/proxy?url=<endpoint>`` re-issues the request with a
fixed form content type and echoes status, content type and body back,
with CORS opened to every origin. ``HTTP(S)_PROXY`` is honoured through
urllib's environment proxy handling.
"""

from __future__ import annotations

import asyncio
import http.client
import ssl
import urllib.error
import urllib.request
from dataclasses import dataclass

import certifi
import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from sparql_console.config import RelayConfig
from sparql_console.logger import get_logger
from sparql_console.sparql.queries import (
    DEFAULT_FORMAT,
    FORM_CONTENT_TYPE,
    ConfigurationError,
    check_endpoint,
)

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class Forwarded:
    status_code: int
    content_type: str
    body: bytes


def _ssl_context(verify_tls: bool) -> ssl.SSLContext:
    if verify_tls:
        return ssl.create_default_context(cafile=certifi.where())
    log.warning("TLS verification disabled for relay upstream requests")
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def forward(
    url: str,
    method: str,
    accept: str,
    body: bytes | None,
    ctx: ssl.SSLContext,
    timeout: int = 300,
) -> Forwarded:
    """Re-issue one request upstream and capture what came back."""
    req = urllib.request.Request(
        url,
        data=body if method == "POST" else None,
        headers={"Accept": accept, "Content-Type": FORM_CONTENT_TYPE},
        method=method,
    )
    try:
        with urllib.request.urlopen(req, timeout=timeout, context=ctx) as resp:
            log.info("Response status: %d", resp.status)
            return Forwarded(
                status_code=resp.status,
                content_type=resp.headers.get("Content-Type", ""),
                body=resp.read(),
            )
    except urllib.error.HTTPError as exc:
        log.error("Error fetching URL: %s", exc.reason)
        return Forwarded(
            status_code=exc.code,
            content_type="text/plain; charset=utf-8",
            body=f"Error fetching URL: {exc.reason}".encode("utf-8"),
        )
    except (urllib.error.URLError, TimeoutError, http.client.HTTPException, OSError) as exc:
        reason = getattr(exc, "reason", exc)
        log.error("Error fetching URL: %s", reason)
        return Forwarded(
            status_code=500,
            content_type="text/plain; charset=utf-8",
            body=f"Error fetching URL: {reason}".encode("utf-8"),
        )


def create_app(config: RelayConfig | None = None) -> FastAPI:
    """Build the relay app for the given relay settings."""
    settings = config or RelayConfig()
    ctx = _ssl_context(settings.verify_tls)

    app = FastAPI(title="SPARQL Console Relay")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.api_route(settings.path, methods=["GET", "POST"])
    async def proxy(request: Request, url: str | None = None) -> Response:
        if not url:
            return PlainTextResponse("URL is required", status_code=400)
        try:
            url = check_endpoint(url)
        except ConfigurationError:
            log.warning("Refusing non-http(s) URL: %s", url)
            return PlainTextResponse("URL must be an http(s) URL", status_code=400)

        log.info("Proxying request to: %s", url)
        body = await request.body() if request.method == "POST" else None
        accept = request.headers.get("accept") or DEFAULT_FORMAT

        result = await asyncio.to_thread(forward, url, request.method, accept, body, ctx)
        return Response(
            content=result.body,
            status_code=result.status_code,
            media_type=result.content_type or None,
        )

    @app.get("/health")
    def health() -> dict[str, str]:
        """Basic health check endpoint."""
        return {"status": "ok"}

    return app


def run(config: RelayConfig | None = None) -> None:  # pragma: no cover - blocking server
    settings = config or RelayConfig()
    log.info("Relay running at %s", settings.base_url)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)
