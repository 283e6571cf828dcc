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
"""SPARQL HTTP client using urllib.

Sends one POST per submission and hands the 2xx body to the dispatcher.
Every call ends in exactly one ``SubmissionOutcome``; nothing is retried.
"""

from __future__ import annotations

import asyncio
import http.client
import ssl
import urllib.error
import urllib.request

import certifi

from sparql_console.logger import get_logger
from sparql_console.result import HttpFailure, Success, SubmissionOutcome, TransportFailure
from sparql_console.sparql.processor import ResponseDecodeError, dispatch
from sparql_console.sparql.queries import SubmissionParameters, SubmissionRequest, build_request

log = get_logger(__name__)

DEFAULT_CLIENT_TIMEOUT = 300

_ssl_ctx = ssl.create_default_context(cafile=certifi.where())


def _charset(content_type: str | None) -> str:
    for part in (content_type or "").split(";")[1:]:
        key, _, value = part.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip('"')
    return "utf-8"


def send(
    request: SubmissionRequest,
    result_format: str,
    timeout: float | None = DEFAULT_CLIENT_TIMEOUT,
) -> SubmissionOutcome:
    """Perform one prepared request synchronously."""
    encoded_body = request.body.encode("utf-8")
    req = urllib.request.Request(
        request.url,
        data=encoded_body,
        headers=dict(request.headers),
        method=request.method,
    )

    log.info("SPARQL query → %s (%d bytes)", request.url, len(encoded_body))

    try:
        with urllib.request.urlopen(req, timeout=timeout, context=_ssl_ctx) as resp:
            content_type = resp.headers.get("Content-Type", "")
            raw = resp.read()
    except urllib.error.HTTPError as exc:
        log.warning("SPARQL HTTP %d: %s", exc.code, exc.reason)
        return HttpFailure(status_code=exc.code)
    except urllib.error.URLError as exc:
        return TransportFailure(message=f"SPARQL connection error: {exc.reason}")
    except TimeoutError:
        return TransportFailure(message=f"SPARQL timeout after {timeout}s")
    except (http.client.HTTPException, OSError) as exc:
        return TransportFailure(message=f"Malformed response from endpoint: {exc}")

    try:
        body = raw.decode(_charset(content_type), errors="replace")
    except LookupError:
        body = raw.decode("utf-8", errors="replace")

    try:
        payload = dispatch(content_type, result_format, body)
    except ResponseDecodeError as exc:
        return TransportFailure(message=str(exc))

    log.info("SPARQL returned %d bytes (%s)", len(raw), content_type or "no content type")
    return Success(content_type=content_type, payload=payload)


def submit_sync(
    query: str,
    params: SubmissionParameters,
    endpoint: str,
    *,
    timeout: float | None = DEFAULT_CLIENT_TIMEOUT,
) -> SubmissionOutcome:
    """Build and send a submission, blocking the caller.

    Raises ``ConfigurationError`` for a malformed endpoint before any I/O.
    """
    request = build_request(query, params, endpoint)
    return send(request, params.result_format, timeout=timeout)


async def submit(
    query: str,
    params: SubmissionParameters,
    endpoint: str,
    *,
    timeout: float | None = DEFAULT_CLIENT_TIMEOUT,
) -> SubmissionOutcome:
    """Submit a query; the network call is the only suspension point.

    Cancelling the awaiting task abandons the result; the worker thread
    finishes or times out on its own.
    """
    request = build_request(query, params, endpoint)
    return await asyncio.to_thread(send, request, params.result_format, timeout)
