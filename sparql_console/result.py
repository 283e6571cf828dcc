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

"""Result types for error handling without exceptions.

Two families live here:

* ``Ok[T] | Fail`` — generic outcome of loaders (config, catalog, query
  files). Every loader that can fail returns ``Result[T]``.
* ``Success | HttpFailure | TransportFailure`` — terminal outcome of one
  query submission. Exactly one is produced per call, never retried.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from sparql_console.payload import RenderedPayload

T = TypeVar("T")


# ── Generic ────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Successful result carrying typed data."""

    data: T
    ok: bool = field(default=True, init=False)


@dataclass(frozen=True, slots=True)
class Fail:
    """Failed result carrying error message and optional context."""

    error: str
    context: Any = None
    ok: bool = field(default=False, init=False)


Result = Ok[T] | Fail


# ── Submission ─────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class Success:
    """Endpoint answered 2xx; body converted by the dispatcher."""

    content_type: str
    payload: RenderedPayload
    ok: bool = field(default=True, init=False)

    def describe(self) -> str:
        return f"{self.content_type or 'unknown content type'}: {self.payload.kind}"


@dataclass(frozen=True, slots=True)
class HttpFailure:
    """Endpoint answered outside 2xx. The body is never inspected."""

    status_code: int
    ok: bool = field(default=False, init=False)

    def describe(self) -> str:
        return f"HTTP error! Status: {self.status_code}"


@dataclass(frozen=True, slots=True)
class TransportFailure:
    """Network error, malformed response or undecodable JSON body."""

    message: str
    ok: bool = field(default=False, init=False)

    def describe(self) -> str:
        return f"Error: {self.message}"


SubmissionOutcome = Success | HttpFailure | TransportFailure
