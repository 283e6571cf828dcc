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

"""Structured logger with per-query outcome tracking and final summary.

Collects one line per submitted query file so a batch CLI run can print
a CI-friendly summary at the end.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field

_FMT = "%(asctime)s [%(levelname)s] %(name)s — %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a stdlib logger configured with a consistent format."""
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FMT, datefmt="%H:%M:%S"))
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
    return logger


@dataclass
class QueryRecord:
    """Outcome of a single query in a batch run."""

    name: str
    status: str
    ok: bool
    detail: str = ""


@dataclass
class SessionSummary:
    """Accumulates query outcomes across one CLI session."""

    records: list[QueryRecord] = field(default_factory=list)

    def record(self, name: str, status: str, *, ok: bool, detail: str = "") -> QueryRecord:
        entry = QueryRecord(name=name, status=status, ok=ok, detail=detail)
        self.records.append(entry)
        return entry

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.records if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.records if not r.ok)

    def report(self) -> str:
        """Format a human-readable summary block."""
        lines: list[str] = ["", "Session Summary", "=" * 40]
        for rec in self.records:
            line = f"{rec.name}: {rec.status}"
            if rec.detail:
                line += f"  ({rec.detail})"
            lines.append(line)
        lines.append("-" * 40)
        lines.append(f"{self.succeeded} ok  {self.failed} failed")
        lines.append("=" * 40)
        return "\n".join(lines)
