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

"""Display representations produced by the response dispatcher.

Pure data. The shell decides how each variant is drawn; nothing here
touches a UI toolkit.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import ClassVar

NO_RESULTS = "No results found."


@dataclass(frozen=True, slots=True)
class Tabular:
    """SPARQL JSON bindings flattened to string cells.

    Zero rows is the empty-result sentinel; the shell shows ``NO_RESULTS``.
    """

    columns: tuple[str, ...]
    rows: tuple[dict[str, str], ...]
    kind: ClassVar[str] = "tabular"

    @property
    def is_empty(self) -> bool:
        return not self.rows


@dataclass(frozen=True, slots=True)
class Markup:
    """Server-rendered HTML, ready to embed."""

    html: str
    kind: ClassVar[str] = "markup"


@dataclass(frozen=True, slots=True)
class Escaped:
    """HTML-escaped text shown preformatted (XML responses)."""

    text: str
    kind: ClassVar[str] = "escaped"


@dataclass(frozen=True, slots=True)
class PlainText:
    """Raw text shown preformatted (CSV and everything else)."""

    text: str
    kind: ClassVar[str] = "plain"


RenderedPayload = Tabular | Markup | Escaped | PlainText
