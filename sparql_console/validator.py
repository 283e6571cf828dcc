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

"""SPARQL syntax validator — static check before submission.

Synchronous, no network I/O. The parser sits behind ``SyntaxChecker``:
any callable returning ``None`` for a good query or a ``ParserError``
for a bad one. The default checker uses rdflib's SPARQL grammar.

Location convention (both ``ParserError`` and ``ErrorSpan``):
lines are 1-based, columns are 0-based.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from pyparsing import ParseBaseException
from rdflib.plugins.sparql.algebra import translateQuery, translateUpdate
from rdflib.plugins.sparql.parser import parseQuery, parseUpdate

from sparql_console.logger import get_logger

log = get_logger(__name__)


# ── Types ──────────────────────────────────────────────────────

@dataclass(frozen=True, slots=True)
class ParserError:
    """What a parser reports about a bad query. Any location may be missing."""

    message: str
    first_line: int | None = None
    first_column: int | None = None
    last_line: int | None = None
    last_column: int | None = None


@dataclass(frozen=True, slots=True)
class ErrorSpan:
    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def editor_range(self) -> tuple[tuple[int, int], tuple[int, int]]:
        """``((line, ch), (line, ch))`` with 0-based line indices."""
        return (
            (self.start_line - 1, self.start_column),
            (self.end_line - 1, self.end_column),
        )


@dataclass(frozen=True, slots=True)
class Valid:
    valid: bool = True


@dataclass(frozen=True, slots=True)
class Invalid:
    message: str
    span: ErrorSpan | None = None
    valid: bool = False


ValidationResult = Valid | Invalid

SyntaxChecker = Callable[[str], "ParserError | None"]


# ── rdflib checker ─────────────────────────────────────────────

def _from_parse_exception(exc: ParseBaseException) -> ParserError:
    # pyparsing columns are 1-based
    return ParserError(
        message=str(exc),
        first_line=exc.lineno,
        first_column=max(exc.col - 1, 0),
    )


NESTED_TOO_DEEP = "Query is nested too deeply to check"


def _check_grammar(query: str) -> ParserError | None:
    try:
        parsed = parseQuery(query)
    except ParseBaseException as query_exc:
        try:
            parsed_update = parseUpdate(query)
        except ParseBaseException as update_exc:
            best = update_exc if update_exc.loc > query_exc.loc else query_exc
            return _from_parse_exception(best)
        try:
            translateUpdate(parsed_update)
        except Exception as exc:  # noqa: BLE001 — rdflib raises bare Exception
            return ParserError(message=str(exc))
        return None

    try:
        translateQuery(parsed)
    except Exception as exc:  # noqa: BLE001 — rdflib raises bare Exception
        return ParserError(message=str(exc))
    return None


def rdflib_checker(query: str) -> ParserError | None:
    """Check grammar with rdflib, then translate to catch undeclared prefixes.

    Queries are tried first; if that fails the text is tried as an update
    request. The error reported is the one that got further into the text.
    pyparsing recurses per nesting level, so deep nesting is reported
    without a location rather than raised.
    """
    try:
        return _check_grammar(query)
    except RecursionError:
        log.warning("Recursion limit hit while checking a %d-character query", len(query))
        return ParserError(message=NESTED_TOO_DEEP)


# ── Validate ───────────────────────────────────────────────────

def _line_length(query: str, line: int) -> int:
    lines = query.splitlines()
    if 1 <= line <= len(lines):
        return len(lines[line - 1])
    return 0


def _span_for(query: str, error: ParserError) -> ErrorSpan | None:
    """Exact range when start and end lines are known, whole line when only start is."""
    if error.first_line and error.last_line:
        return ErrorSpan(
            start_line=error.first_line,
            start_column=error.first_column or 0,
            end_line=error.last_line,
            end_column=error.last_column or 0,
        )
    if error.first_line:
        return ErrorSpan(
            start_line=error.first_line,
            start_column=0,
            end_line=error.first_line,
            end_column=_line_length(query, error.first_line),
        )
    return None


def validate(query: str, checker: SyntaxChecker = rdflib_checker) -> ValidationResult:
    """Return ``Valid`` or ``Invalid`` with the parser's message and span."""
    error = checker(query)
    if error is None:
        return Valid()

    span = _span_for(query, error)
    log.info("SPARQL syntax error: %s", error.message.splitlines()[0] if error.message else "")
    return Invalid(message=error.message, span=span)


def is_submittable(query: str, result: ValidationResult) -> bool:
    """Submit is enabled only for a non-blank query whose latest check passed."""
    return result.valid and bool(query.strip())


def format_error(query: str, result: ValidationResult) -> str:
    """Render an ``Invalid`` result as message + offending lines with carets."""
    if result.valid:
        return ""

    lines = [f"Syntax error: {result.message}"]
    span = result.span
    if span is None:
        return "\n".join(lines)

    source = query.splitlines()
    width = len(str(span.end_line))
    for number in range(span.start_line, span.end_line + 1):
        if not 1 <= number <= len(source):
            continue
        text = source[number - 1]
        start = span.start_column if number == span.start_line else 0
        end = span.end_column if number == span.end_line else len(text)
        end = max(end, start + 1)
        lines.append(f"{number:>{width}} | {text}")
        lines.append(f"{'':>{width}} | {' ' * start}{'^' * (end - start)}")
    return "\n".join(lines)
