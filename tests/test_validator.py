from __future__ import annotations

import pytest

from sparql_console.validator import (
    ErrorSpan,
    Invalid,
    NESTED_TOO_DEEP,
    ParserError,
    Valid,
    format_error,
    is_submittable,
    rdflib_checker,
    validate,
)

GOOD = "SELECT ?s ?p WHERE { ?s ?p ?o } LIMIT 10"


def _checker(error: ParserError | None):
    return lambda query: error


@pytest.mark.parametrize(
    "query",
    [
        GOOD,
        "PREFIX cdm: <http://publications.europa.eu/ontology/cdm#>\n"
        "SELECT ?work WHERE {\n  ?work cdm:work_has_resource-type ?type .\n}",
        "ASK { ?s ?p ?o }",
        "INSERT DATA { <http://ex.org/a> <http://ex.org/b> <http://ex.org/c> }",
    ],
)
def test_valid_queries_have_no_span(query):
    result = validate(query)
    assert result == Valid()
    assert result.valid


def test_syntax_error_highlights_whole_line():
    query = "SELECT ?s WHERE { ?s ?p }"
    result = validate(query)
    assert isinstance(result, Invalid)
    assert result.message
    assert result.span == ErrorSpan(1, 0, 1, len(query))


def test_multiline_syntax_error_points_at_a_line():
    query = "SELECT ?s\nWHERE {\n  ?s ?p ?o\n  FILTER(\n}"
    result = validate(query)
    assert isinstance(result, Invalid)
    span = result.span
    assert span is not None
    assert span.start_line == span.end_line
    assert span.start_column == 0
    assert span.end_column == len(query.splitlines()[span.start_line - 1])


def test_undeclared_prefix_is_invalid_without_span():
    result = validate("SELECT ?s WHERE { ?s foo:bar ?o }")
    assert isinstance(result, Invalid)
    assert "foo" in result.message
    assert result.span is None


@pytest.mark.parametrize(
    "query",
    [
        "SELECT * WHERE { FILTER(" + "(" * 200 + "1" + ")" * 200 + ") }",
        "SELECT * WHERE " + "{ " * 200 + "?s ?p ?o" + " }" * 200,
    ],
)
def test_deep_nesting_is_reported_not_raised(query):
    result = validate(query)
    assert result == Invalid(message=NESTED_TOO_DEEP, span=None)
    assert not is_submittable(query, result)


def test_rdflib_checker_converts_column_to_zero_based():
    error = rdflib_checker("SELECT ?s WHERE { ?s ?p }")
    assert error is not None
    assert error.first_line == 1
    assert error.first_column is not None and error.first_column >= 0
    assert error.last_line is None


def test_start_and_end_location_gives_exact_span():
    error = ParserError("Parse error on line 2", first_line=2, first_column=3, last_line=2, last_column=9)
    result = validate("SELECT *\nWHERE { ?s ?p }", checker=_checker(error))
    assert result == Invalid(message="Parse error on line 2", span=ErrorSpan(2, 3, 2, 9))
    assert result.span.editor_range() == ((1, 3), (1, 9))


def test_start_line_only_gives_whole_line():
    error = ParserError("bad", first_line=2, first_column=4)
    result = validate("SELECT *\nWHERE { oops }", checker=_checker(error))
    assert result.span == ErrorSpan(2, 0, 2, len("WHERE { oops }"))


def test_no_location_keeps_message():
    result = validate("whatever", checker=_checker(ParserError("Unknown namespace prefix : x")))
    assert result == Invalid(message="Unknown namespace prefix : x", span=None)


def test_checker_is_swappable():
    calls = []

    def checker(query):
        calls.append(query)
        return None

    assert validate("anything at all", checker=checker) == Valid()
    assert calls == ["anything at all"]


@pytest.mark.parametrize(
    "query, result, expected",
    [
        (GOOD, Valid(), True),
        ("", Valid(), False),
        ("  \n\t", Valid(), False),
        (GOOD, Invalid(message="bad"), False),
    ],
)
def test_is_submittable(query, result, expected):
    assert is_submittable(query, result) is expected


def test_format_error_underlines_span():
    query = "SELECT *\nWHERE { oops }"
    result = Invalid(message="Expected triple", span=ErrorSpan(2, 8, 2, 12))
    text = format_error(query, result)
    assert text.splitlines() == [
        "Syntax error: Expected triple",
        "2 | WHERE { oops }",
        "  |         ^^^^",
    ]


def test_format_error_without_span_is_message_only():
    assert format_error("x", Invalid(message="nope")) == "Syntax error: nope"
    assert format_error("x", Valid()) == ""
