from __future__ import annotations

import asyncio
import urllib.error
import urllib.parse

import pytest

from conftest import FakeResponse, UnreadableBody, http_error
from sparql_console.payload import Escaped, Markup, PlainText, Tabular
from sparql_console.result import HttpFailure, Success, TransportFailure
from sparql_console.sparql.client import submit, submit_sync
from sparql_console.sparql.queries import ConfigurationError, SubmissionParameters

ENDPOINT = "https://publications.europa.eu/webapi/rdf/sparql"
QUERY = "SELECT ?s ?p WHERE { ?s ?p ?o } LIMIT 1"


def _run(params: SubmissionParameters | None = None, endpoint: str = ENDPOINT, **kwargs):
    return asyncio.run(submit(QUERY, params or SubmissionParameters(), endpoint, **kwargs))


def test_json_response_yields_tabular(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse(
        '{"results":{"bindings":[{"s":{"value":"a"},"p":{"value":"b"}}]}}',
        content_type="application/sparql-results+json",
    ))
    outcome = _run()
    assert outcome == Success(
        content_type="application/sparql-results+json",
        payload=Tabular(columns=("s", "p"), rows=({"s": "a", "p": "b"},)),
    )


def test_empty_bindings_is_success_not_error(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse(
        '{"head":{"vars":["s"]},"results":{"bindings":[]}}',
        content_type="application/sparql-results+json",
    ))
    outcome = _run()
    assert isinstance(outcome, Success)
    assert outcome.payload.is_empty


def test_request_is_single_form_post(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("ok", content_type="text/plain"))
    _run(SubmissionParameters(default_graph_uri="", timeout_millis=1000, debug=True), timeout=12)

    assert len(fake_urlopen.requests) == 1
    req = fake_urlopen.last
    assert req.full_url == ENDPOINT
    assert req.get_method() == "POST"
    assert req.get_header("Content-type") == "application/x-www-form-urlencoded"
    fields = urllib.parse.parse_qsl(req.data.decode("utf-8"), keep_blank_values=True)
    assert [name for name, _ in fields] == ["query", "format", "timeout", "strict", "debug", "report"]
    assert dict(fields)["debug"] == "true"
    assert fake_urlopen.timeouts == [12]


def test_http_500_short_circuits_without_reading_body(fake_urlopen):
    fake_urlopen.replies.append(http_error(ENDPOINT, 500, fp=UnreadableBody(b"<html>stack trace</html>")))
    assert _run() == HttpFailure(status_code=500)


def test_http_404_is_http_failure(fake_urlopen):
    fake_urlopen.replies.append(http_error(ENDPOINT, 404, "Not Found"))
    outcome = _run()
    assert outcome == HttpFailure(status_code=404)
    assert outcome.describe() == "HTTP error! Status: 404"


def test_network_error_is_transport_failure(fake_urlopen):
    fake_urlopen.replies.append(urllib.error.URLError("Name or service not known"))
    outcome = _run()
    assert isinstance(outcome, TransportFailure)
    assert "Name or service not known" in outcome.message


def test_timeout_is_transport_failure(fake_urlopen):
    fake_urlopen.replies.append(TimeoutError("read timed out"))
    outcome = _run(timeout=5)
    assert outcome == TransportFailure(message="SPARQL timeout after 5s")


def test_declared_json_that_does_not_parse_is_transport_failure(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("{\"results\": ", content_type="application/json"))
    outcome = _run()
    assert isinstance(outcome, TransportFailure)
    assert "Invalid JSON" in outcome.message


def test_html_format_forces_markup(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("<p>hi</p>", content_type="text/plain"))
    outcome = _run(SubmissionParameters(result_format="text/html"))
    assert outcome.payload == Markup(html="<p>hi</p>")


def test_xml_is_escaped(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("<a>&\"'</a>", content_type="application/xml"))
    assert _run().payload == Escaped(text="&lt;a&gt;&amp;&quot;&#039;&lt;/a&gt;")


def test_csv_is_plain_text_and_honours_charset(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("s\n\xe9".encode("latin-1"), content_type="text/csv; charset=ISO-8859-1"))
    assert _run().payload == PlainText(text="s\né")


def test_bad_endpoint_raises_before_io(fake_urlopen):
    with pytest.raises(ConfigurationError):
        _run(endpoint="nowhere")
    assert fake_urlopen.requests == []


def test_submit_sync_matches_async(fake_urlopen):
    fake_urlopen.replies.append(FakeResponse("plain", content_type="text/plain"))
    outcome = submit_sync(QUERY, SubmissionParameters(), ENDPOINT)
    assert outcome == Success(content_type="text/plain", payload=PlainText(text="plain"))
