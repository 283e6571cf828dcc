from __future__ import annotations

import pytest

from sparql_console.config import (
    DEFAULT_ENDPOINT,
    ConsoleConfig,
    load_config,
    resolve_environment,
)
from sparql_console.sparql.queries import DEFAULT_FORMAT, ConfigurationError

RELAYED = "http://localhost:8080/proxy?url=https%3A%2F%2Fpublications.europa.eu%2Fwebapi%2Frdf%2Fsparql"


def test_no_path_gives_defaults():
    result = load_config(None)
    assert result.ok
    config = result.data
    assert config.endpoint == DEFAULT_ENDPOINT
    assert config.defaults.result_format == DEFAULT_FORMAT
    assert config.share_timeout_millis == 30000
    assert config.catalog.base_url is None


def test_yaml_overrides(tmp_path):
    path = tmp_path / "console.yaml"
    path.write_text(
        "endpoint: http://localhost:3030/ds/sparql\n"
        "client_timeout: 20\n"
        "defaults:\n"
        "  format: text/csv\n"
        "  timeout: 5000\n"
        "  strict: true\n"
        "relay:\n"
        "  port: 9090\n"
        "  path: relay\n"
        "catalog:\n"
        "  base_url: https://queries.example.org/cellar\n"
        "  retry: {attempts: 5, delay_seconds: 0}\n",
        encoding="utf-8",
    )
    result = load_config(path)
    assert result.ok, result
    config = result.data
    assert config.endpoint == "http://localhost:3030/ds/sparql"
    assert config.client_timeout == 20
    assert config.defaults.result_format == "text/csv"
    assert config.defaults.timeout_millis == 5000
    assert config.defaults.strict is True
    assert config.defaults.default_graph_uri is None
    assert config.relay.base_url == "http://localhost:9090/relay"
    assert config.catalog.base_url == "https://queries.example.org/cellar/"
    assert config.catalog.retry.attempts == 5


def test_missing_file_fails(tmp_path):
    result = load_config(tmp_path / "absent.yaml")
    assert not result.ok
    assert "not found" in result.error


@pytest.mark.parametrize(
    "text, fragment",
    [
        ("endpoint: [unclosed\n", "YAML parse error"),
        ("- just\n- a list\n", "mapping"),
        ("endpoint: gopher://old.example\n", "Config value error"),
        ("defaults:\n  timeout: soon\n", "Config value error"),
        ("relay:\n  port: not-a-port\n", "Config structure error"),
    ],
)
def test_bad_config_fails(tmp_path, text, fragment):
    path = tmp_path / "console.yaml"
    path.write_text(text, encoding="utf-8")
    result = load_config(path)
    assert not result.ok
    assert fragment in result.error


def test_prod_submits_to_endpoint_directly():
    assert ConsoleConfig().submission_endpoint("prod") == DEFAULT_ENDPOINT


def test_dev_submits_through_relay():
    assert ConsoleConfig().submission_endpoint("dev") == RELAYED


def test_environment_variable_selects_dev(monkeypatch):
    monkeypatch.setenv("ENVIRONMENT", "DEV")
    assert resolve_environment() == "dev"
    assert ConsoleConfig().submission_endpoint() == RELAYED


def test_unknown_environment_is_configuration_error():
    with pytest.raises(ConfigurationError):
        resolve_environment("staging")
