import json

import pytest

from autorenew_reconciler.config import (
    DEFAULT_DEALS_BASE_URL,
    ConfigurationError,
    credentials_from_env,
    load_configuration,
)

ENVIRONMENT = {
    "NC_APIKEY": "nc-key",
    "NC_USER": "webhub",
    "NC_IP": "203.0.113.7",
    "PIPELINE_DEALS_API_KEY": "pd-key",
    "NAMECHEAP_USERNAME": "ops",
    "NAMECHEAP_PASSWORD": "hunter2",
}


def test_load_configuration_reads_json_and_yaml(tmp_path) -> None:
    json_path = tmp_path / "settings.json"
    json_path.write_text(json.dumps({"deals": {"page_range": "inclusive"}}), encoding="utf-8")
    yaml_path = tmp_path / "settings.yaml"
    yaml_path.write_text("registrar:\n  page_size: 50\n  requests_per_minute: 20\n", encoding="utf-8")

    assert load_configuration(json_path) == {"deals": {"page_range": "inclusive"}}
    assert load_configuration(yaml_path) == {"registrar": {"page_size": 50, "requests_per_minute": 20}}


def test_load_configuration_treats_empty_yaml_as_empty_mapping(tmp_path) -> None:
    path = tmp_path / "empty.yml"
    path.write_text("", encoding="utf-8")

    assert load_configuration(path) == {}


@pytest.mark.parametrize("name, content", [("missing.json", None), ("settings.toml", "x = 1"), ("list.json", "[1, 2]")])
def test_load_configuration_rejects_bad_files(tmp_path, name, content) -> None:
    path = tmp_path / name
    if content is not None:
        path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_configuration(path)


def test_credentials_from_env_builds_all_credentials() -> None:
    credentials = credentials_from_env(ENVIRONMENT)

    assert credentials.registrar.api_key == "nc-key"
    assert credentials.registrar.account == "webhub"
    assert credentials.registrar.client_ip == "203.0.113.7"
    assert credentials.deals.base_url == DEFAULT_DEALS_BASE_URL
    assert credentials.browser is not None and credentials.browser.username == "ops"


def test_credentials_from_env_names_missing_variables() -> None:
    environ = dict(ENVIRONMENT)
    del environ["NC_IP"]
    del environ["NAMECHEAP_PASSWORD"]

    with pytest.raises(ConfigurationError) as excinfo:
        credentials_from_env(environ)

    assert "NC_IP" in str(excinfo.value)
    assert "NAMECHEAP_PASSWORD" in str(excinfo.value)


def test_browser_credentials_are_optional_when_not_required() -> None:
    environ = {key: value for key, value in ENVIRONMENT.items() if not key.startswith("NAMECHEAP_")}
    environ["PIPELINE_DEALS_API_URL"] = "https://crm.example.test/api/v3/"

    credentials = credentials_from_env(environ, require_browser=False)

    assert credentials.browser is None
    assert credentials.deals.base_url == "https://crm.example.test/api/v3"
