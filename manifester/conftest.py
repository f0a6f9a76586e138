"""Shared pytest fixtures for the manifester test modules."""

import json

import pytest
import yaml

from manifester.places.places_config import CountryCodeTable, PlaceRegistry, PlacesDocument

COUNTRY_CODE_ROWS = [
    {"name": "Japan", "alpha-2": "JP", "alpha-3": "JPN"},
    {"name": "Singapore", "alpha-2": "SG", "alpha-3": "SGP"},
    {"name": "Hong Kong", "alpha-2": "HK", "alpha-3": "HKG"},
    {"name": "United Kingdom", "alpha-2": "GB", "alpha-3": "GBR"},
    {"name": "Vietnam", "alpha-2": "VN", "alpha-3": "VNM"},
]

JAPAN_CONFIG = {
    "places": {
        "Japan": {"Local": "日本", "Kyoto": "京都", "Osaka": None},
    },
    "trips": [
        {
            "name": "Kansai",
            "description": "Japan 2018",
            "cities": ["Kyoto", "Osaka"],
            "dates": ["2018/04"],
        },
    ],
}


@pytest.fixture
def country_codes():
    """Country-code table covering the fixtures' countries."""
    return CountryCodeTable({row["name"]: row["alpha-3"] for row in COUNTRY_CODE_ROWS})


@pytest.fixture
def country_codes_file(tmp_path):
    path = tmp_path / "cca3.json"
    path.write_text(json.dumps(COUNTRY_CODE_ROWS), encoding="utf-8")
    return path


@pytest.fixture
def japan_config():
    """A fresh copy of the two-location Japan configuration."""
    return json.loads(json.dumps(JAPAN_CONFIG))


@pytest.fixture
def make_registry(country_codes):
    """Build a PlaceRegistry from a plain configuration dict."""
    def _make(config):
        return PlaceRegistry.from_config(PlacesDocument.model_validate(config), country_codes)
    return _make


@pytest.fixture
def write_yaml(tmp_path):
    """Write a configuration dict as YAML and return its path."""
    def _write(config, name="odyssey.yaml"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(config, allow_unicode=True), encoding="utf-8")
        return path
    return _write
