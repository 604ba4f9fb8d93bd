"""Root conftest.py with shared fixtures across all test types."""

import pytest

from tzlocate.config import load_config
from tzlocate.geo.service import default_service

from .utils import get_test_data_dir


@pytest.fixture
def test_data_dir():
    """Return path to the test data directory."""
    return get_test_data_dir()


@pytest.fixture
def zones_geojson(test_data_dir):
    """Return path to the small GeoJSON zone set used across tests."""
    return test_data_dir / "zones.geojson"


@pytest.fixture
def configured(tmp_path, monkeypatch, zones_geojson):
    """Point the config layer at a temporary config using the fixture zones.

    Returns the config file path so tests can rewrite it.
    """
    config_path = tmp_path / "config.yaml"
    config_path.write_text(
        "index:\n"
        "  backend: str\n"
        "  node_capacity: 4\n"
        "resolver:\n"
        "  ambiguity: report\n"
        "data:\n"
        f"  geojson: {zones_geojson.as_posix()}\n"
        "  zone_property: tzid\n"
        "  on_error: raise\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TZLOCATE_CONFIG", str(config_path))
    monkeypatch.delenv("TZLOCATE_CONFIG_OVERRIDE", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    load_config.cache_clear()
    default_service.cache_clear()
    yield config_path
    load_config.cache_clear()
    default_service.cache_clear()
