"""System test configuration and fixtures."""

import shutil

import pytest
from click.testing import CliRunner


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def temp_workspace(tmp_path, test_data_dir):
    """Copy the GeoJSON fixtures into a temporary workspace for system tests."""
    for f in test_data_dir.glob("*.geojson"):
        shutil.copy2(f, tmp_path)
    return tmp_path
