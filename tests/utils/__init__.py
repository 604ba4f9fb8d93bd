"""Common utilities for tests."""

from pathlib import Path


def get_test_data_dir() -> Path:
    """Return path to the test data directory.

    This is the single source of truth for test data location,
    used by both unittest TestCases and pytest fixtures.
    """
    return Path(__file__).parent.parent / "fixtures" / "data"


def square(x0: float, y0: float, size: float = 10.0) -> list[list[tuple[float, float]]]:
    """Return a single-ring geometry for the axis-aligned square at ``(x0, y0)``."""
    return [[(x0, y0), (x0, y0 + size), (x0 + size, y0 + size), (x0 + size, y0)]]
