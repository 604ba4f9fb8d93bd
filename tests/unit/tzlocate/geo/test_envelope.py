"""Tests for the Envelope value type."""

import math

import pytest

from tzlocate.geo.envelope import Envelope

pytestmark = pytest.mark.unit


def test_of_points():
    env = Envelope.of_points([(3, -1), (0, 4), (2, 2)])
    assert env == Envelope(0, -1, 3, 4)


def test_of_points_empty():
    assert Envelope.of_points([]) is None


def test_contains_point_is_closed():
    env = Envelope(0, 0, 10, 10)
    assert env.contains_point(0, 0)
    assert env.contains_point(10, 5)
    assert env.contains_point(5, 5)
    assert not env.contains_point(10.0001, 5)
    assert not env.contains_point(-1, -1)


def test_intersects_touching_edges():
    assert Envelope(0, 0, 10, 10).intersects(Envelope(10, 10, 20, 20))
    assert not Envelope(0, 0, 10, 10).intersects(Envelope(10.5, 0, 20, 10))


def test_union_and_union_all():
    a = Envelope(0, 0, 1, 1)
    b = Envelope(5, -2, 6, 0)
    assert a.union(b) == Envelope(0, -2, 6, 1)
    assert Envelope.union_all([a, b, Envelope(-1, 0, 0, 0)]) == Envelope(-1, -2, 6, 1)


def test_contains_envelope():
    outer = Envelope(0, 0, 10, 10)
    assert outer.contains(Envelope(1, 1, 10, 10))
    assert not outer.contains(Envelope(1, 1, 11, 10))


@pytest.mark.parametrize(
    "env, valid",
    [
        (Envelope(0, 0, 1, 1), True),
        (Envelope(2, 2, 2, 2), True),
        (Envelope(1, 0, 0, 1), False),
        (Envelope(0, 1, 1, 0), False),
        (Envelope(0, 0, math.inf, 1), False),
        (Envelope(math.nan, 0, 1, 1), False),
    ],
)
def test_is_valid(env, valid):
    assert env.is_valid is valid


def test_geometry_properties():
    env = Envelope.of_bounds((0, 2, 4, 8))
    assert env.center == (2.0, 5.0)
    assert env.width == 4
    assert env.height == 6
    assert env.area == 24
    assert env.bounds == (0.0, 2.0, 4.0, 8.0)
    assert Envelope.of_point(1, 2) == Envelope(1, 2, 1, 2)
