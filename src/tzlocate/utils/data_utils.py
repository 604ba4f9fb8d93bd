"""Common utility functions for data operations.

This module provides basic utility functions that are used across the project,
particularly for handling nested config dicts.
"""

import typing as t
from collections.abc import Iterable
from copy import deepcopy

from deepmerge import Merger


class NotSpecified:  # pylint: disable=too-few-public-methods
    """Sentinel class to distinguish between None and no default value provided."""


def get_multi(data, path: str | list[str], default=NotSpecified):
    """Get a value from nested dictionary using a dot-separated path.

    Args:
        data: Dictionary or nested dictionary to retrieve value from.
        path: Dot-separated string path (e.g., 'key1.key2.key3') or list of keys.
        default: Default value to return if path not found. If NotSpecified, raises exception.

    Returns:
        The value at the specified path.

    Raises:
        KeyError: If path not found and default is NotSpecified.
        TypeError: If intermediate value is not subscriptable.
    """
    if isinstance(path, str):
        path = path.split(".")
    try:
        return get_multi(data[path[0]], path[1:], default) if path else data
    except (KeyError, TypeError) as e:
        if default is NotSpecified:
            raise type(e)(f"{data=} {path=} {e!r}") from e
        return default


def listify(data):
    """Ensure data is a list."""
    if isinstance(data, list):
        return data
    if isinstance(data, Iterable) and not isinstance(data, (str, bytes)):
        return list(data)
    return [data]


T = t.TypeVar("T")


def recurse(data: T, func: t.Callable[[t.Any], t.Any], what: t.Iterable[str] = ("value",)) -> T:
    """Recursively transform data elements

    :param T data: any serializable input data
    :param t.Callable[[t.Any], t.Any] func: to transform data elements with
    :param tuple what: Possible items are "value" and "key"
    :return T: transformed new data instance
    >>> recurse({1:2, 3:4}, str, ('key',))
    {'1': 2, '3': 4}
    >>> recurse({1:2, 3:4}, str)
    {1: '2', 3: '4'}
    >>> recurse([1, 2, {3}], lambda x: x * 10)
    [10, 20, {30}]
    """
    what = set(listify(what))
    assert what and not what - {"key", "value"}, what

    def _recurse(data: T) -> T:
        def apply(val, is_key: bool = False):
            if is_key:
                return func(val) if "key" in what else val
            return _recurse(val) if "value" in what else val

        if isinstance(data, dict):
            return type(data)({apply(k, is_key=True): apply(v) for k, v in data.items()})
        if isinstance(data, (list, tuple, set)):
            return type(data)(apply(item) for item in data)
        return func(data) if "value" in what else data

    return _recurse(data)


def merge_struct(data1: T, data2: T) -> T:
    """
    Deep-merge two JSON-like structures.

    Rules:
      - dict + dict   => deepmerge-style recursive merge
      - anything else => take the 2nd value (data2)

    Returns a NEW structure; does not mutate inputs.
    """
    base = deepcopy(data1)  # deepmerge mutates the first argument
    _merger = Merger(
        # Per-type strategies
        [
            (dict, ["merge"]),  # recursively merge dicts
        ],
        # Fallback strategies (for non-dict types: lists, ints, etc.)
        ["override"],  # use value from data2
        # Type conflict strategies (int vs dict, list vs dict, etc.)
        ["override"],  # use value from data2
    )
    return _merger.merge(base, data2)
