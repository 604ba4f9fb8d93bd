"""YAML helpers"""

import typing as t
from collections import defaultdict

import yaml
from munch import Munch

from tzlocate.utils.data_utils import NotSpecified


def yaml_dump_cozy(data, stream=None, **kwargs) -> str | None:
    """Dump data to YAML, rendering Munch and defaultdict as plain mappings.

    Args:
        data: Python data structure to dump to YAML
        stream: File-like object to write to (or None to return string)
        **kwargs: Additional arguments passed to yaml.dump()

    Returns:
        YAML string if stream is None, otherwise None

    Example:
        >>> print(yaml_dump_cozy(Munch(regions=3)), end="")
        regions: 3
    """

    class CozyDumper(yaml.SafeDumper):
        """YAML dumper that knows about dict subclasses."""

    def _represent_plain_dict(dumper, data):
        return dumper.represent_dict(dict(data))

    CozyDumper.add_representer(Munch, _represent_plain_dict)
    CozyDumper.add_representer(defaultdict, _represent_plain_dict)

    kwargs.setdefault("sort_keys", False)
    return yaml.dump(data, stream, Dumper=CozyDumper, **kwargs)


def yaml_safe_load_file(fname: str, default: t.Any = NotSpecified) -> t.Any:
    """Load YAML content from a file safely.

    If ``default`` is given, it is returned when the file does not exist.
    """
    try:
        with open(fname, "r", encoding="utf-8") as fh:
            return yaml.safe_load(fh)
    except FileNotFoundError as e:
        if default is not NotSpecified:
            return default
        raise RuntimeError(f"Failed to load YAML file '{fname}': {e}") from e
    except Exception as e:
        raise RuntimeError(f"Failed to load YAML file '{fname}': {e}") from e
