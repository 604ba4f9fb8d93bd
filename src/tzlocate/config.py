"""Manage app configuration loading and access."""

import os
import typing as t
from functools import lru_cache
from pathlib import Path

from munch import Munch, munchify

from tzlocate.errors import ConfigError
from tzlocate.utils.data_utils import NotSpecified, get_multi, merge_struct, recurse
from tzlocate.utils.fs_utils import project_root
from tzlocate.utils.trace_utils import str_exc
from tzlocate.utils.yaml_utils import yaml_safe_load_file


def _load_config(config_path: str, must_exist: bool = True, merge_into: dict | None = None) -> Munch[str, t.Any]:
    try:
        config_dict = yaml_safe_load_file(config_path, **({} if must_exist else {"default": {}})) or {}
    except RuntimeError as e:
        raise ConfigError(str_exc(e)) from e
    if not isinstance(config_dict, dict):
        raise ConfigError(f"Config file '{config_path}' must hold a mapping, got {type(config_dict).__name__}")
    if merge_into is not None:
        config_dict = merge_struct(merge_into, config_dict)
    return munchify(config_dict)


def _expand(value: t.Any) -> t.Any:
    return os.path.expandvars(os.path.expanduser(value)) if isinstance(value, str) else value


@lru_cache
def load_config() -> Munch[str, t.Any]:
    config_path = os.getenv("TZLOCATE_CONFIG") or project_root("config.yaml")
    config = _load_config(config_path)
    if config_override_path := os.getenv("TZLOCATE_CONFIG_OVERRIDE"):
        config = _load_config(config_override_path, merge_into=config)
    else:
        config_override_path = str(Path.home() / ".tzlocate_config_override.yaml")
        config = _load_config(config_override_path, merge_into=config, must_exist=False)
    return recurse(config, _expand)


def get_config(datapath: str | None = None, default: t.Any = NotSpecified) -> t.Any:
    config = load_config()
    return get_multi(config, datapath, default) if datapath else config
