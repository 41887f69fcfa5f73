"""
Configuration management for perfspotter.

This package loads the spotter configuration and the measurement environment
from TOML files, validates them into dataclasses and caches the active
configuration.
"""

from .loader import load_toml_file, resolve_path
from .manager import (
    clear_config_cache,
    get_config,
    get_config_path,
    is_config_loaded,
    load_environment,
    set_config_path,
)
from .validators import (
    validate_environment_config,
    validate_spotter_config,
    validate_workload_config,
)

__all__ = [
    "load_toml_file",
    "resolve_path",
    "clear_config_cache",
    "get_config",
    "get_config_path",
    "is_config_loaded",
    "load_environment",
    "set_config_path",
    "validate_environment_config",
    "validate_spotter_config",
    "validate_workload_config",
]
