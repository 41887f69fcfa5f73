"""
Configuration management and singleton pattern.

This module provides the main configuration loading interface. The spotter
configuration is loaded once and cached; the diagnosis job service points the
cache at the configuration file of each job it starts.
"""

import logging
from pathlib import Path
from typing import Optional

from ..models import EnvironmentConfig, SpotterConfig
from ..validation import ErrorSeverity, handle_config_error
from .loader import load_environment_config, load_main_config
from .validators import validate_environment_config, validate_spotter_config

logger = logging.getLogger(__name__)

# --- Global Singleton for Configuration ---

_CONFIG: Optional[SpotterConfig] = None

# Default path to the main configuration file, relative to the repository root.
_CONFIG_FILE_PATH = Path(__file__).parent.parent.parent.parent / "conf" / "spotter.toml"


def set_config_path(config_path: Path) -> None:
    """
    Set the configuration file path and drop any cached configuration.

    Args:
        config_path: Path to the main spotter TOML file
    """
    global _CONFIG_FILE_PATH, _CONFIG
    _CONFIG_FILE_PATH = Path(config_path)
    _CONFIG = None
    logger.info(f"Configuration path set to: {config_path}")


def get_config_path() -> Path:
    return _CONFIG_FILE_PATH


def clear_config_cache() -> None:
    """
    Clear the cached configuration, forcing a reload on next access.
    """
    global _CONFIG
    _CONFIG = None
    logger.debug("Configuration cache cleared")


def _load_config(config_path: Path) -> SpotterConfig:
    """
    Load and validate the spotter configuration.

    Raises:
        FileNotFoundError: If the configuration file is missing
        ValidationError: If configuration validation fails
        tomllib.TOMLDecodeError: If the TOML file is malformed
    """
    try:
        config_data = load_main_config(config_path)
        config = validate_spotter_config(config_data, config_path.parent)
        logger.info(
            f"Loaded spotter configuration: max_users={config.workload.max_users}, "
            f"pruning_policy={config.pruning_policy.value}, result_dir={config.result_dir}"
        )
        return config
    except FileNotFoundError as e:
        handle_config_error(
            error=e,
            context="loading configuration file",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise
    except Exception as e:
        handle_config_error(
            error=e,
            context="processing configuration",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def get_config() -> SpotterConfig:
    """
    Get the spotter configuration, loading it if necessary.

    Returns:
        The cached SpotterConfig instance
    """
    global _CONFIG
    if _CONFIG is None:
        _CONFIG = _load_config(_CONFIG_FILE_PATH)
    return _CONFIG


def is_config_loaded() -> bool:
    return _CONFIG is not None


def load_environment(config: SpotterConfig) -> EnvironmentConfig:
    """
    Load the measurement environment named by `config`.

    A run without an environment file has no satellites at all, which is
    only useful together with `omit_experiments`.
    """
    if config.environment_file is None:
        logger.warning("No measurement environment file configured, running without satellites")
        return EnvironmentConfig()
    try:
        return validate_environment_config(load_environment_config(config.environment_file))
    except Exception as e:
        handle_config_error(
            error=e,
            context="loading measurement environment",
            severity=ErrorSeverity.ERROR,
            reraise=True,
            logger=logger
        )
        raise
