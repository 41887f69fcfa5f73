"""
Configuration file loading utilities.

This module handles the low-level loading and parsing of the TOML files a
diagnosis run reads: the main spotter configuration, the measurement
environment description and the problem hierarchy.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..validation import ErrorSeverity, handle_config_error

logger = logging.getLogger(__name__)


def load_toml_file(file_path: Path, description: str = "configuration file") -> Dict[str, Any]:
    """
    Load and parse a TOML file with error handling.

    Args:
        file_path: Path to the TOML file to load
        description: Human-readable description for error messages

    Returns:
        Parsed TOML data as a dictionary

    Raises:
        FileNotFoundError: If the file doesn't exist
        tomllib.TOMLDecodeError: If the file is malformed
    """
    logger.info(f"Loading {description} from: {file_path}")

    if not file_path.exists():
        logger.error(f"{description} not found: {file_path}")
        raise FileNotFoundError(f"{description} not found: {file_path}")

    try:
        with open(file_path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        handle_config_error(
            error=e,
            context=f"parsing {description}",
            severity=ErrorSeverity.CRITICAL,
            reraise=True,
            logger=logger
        )
        raise


def load_main_config(config_path: Path) -> Dict[str, Any]:
    """Load the main spotter configuration file."""
    return load_toml_file(config_path, "spotter configuration file")


def load_environment_config(environment_path: Path) -> List[Dict[str, Any]]:
    """
    Load the measurement environment description.

    Returns:
        List of raw satellite descriptor tables
    """
    environment_data = load_toml_file(environment_path, "measurement environment file")
    return environment_data.get("satellites", [])


def resolve_path(value: Optional[str], config_dir: Path) -> Optional[Path]:
    """Resolve a path from the config file relative to the file's directory."""
    if not value:
        return None
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = config_dir / path
    return path
