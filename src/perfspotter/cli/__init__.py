"""
Command-line interface for the perfspotter package.

This module provides the main CLI entry point for the diagnosis engine.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
