"""
Task execution for the perfspotter package.

This module provides the managed thread pools used for satellite fan-out
and for running diagnosis jobs in the background.
"""

from .thread_pool import ManagedThreadPoolExecutor, ThreadPoolConfig

__all__ = [
    "ManagedThreadPoolExecutor",
    "ThreadPoolConfig",
]
