"""
The problem hierarchy: loading it, building its controllers and walking it.
"""

from .factory import build_controllers
from .loader import default_hierarchy, load_hierarchy, parse_node
from .traversal import descendants, walk_hierarchy

__all__ = [
    "build_controllers",
    "default_hierarchy",
    "load_hierarchy",
    "parse_node",
    "descendants",
    "walk_hierarchy",
]
