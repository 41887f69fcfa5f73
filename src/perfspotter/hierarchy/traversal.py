"""
Order in which the problem hierarchy is investigated.

The walk is depth-first and pre-order. Grouping nodes (non-detectable) are
never investigated themselves but always lead into their children. Whether
the children of an investigated node are visited is decided by the
PruningPolicy.
"""

import logging
from typing import Callable, List

from ..models import ProblemNode, PruningPolicy

logger = logging.getLogger(__name__)


def descendants(node: ProblemNode) -> List[ProblemNode]:
    return [d for child in node.children for d in child.walk()]


def walk_hierarchy(
    root: ProblemNode,
    investigate: Callable[[ProblemNode], bool],
    policy: PruningPolicy = PruningPolicy.PRUNE_AND_MARK,
    on_pruned: Callable[[ProblemNode], None] = lambda node: None,
    before_node: Callable[[ProblemNode], None] = lambda node: None,
) -> List[ProblemNode]:
    """
    Walk the hierarchy below (and including) `root`.

    Args:
        root: Root of the hierarchy
        investigate: Runs detection for a detectable node, returns the verdict
        policy: Which children of a not-detected node are visited
        on_pruned: Called for each descendant of a pruned node under PRUNE_AND_MARK
        before_node: Called before each node is handled; may raise to stop the walk

    Returns:
        The investigated nodes, in investigation order
    """
    investigated = []
    stack = [root]
    while stack:
        node = stack.pop()
        before_node(node)

        if not node.detectable:
            if node.is_root_cause:
                logger.debug(f"'{node.name}' is neither detectable nor has children")
            stack.extend(reversed(node.children))
            continue

        detected = investigate(node)
        investigated.append(node)

        if detected or policy is PruningPolicy.EXPLORE_ALL:
            stack.extend(reversed(node.children))
        elif node.children:
            logger.info(f"'{node.name}' not detected, skipping {len(descendants(node))} dependent problem(s)")
            if policy is PruningPolicy.PRUNE_AND_MARK:
                for pruned in descendants(node):
                    on_pruned(pruned)
    return investigated
