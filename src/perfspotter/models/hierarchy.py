"""
Problem hierarchy data models.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional

# Node config key marking whether a node runs detection.
DETECTABLE_KEY = "detectable"


class PruningPolicy(Enum):
    """
    Decides which children of an investigated node are visited.

    PRUNE_AND_MARK: children of a not-detected node are skipped and every
        descendant is recorded as not detected.
    PRUNE: children of a not-detected node are skipped without recording.
    EXPLORE_ALL: every child is visited regardless of the parent's verdict.
    """

    PRUNE_AND_MARK = "prune_and_mark"
    PRUNE = "prune"
    EXPLORE_ALL = "explore_all"


@dataclass
class ProblemNode:
    """
    One candidate performance problem in the hierarchy.

    `extension_name` selects the detection controller handling the node.
    Nodes are built once when the hierarchy is loaded and are not
    modified during a run.
    """

    name: str
    extension_name: str = ""
    config: Dict[str, Any] = field(default_factory=dict)
    children: List["ProblemNode"] = field(default_factory=list)
    unique_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def detectable(self) -> bool:
        value = self.config.get(DETECTABLE_KEY, True)
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    @property
    def is_root_cause(self) -> bool:
        return not self.children

    def walk(self) -> Iterator["ProblemNode"]:
        """Yield this node and all its descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find(self, unique_id: str) -> Optional["ProblemNode"]:
        for node in self.walk():
            if node.unique_id == unique_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.unique_id,
            "name": self.name,
            "extension": self.extension_name,
            "config": dict(self.config),
            "children": [child.to_dict() for child in self.children],
        }
