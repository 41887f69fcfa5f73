"""
Loading the problem hierarchy from TOML.

The hierarchy file holds one `[root]` table. Every node has a `name`, an
optional `extension` naming its detection controller, an optional `id`, a
`config` table and a `children` array of nodes of the same shape:

    [root]
    name = "Performance Problems"
    config = { detectable = false }

    [[root.children]]
    name = "Ramp"
    extension = "ramp"

A missing or invalid file falls back to a hierarchy holding a single
non-detectable root, so a run still produces an (empty) report.
"""

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Set

from ..config import load_toml_file
from ..models import DETECTABLE_KEY, ProblemNode
from ..validation import ErrorSeverity, ValidationError, handle_config_error, validate_non_empty_string

logger = logging.getLogger(__name__)

DEFAULT_ROOT_NAME = "Root"


def default_hierarchy() -> ProblemNode:
    return ProblemNode(name=DEFAULT_ROOT_NAME, config={DETECTABLE_KEY: False})


def parse_node(data: Dict[str, Any], path: str, seen_ids: Set[str]) -> ProblemNode:
    """
    Build a ProblemNode (and its subtree) from a raw TOML table.

    Raises:
        ValidationError: If the node or one of its descendants is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError(f"{path} must be a table", field_name=path, value=data)

    name = validate_non_empty_string(data.get("name"), field_name=f"{path}.name")
    config = data.get("config", {})
    if not isinstance(config, dict):
        raise ValidationError(f"{path}.config must be a table", field_name=f"{path}.config", value=config)

    node = ProblemNode(name=name, extension_name=str(data.get("extension", "")).strip(), config=dict(config))
    if "id" in data:
        node.unique_id = validate_non_empty_string(str(data["id"]), field_name=f"{path}.id")
    if node.unique_id in seen_ids:
        raise ValidationError(
            f"Duplicate problem id '{node.unique_id}' at {path}", field_name=f"{path}.id", value=node.unique_id
        )
    seen_ids.add(node.unique_id)

    if node.detectable and not node.extension_name:
        raise ValidationError(
            f"Detectable problem '{name}' at {path} names no extension",
            field_name=f"{path}.extension",
        )

    for index, child in enumerate(data.get("children", [])):
        node.children.append(parse_node(child, f"{path}.children[{index}]", seen_ids))
    return node


def load_hierarchy(hierarchy_file: Optional[Path]) -> ProblemNode:
    """Load the hierarchy, falling back to `default_hierarchy()` on any problem."""
    if hierarchy_file is None:
        logger.warning("No problem hierarchy configured, using the default hierarchy")
        return default_hierarchy()

    try:
        data = load_toml_file(Path(hierarchy_file), "problem hierarchy file")
        if "root" not in data:
            raise ValidationError("Problem hierarchy has no [root] table", field_name="root")
        root = parse_node(data["root"], "root", set())
    except Exception as e:
        handle_config_error(
            error=e,
            context="loading problem hierarchy, using the default hierarchy",
            severity=ErrorSeverity.WARNING,
            reraise=False,
            logger=logger,
        )
        return default_hierarchy()

    logger.info(f"Loaded problem hierarchy with {sum(1 for _ in root.walk())} node(s)")
    return root
