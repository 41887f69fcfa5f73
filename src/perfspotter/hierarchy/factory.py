"""
Creating the detection controllers of a hierarchy.
"""

import logging
from typing import Dict

from ..context import SpotterContext
from ..detection import DetectionController, ExperimentReuser
from ..extensions import ExtensionRegistry
from ..models import ProblemNode

logger = logging.getLogger(__name__)


def build_controllers(
    root: ProblemNode, context: SpotterContext, registry: ExtensionRegistry
) -> Dict[str, DetectionController]:
    """
    Create and configure a controller for every detectable node.

    Controllers with the ExperimentReuser capability are attached to the
    controller of their parent node, if the parent has one.

    Returns:
        Controllers keyed by problem id

    Raises:
        ExtensionResolutionError: If a node names an unknown controller
    """
    controllers: Dict[str, DetectionController] = {}
    for node in root.walk():
        if not node.detectable:
            continue
        factory = registry.resolve("controller", node.extension_name)
        controller = factory(node, context)
        controller.load_properties()
        controllers[node.unique_id] = controller

    for node in root.walk():
        parent = controllers.get(node.unique_id)
        if parent is None:
            continue
        for child in node.children:
            controller = controllers.get(child.unique_id)
            if isinstance(controller, ExperimentReuser):
                parent.add_reuser(controller)
                logger.debug(f"'{child.name}' reuses the experiments of '{node.name}'")

    logger.info(f"Created {len(controllers)} detection controller(s)")
    return controllers
