"""
Building satellite adapters from the measurement environment description.
"""

import logging
from dataclasses import dataclass, field
from typing import List

from ..extensions import ExtensionRegistry
from ..models import EnvironmentConfig
from .base import InstrumentationAdapter, MeasurementAdapter, WorkloadAdapter

logger = logging.getLogger(__name__)


@dataclass
class MeasurementEnvironment:
    """Adapters for every satellite of a run, grouped by kind."""

    instrumentation: List[InstrumentationAdapter] = field(default_factory=list)
    measurement: List[MeasurementAdapter] = field(default_factory=list)
    workload: List[WorkloadAdapter] = field(default_factory=list)


def create_environment(config: EnvironmentConfig, registry: ExtensionRegistry) -> MeasurementEnvironment:
    """
    Instantiate one adapter per satellite descriptor.

    Raises:
        ExtensionResolutionError: If a descriptor names an unknown extension
    """
    environment = MeasurementEnvironment()
    for descriptor in config.satellites:
        factory = registry.resolve(descriptor.kind, descriptor.extension)
        adapter = factory(descriptor)
        getattr(environment, descriptor.kind).append(adapter)
        logger.debug(f"Created {descriptor.kind} satellite {adapter!r}")

    logger.info(
        f"Measurement environment: {len(environment.instrumentation)} instrumentation, "
        f"{len(environment.measurement)} measurement, {len(environment.workload)} workload satellite(s)"
    )
    return environment
