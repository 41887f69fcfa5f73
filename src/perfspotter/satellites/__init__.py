"""
Satellite adapters and the brokers driving them.

This package defines the adapter contract of each satellite kind, the
per-kind brokers fanning one operation out to all adapters of that kind,
the factory building adapters from the environment description and the
satellites built into perfspotter.
"""

from .base import (
    INSTRUMENTATION_EXCLUDES,
    INSTRUMENTATION_INCLUDES,
    InstrumentationAdapter,
    MeasurementAdapter,
    SatelliteAdapter,
    WorkloadAdapter,
)
from .broker import SatelliteBroker
from .environment import MeasurementEnvironment, create_environment
from .instrumentation import InstrumentationBroker, scoped_description
from .measurement import MeasurementBroker
from .workload import WorkloadBroker

__all__ = [
    "INSTRUMENTATION_EXCLUDES",
    "INSTRUMENTATION_INCLUDES",
    "InstrumentationAdapter",
    "MeasurementAdapter",
    "SatelliteAdapter",
    "WorkloadAdapter",
    "SatelliteBroker",
    "MeasurementEnvironment",
    "create_environment",
    "InstrumentationBroker",
    "scoped_description",
    "MeasurementBroker",
    "WorkloadBroker",
]
