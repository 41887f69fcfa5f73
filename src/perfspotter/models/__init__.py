"""
Data models for perfspotter.

This package contains the data structures shared across the diagnosis engine:
configuration, the problem hierarchy, instrumentation descriptions,
measurement data, detection results, progress and job state.
"""

from .config import (
    SATELLITE_KINDS,
    BrokerConfig,
    EnvironmentConfig,
    LoadConfig,
    PhaseProfile,
    SatelliteDescriptor,
    SpotterConfig,
    WorkloadConfig,
    phase_duration,
)
from .hierarchy import DETECTABLE_KEY, ProblemNode, PruningPolicy
from .instrumentation import (
    InstrumentationDescription,
    InstrumentationEntity,
    InstrumentationRestriction,
    SamplingDescription,
)
from .job import NO_JOB, JobState
from .measurement import NUM_USERS, RECORD_TYPE, TIMESTAMP, DatasetCollection, MeasurementData
from .progress import DiagnosisProgress, DiagnosisStatus, SpotterProgress
from .results import ProblemOccurrence, ResultsContainer, SpotterResult

__all__ = [
    # Configuration
    "SATELLITE_KINDS",
    "BrokerConfig",
    "EnvironmentConfig",
    "LoadConfig",
    "PhaseProfile",
    "SatelliteDescriptor",
    "SpotterConfig",
    "WorkloadConfig",
    "phase_duration",
    # Hierarchy
    "DETECTABLE_KEY",
    "ProblemNode",
    "PruningPolicy",
    # Instrumentation
    "InstrumentationDescription",
    "InstrumentationEntity",
    "InstrumentationRestriction",
    "SamplingDescription",
    # Jobs
    "NO_JOB",
    "JobState",
    # Measurement
    "NUM_USERS",
    "RECORD_TYPE",
    "TIMESTAMP",
    "DatasetCollection",
    "MeasurementData",
    # Progress
    "DiagnosisProgress",
    "DiagnosisStatus",
    "SpotterProgress",
    # Results
    "ProblemOccurrence",
    "ResultsContainer",
    "SpotterResult",
]
