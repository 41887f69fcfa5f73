"""
perfspotter: Performance problem diagnosis by systematic experimentation.

The package walks a hierarchy of performance problems and, for each one,
lets a detection controller run load experiments against the system under
test through remote satellites (instrumentation, measurement, workload),
then reports which problems were detected.

The package is organized into specialized modules:
- config: Configuration loading, validation and caching
- models: Data structures and type definitions
- validation: Input validation and error handling
- executor: Managed thread pool used by the satellite brokers
- satellites: Adapter contracts, fan-out brokers and built-in satellites
- experiment: Experiment series execution
- detection: Detection controller base class
- hierarchy: Problem hierarchy loading and traversal
- results: Result blackboard, datasets and reports
- progress: Diagnosis progress tracking
- storage: Dataset storage backends
- engine: Diagnosis engine and job control
- cli: Command-line interface

Usage:
    From command line:
        perfspotter --config conf/spotter.toml

    Programmatically:
        from perfspotter import JobService
        service = JobService()
        job_id = service.start("conf/spotter.toml")
        outcome = service.wait(job_id)
"""

# Main interfaces
from .config import clear_config_cache, get_config, set_config_path
from .detection import DetectionController, ExperimentReuser
from .engine import DiagnosisEngine, DiagnosisOutcome, JobService
from .extensions import ExtensionRegistry, create_default_registry

# Model classes for external use
from .models import (
    DatasetCollection,
    DiagnosisStatus,
    InstrumentationDescription,
    JobState,
    ProblemNode,
    PruningPolicy,
    SpotterConfig,
    SpotterResult,
)

__version__ = "0.1.0"

__all__ = [
    # Main interfaces
    "DiagnosisEngine",
    "DiagnosisOutcome",
    "JobService",
    "DetectionController",
    "ExperimentReuser",
    "ExtensionRegistry",
    "create_default_registry",
    # Configuration
    "get_config",
    "set_config_path",
    "clear_config_cache",
    # Models
    "DatasetCollection",
    "DiagnosisStatus",
    "InstrumentationDescription",
    "JobState",
    "ProblemNode",
    "PruningPolicy",
    "SpotterConfig",
    "SpotterResult",
]
