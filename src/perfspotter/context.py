"""
Long-lived collaborators shared by the components of a diagnosis run.
"""

import threading
from dataclasses import dataclass, field
from pathlib import Path

from .models import SpotterConfig
from .progress import ProgressTracker
from .results import ResultBlackboard
from .satellites import InstrumentationBroker, MeasurementBroker, WorkloadBroker
from .storage import DataStorage
from .validation import DiagnosisCancelledError


@dataclass
class SpotterContext:
    """
    Everything a detection controller needs to run experiments and report.

    The brokers, blackboard and progress tracker are created once by the
    engine and handed to every run; only `config`, `storage` and `run_dir`
    change from run to run.
    """

    config: SpotterConfig
    instrumentation: InstrumentationBroker
    measurement: MeasurementBroker
    workload: WorkloadBroker
    blackboard: ResultBlackboard
    progress: ProgressTracker
    storage: DataStorage
    run_dir: Path
    shutdown_requested: threading.Event = field(default_factory=threading.Event)

    def check_shutdown(self) -> None:
        """
        Raises:
            DiagnosisCancelledError: If a shutdown has been requested
        """
        if self.shutdown_requested.is_set():
            raise DiagnosisCancelledError("Diagnosis cancelled by shutdown request")
