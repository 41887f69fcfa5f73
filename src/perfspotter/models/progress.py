"""
Diagnosis progress data models.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class DiagnosisStatus(Enum):
    """Phase a problem node is in, with a human readable name."""

    PENDING = "pending"
    INITIALIZING = "initializing"
    INSTRUMENTING = "instrumenting"
    WARM_UP = "warm-up"
    EXPERIMENTING_RAMP_UP = "experimenting ramp-up"
    EXPERIMENTING_STABLE_PHASE = "experimenting stable phase"
    EXPERIMENTING_COOL_DOWN = "experimenting cool-down"
    COLLECTING_DATA = "collecting data"
    UNINSTRUMENTING = "uninstrumenting"
    ANALYSING = "analyzing"
    DETECTED = "detected"
    NOT_DETECTED = "not detected"

    def __str__(self) -> str:
        return self.value

    @property
    def is_terminal(self) -> bool:
        return self in (DiagnosisStatus.DETECTED, DiagnosisStatus.NOT_DETECTED)


@dataclass
class DiagnosisProgress:
    name: str = ""
    status: DiagnosisStatus = DiagnosisStatus.PENDING
    estimated_progress: float = 0.0
    # Seconds
    estimated_remaining_duration: int = 0
    message: str = ""


@dataclass
class SpotterProgress:
    """Snapshot of the progress of every problem touched in a run."""

    current_problem: Optional[str] = None
    problems: Dict[str, DiagnosisProgress] = field(default_factory=dict)

    def get_progress(self, problem_id: str) -> DiagnosisProgress:
        return self.problems.get(problem_id, DiagnosisProgress())

    def get_status(self, problem_id: str) -> DiagnosisStatus:
        return self.get_progress(problem_id).status
