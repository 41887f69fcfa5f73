"""
Diagnosis engine and job control.
"""

from .diagnosis import DiagnosisEngine, DiagnosisOutcome
from .service import JobService

__all__ = ["DiagnosisEngine", "DiagnosisOutcome", "JobService"]
