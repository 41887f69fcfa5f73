"""
Experiment execution against the system under test.
"""

from .runner import ExperimentRunner

__all__ = ["ExperimentRunner"]
