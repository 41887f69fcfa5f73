"""
Progress tracking of diagnosis runs.
"""

from .tracker import (
    ProgressTracker,
    estimate_experiment_duration,
    estimate_series_duration,
    series_user_counts,
)

__all__ = [
    "ProgressTracker",
    "estimate_experiment_duration",
    "estimate_series_duration",
    "series_user_counts",
]
