"""
Diagnosis job state models.
"""

from enum import Enum

# Job id returned when no job was started because another one is running.
NO_JOB = 0


class JobState(Enum):
    RUNNING = "running"
    FINISHED = "finished"
    CANCELLED = "cancelled"
