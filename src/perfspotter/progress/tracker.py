"""
Progress of every problem investigated in the current diagnosis run.

Controllers report status transitions from the diagnosis worker, and status
queries arrive from other threads. A background thread refreshes the
estimated progress and remaining time of the problem currently under
investigation.
"""

import copy
import logging
import threading
import time
from typing import Optional

from ..models import DiagnosisProgress, DiagnosisStatus, SpotterProgress, WorkloadConfig

logger = logging.getLogger(__name__)

# Lowest user count of a default experiment series.
MIN_NUM_USERS = 1
EPSILON = 0.5


def series_user_counts(max_users: int, num_experiments: int):
    """
    User counts of a default experiment series: evenly spread from one user
    to `max_users`, or just `max_users` for a single experiment. Steps of
    half a user or less collapse the series to one single-user experiment.
    """
    if num_experiments <= 1:
        return [max_users]
    step = (max_users - MIN_NUM_USERS) / (num_experiments - 1)
    if step <= EPSILON:
        return [MIN_NUM_USERS]
    counts = []
    users = float(MIN_NUM_USERS)
    while users <= max_users + EPSILON:
        counts.append(int(users))
        users += step
    return counts


def estimate_experiment_duration(workload: WorkloadConfig, num_users: int,
                                 stable_duration: Optional[float] = None) -> float:
    """Estimated seconds one experiment takes, ramp-up and cool-down included."""
    stable = workload.experiment_duration if stable_duration is None else stable_duration
    ramp_up = 0.0
    if workload.ramp_up.users_per_interval:
        ramp_up = (num_users // workload.ramp_up.users_per_interval) * workload.ramp_up.interval_length
    cool_down = 0.0
    if workload.cool_down.users_per_interval:
        cool_down = (num_users // workload.cool_down.users_per_interval) * workload.cool_down.interval_length
    return ramp_up + stable + cool_down


def estimate_series_duration(workload: WorkloadConfig, num_experiments: int) -> float:
    return sum(
        estimate_experiment_duration(workload, users)
        for users in series_user_counts(workload.max_users, num_experiments)
    )


class ProgressTracker:
    """
    Thread-safe map from problem id to its DiagnosisProgress.
    """

    def __init__(self, sampling_interval: float = 1.0):
        self.sampling_interval = sampling_interval
        self._lock = threading.RLock()
        self._progress = SpotterProgress()
        self._estimated_duration = 0.0
        self._additional_duration = 0.0
        self._started_at = 0.0
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    # --- status updates ---

    def _entry(self, problem_id: str) -> DiagnosisProgress:
        progress = self._progress.problems.get(problem_id)
        if progress is None:
            progress = DiagnosisProgress()
            self._progress.problems[problem_id] = progress
        return progress

    def set_problem_name(self, problem_id: str, name: str) -> None:
        with self._lock:
            self._entry(problem_id).name = name

    def update_status(self, problem_id: str, status: DiagnosisStatus,
                      message: Optional[str] = None) -> None:
        with self._lock:
            progress = self._entry(problem_id)
            progress.status = status
            if message is not None:
                progress.message = message
        logger.info(f"Problem {problem_id}: {status}")

    def update_message(self, problem_id: str, message: str) -> None:
        with self._lock:
            self._entry(problem_id).message = message

    def update_estimate(self, problem_id: str, estimated_progress: float,
                        remaining_seconds: int) -> None:
        with self._lock:
            if problem_id in self._progress.problems:
                progress = self._progress.problems[problem_id]
                progress.estimated_progress = estimated_progress
                progress.estimated_remaining_duration = remaining_seconds

    # --- queries ---

    def get_progress(self, problem_id: str) -> DiagnosisProgress:
        """Copy of the progress of `problem_id`; PENDING if never touched."""
        with self._lock:
            return copy.copy(self._progress.get_progress(problem_id))

    def get_status(self, problem_id: str) -> DiagnosisStatus:
        return self.get_progress(problem_id).status

    def snapshot(self) -> SpotterProgress:
        with self._lock:
            return copy.deepcopy(self._progress)

    @property
    def current_problem(self) -> Optional[str]:
        with self._lock:
            return self._progress.current_problem

    def reset(self) -> None:
        with self._lock:
            self._progress = SpotterProgress()
            self._estimated_duration = 0.0
            self._additional_duration = 0.0

    # --- estimation ---

    def set_current_problem(self, problem_id: Optional[str], estimated_duration: float = 0.0) -> None:
        """Start estimating progress of `problem_id` against `estimated_duration` seconds."""
        with self._lock:
            self._progress.current_problem = problem_id
            self._estimated_duration = estimated_duration
            self._additional_duration = 0.0
            self._started_at = time.monotonic()

    def add_additional_duration(self, seconds: float) -> None:
        with self._lock:
            self._additional_duration += seconds

    def estimated_overall_duration(self) -> float:
        with self._lock:
            return self._estimated_duration + self._additional_duration

    def refresh_estimate(self) -> None:
        with self._lock:
            problem_id = self._progress.current_problem
            overall = self._estimated_duration + self._additional_duration
            elapsed = time.monotonic() - self._started_at
        if problem_id is None or overall <= 0:
            return
        fraction = elapsed / overall
        remaining = int(overall - elapsed)
        self.update_estimate(problem_id, fraction, remaining)
        logger.info(f"Progress - {problem_id} - {fraction * 100:04.1f}% - remaining: {remaining}s")

    def start(self) -> None:
        if self._thread is not None:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="ProgressTracker", daemon=True)
        self._thread.start()

    def stop(self) -> None:
        if self._thread is None:
            return
        self._stop.set()
        self._thread.join()
        self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self.sampling_interval):
            self.refresh_estimate()
