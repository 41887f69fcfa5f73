"""
Job control for diagnosis runs.

At most one diagnosis runs at a time, on a dedicated worker thread. A start
request while a job is running is rejected with job id 0 instead of being
queued. States and futures are kept for the most recent jobs only.
"""

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import Future
from pathlib import Path
from typing import Optional

from ..executor import ManagedThreadPoolExecutor, ThreadPoolConfig
from ..models import NO_JOB, JobState, ProblemNode, SpotterProgress
from ..validation import ErrorSeverity, handle_error
from .diagnosis import DiagnosisEngine, DiagnosisOutcome

logger = logging.getLogger(__name__)

JOB_HISTORY_SIZE = 16


class JobService:
    def __init__(self, engine: Optional[DiagnosisEngine] = None):
        self.engine = engine or DiagnosisEngine()
        self._worker = ManagedThreadPoolExecutor(
            ThreadPoolConfig(max_workers=1, thread_name_prefix="DiagnosisWorker"), auto_start=True
        )
        self._lock = threading.Lock()
        self._current_job = NO_JOB
        self._last_job_id = NO_JOB
        self._states: OrderedDict[int, JobState] = OrderedDict()
        self._futures: OrderedDict[int, Future] = OrderedDict()
        self._last_exception: Optional[BaseException] = None
        self._last_outcome: Optional[DiagnosisOutcome] = None

    def start(self, config_path) -> int:
        """
        Start a diagnosis with the given configuration file.

        Returns:
            The id of the new job, or 0 if a job is already running
        """
        with self._lock:
            if self._current_job != NO_JOB:
                logger.warning(f"Diagnosis job {self._current_job} is still running, not starting another one")
                return NO_JOB
            job_id = max(int(time.time() * 1000), self._last_job_id + 1)
            self._last_job_id = job_id
            self._current_job = job_id
            # Requests made before this job started must not cancel it.
            self.engine.clear_shutdown_request()
            self._states[job_id] = JobState.RUNNING
            self._futures[job_id] = self._worker.submit(self._run, job_id, Path(config_path))
            self._forget_old_jobs()

        logger.info(f"Started diagnosis job {job_id} with configuration {config_path}")
        return job_id

    def _forget_old_jobs(self) -> None:
        while len(self._futures) > JOB_HISTORY_SIZE:
            old_id, _ = self._futures.popitem(last=False)
            self._states.pop(old_id, None)
            logger.debug(f"Forgot diagnosis job {old_id}")

    def _run(self, job_id: int, config_path: Path) -> Optional[DiagnosisOutcome]:
        state = JobState.CANCELLED
        outcome = None
        try:
            outcome = self.engine.diagnose(config_path, job_id)
            state = outcome.state
            self._last_exception = outcome.error
            self._last_outcome = outcome
        except Exception as e:
            self._last_exception = e
            handle_error(
                error=e,
                context=f"diagnosis job {job_id}",
                severity=ErrorSeverity.CRITICAL,
                reraise=False,
                logger=logger,
            )
        finally:
            with self._lock:
                self._states[job_id] = state
                self._current_job = NO_JOB
            logger.info(f"Diagnosis job {job_id} ended: {state.value}")
        return outcome

    def wait(self, job_id: int, timeout: Optional[float] = None) -> Optional[DiagnosisOutcome]:
        """
        Block until job `job_id` has ended and return its outcome.

        Raises:
            KeyError: If the job is unknown or too old to be remembered
        """
        with self._lock:
            future = self._futures.get(job_id)
        if future is None:
            raise KeyError(f"Unknown diagnosis job {job_id}")
        return future.result(timeout=timeout)

    def is_running(self) -> bool:
        with self._lock:
            return self._current_job != NO_JOB

    def get_current_job_id(self) -> int:
        with self._lock:
            return self._current_job

    def get_state(self, job_id: int) -> Optional[JobState]:
        with self._lock:
            return self._states.get(job_id)

    def get_current_progress_report(self) -> SpotterProgress:
        return self.engine.progress.snapshot()

    def get_current_root_problem(self) -> Optional[ProblemNode]:
        return self.engine.current_root

    def get_last_run_exception(self) -> Optional[BaseException]:
        return self._last_exception

    def get_last_outcome(self) -> Optional[DiagnosisOutcome]:
        return self._last_outcome

    def request_shutdown(self) -> None:
        self.engine.request_shutdown()

    def shutdown(self, wait: bool = True) -> None:
        if self.is_running():
            self.engine.request_shutdown()
        self._worker.shutdown(wait=wait)
        self.engine.close()
