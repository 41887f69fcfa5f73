"""
Running experiment series against the system under test.

One experiment starts from an empty measurement buffer and moves through
ramp-up, stable phase and cool-down at a fixed number of users. Monitoring
is only enabled for the stable phase, so ramp transients never end up in
the measurement data. A series instruments the system once, passes its
sampling requests on to the measurement satellites, runs one experiment per
user count and always uninstruments again, whether the experiments
succeeded or not.
"""

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional

from ..context import SpotterContext
from ..models import NUM_USERS, DiagnosisStatus, InstrumentationDescription, LoadConfig
from ..progress import series_user_counts
from ..results import write_experiment_datasets
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


class ExperimentRunner:
    """
    Drives the brokers through experiments on behalf of one controller.

    Datasets of experiment n are stored under `data_dir / str(n)`.
    """

    def __init__(self, context: SpotterContext, problem_id: str, data_dir: Path):
        self.context = context
        self.problem_id = problem_id
        self.data_dir = Path(data_dir)
        self.experiment_count = 0

    def _status(self, status: DiagnosisStatus, message: Optional[str] = None) -> None:
        self.context.progress.update_status(self.problem_id, status, message)

    def warm_up(self) -> None:
        """Put a single user on the system for the pre-warm-up duration."""
        config = self.context.config
        self._status(DiagnosisStatus.WARM_UP)
        load = LoadConfig.from_workload(
            config.workload, num_users=1, experiment_duration=config.prewarmup_duration
        )
        logger.info(f"Warming up the system under test for {config.prewarmup_duration}s")
        self.context.workload.start_load(load)
        self.context.workload.wait_for_finished_load()

    def run_series(self, description: InstrumentationDescription, num_experiments: int) -> List[int]:
        """
        Instrument, run the default series of experiments and uninstrument.

        Returns:
            User counts of the executed experiments
        """
        user_counts = series_user_counts(self.context.config.workload.max_users, num_experiments)
        logger.info(f"Running experiment series with user counts {user_counts}")

        failed = False
        try:
            if description.is_empty():
                logger.info("Nothing to instrument for this series")
            else:
                self._status(DiagnosisStatus.INSTRUMENTING)
                self.context.instrumentation.instrument(description)
                self.context.measurement.prepare_monitoring(description)
            for num_users in user_counts:
                self.context.check_shutdown()
                self.run_experiment(num_users)
        except BaseException:
            failed = True
            raise
        finally:
            self._uninstrument(failed)
        return user_counts

    def _uninstrument(self, failed: bool) -> None:
        self._status(DiagnosisStatus.UNINSTRUMENTING)
        try:
            self.context.instrumentation.uninstrument()
        except Exception as e:
            if not failed:
                raise
            # Keep the error that aborted the series.
            handle_error(
                error=e,
                context="uninstrumenting after a failed experiment series",
                severity=ErrorSeverity.WARNING,
                reraise=False,
                logger=logger,
            )

    def run_experiment(self, num_users: int) -> None:
        """Run one experiment with `num_users` users and store its data."""
        workload = self.context.workload
        measurement = self.context.measurement
        load = LoadConfig.from_workload(self.context.config.workload, num_users)
        # Nothing recorded before this experiment belongs to its dataset.
        measurement.reset_monitoring()

        self._status(
            DiagnosisStatus.EXPERIMENTING_RAMP_UP,
            f"{num_users} user(s), ramp-up {load.ramp_up_duration()}s",
        )
        workload.start_load(load)
        workload.wait_for_warmup_phase_termination()

        self._status(
            DiagnosisStatus.EXPERIMENTING_STABLE_PHASE,
            f"{num_users} user(s), stable phase {load.experiment_duration}s",
        )
        measurement.enable_monitoring()
        workload.wait_for_experiment_phase_termination()

        self._status(
            DiagnosisStatus.EXPERIMENTING_COOL_DOWN,
            f"{num_users} user(s), cool-down {load.cool_down_duration()}s",
        )
        measurement.disable_monitoring()
        workload.wait_for_finished_load()

        self._status(DiagnosisStatus.COLLECTING_DATA)
        self.store_results({NUM_USERS: num_users})

    def store_results(self, parameters: Dict[str, object]) -> Path:
        self.experiment_count += 1
        experiment_dir = self.data_dir / str(self.experiment_count)

        buffer = io.StringIO()
        self.context.measurement.pipe_to_output_stream(buffer)
        buffer.seek(0)
        write_experiment_datasets(buffer, experiment_dir, parameters, self.context.storage)

        self.context.measurement.store_report(str(experiment_dir))
        return experiment_dir
