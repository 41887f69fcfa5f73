"""
The diagnosis engine walks the problem hierarchy and runs detection.

The engine owns the process-wide collaborators (brokers, blackboard and
progress tracker) and is the only place where an error escaping a
detection controller is turned into a terminal job state. A failing node
cancels the whole run, but everything recorded up to that node stays in
the blackboard and goes into the report.
"""

import logging
import threading
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from ..config import get_config, load_environment, set_config_path
from ..context import SpotterContext
from ..detection import DetectionController
from ..executor import ThreadPoolConfig
from ..extensions import ExtensionRegistry, create_default_registry
from ..hierarchy import build_controllers, load_hierarchy, walk_hierarchy
from ..models import BrokerConfig, DiagnosisStatus, JobState, ProblemNode, ResultsContainer, SpotterResult
from ..progress import ProgressTracker
from ..results import ResultBlackboard, save_results, write_report
from ..satellites import InstrumentationBroker, MeasurementBroker, WorkloadBroker, create_environment
from ..storage import create_storage
from ..validation import ErrorSeverity, handle_error

logger = logging.getLogger(__name__)


@dataclass
class DiagnosisOutcome:
    state: JobState
    results: ResultsContainer
    run_dir: Optional[Path]
    duration: float
    error: Optional[BaseException] = None


class DiagnosisEngine:
    """
    Runs diagnosis jobs one at a time.

    Args:
        registry: Extension registry resolving controllers and satellites
        broker_config: Thread pool settings shared by the three brokers
    """

    def __init__(self, registry: Optional[ExtensionRegistry] = None,
                 broker_config: Optional[BrokerConfig] = None):
        self.registry = registry or create_default_registry()
        broker_config = broker_config or BrokerConfig()

        def pool(kind: str) -> ThreadPoolConfig:
            return ThreadPoolConfig(
                max_workers=broker_config.max_workers,
                thread_name_prefix=f"{broker_config.thread_name_prefix}-{kind}",
            )

        self.instrumentation = InstrumentationBroker(pool("instrumentation"))
        self.measurement = MeasurementBroker(pool("measurement"))
        self.workload = WorkloadBroker(pool("workload"))
        self.blackboard = ResultBlackboard()
        self.progress = ProgressTracker()
        self.shutdown_requested = threading.Event()

        self.current_root: Optional[ProblemNode] = None
        self._current_node: Optional[ProblemNode] = None
        self._controllers: Dict[str, DetectionController] = {}
        self._context: Optional[SpotterContext] = None

    def request_shutdown(self) -> None:
        """Stop the running diagnosis at the next node or experiment boundary."""
        logger.info("Shutdown requested, the diagnosis stops at the next step boundary")
        self.shutdown_requested.set()

    def clear_shutdown_request(self) -> None:
        self.shutdown_requested.clear()

    def close(self) -> None:
        for broker in (self.instrumentation, self.measurement, self.workload):
            broker.close()

    def diagnose(self, config_path: Path, job_id: int) -> DiagnosisOutcome:
        """
        Run one complete diagnosis.

        Never raises for failures of the run itself; they are reported
        through the returned outcome with state CANCELLED. A shutdown request
        still pending from before the call cancels the run at its first node.
        """
        started = time.monotonic()
        self.blackboard.reset()
        self.progress.reset()
        self.current_root = None
        self._current_node = None

        state = JobState.FINISHED
        error: Optional[BaseException] = None
        run_dir: Optional[Path] = None
        storage = None

        try:
            set_config_path(Path(config_path))
            config = get_config()
            run_dir = config.result_dir / f"run_{job_id}"
            run_dir.mkdir(parents=True, exist_ok=True)
            storage = create_storage(config.storage_format)
            self.progress.sampling_interval = config.progress_interval

            environment = create_environment(load_environment(config), self.registry)
            self.instrumentation.set_controllers(environment.instrumentation)
            self.measurement.set_controllers(environment.measurement)
            self.workload.set_controllers(environment.workload)

            self.current_root = load_hierarchy(config.hierarchy_file)
            self._context = SpotterContext(
                config=config,
                instrumentation=self.instrumentation,
                measurement=self.measurement,
                workload=self.workload,
                blackboard=self.blackboard,
                progress=self.progress,
                storage=storage,
                run_dir=run_dir,
                shutdown_requested=self.shutdown_requested,
            )
            self._controllers = build_controllers(self.current_root, self._context, self.registry)

            self.progress.start()
            try:
                walk_hierarchy(
                    self.current_root,
                    investigate=self._investigate,
                    policy=config.pruning_policy,
                    on_pruned=self._record_pruned,
                    before_node=lambda node: self._context.check_shutdown(),
                )
            finally:
                self.progress.stop()
                self.progress.set_current_problem(None)
        except Exception as e:
            state = JobState.CANCELLED
            error = e
            handle_error(
                error=e,
                context="diagnosis run",
                severity=ErrorSeverity.CRITICAL,
                reraise=False,
                logger=logger,
            )
            self._record_failure(e)

        duration = time.monotonic() - started
        report = self.blackboard.render_report()
        container = ResultsContainer(
            root_problem=self.current_root, report=report, results=self.blackboard.get_results()
        )
        if run_dir is not None and storage is not None:
            write_report(run_dir, report, duration)
            save_results(container, run_dir, storage)

        logger.info(f"Diagnosis {state.value} after {duration:.1f}s")
        return DiagnosisOutcome(state=state, results=container, run_dir=run_dir, duration=duration, error=error)

    def _investigate(self, node: ProblemNode) -> bool:
        self._current_node = node
        controller = self._controllers[node.unique_id]
        self.progress.set_problem_name(node.unique_id, node.name)
        logger.info(f"Investigating '{node.name}' with controller '{controller.name}'")

        result = controller.analyze_problem()
        self.blackboard.put_result(node, result)
        self.progress.update_status(
            node.unique_id,
            DiagnosisStatus.DETECTED if result.detected else DiagnosisStatus.NOT_DETECTED,
        )
        self._current_node = None
        return result.detected

    def _record_pruned(self, node: ProblemNode) -> None:
        result = SpotterResult(detected=False)
        result.add_message("Not investigated: a problem it depends on was not detected.")
        self.blackboard.put_result(node, result)
        self.progress.set_problem_name(node.unique_id, node.name)
        self.progress.update_status(node.unique_id, DiagnosisStatus.NOT_DETECTED)

    def _record_failure(self, error: BaseException) -> None:
        node = self._current_node
        if node is None:
            return
        result = SpotterResult(detected=False)
        result.add_message(f"Diagnosis failed: {type(error).__name__}: {error}")
        self.blackboard.put_result(node, result)
        self.progress.update_status(node.unique_id, DiagnosisStatus.NOT_DETECTED, str(error))
        self._current_node = None
