"""
Detection controllers decide whether one performance problem is present.

A controller belongs to one node of the problem hierarchy. It runs the
experiments its problem needs, reads the resulting datasets back and hands
them to `analyze`, which produces the verdict. Concrete controllers are
contributed as extensions and implement `num_experiments`,
`execute_experiments` and `analyze`.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from ..context import SpotterContext
from ..experiment import ExperimentRunner
from ..models import (
    DatasetCollection,
    DiagnosisStatus,
    InstrumentationDescription,
    ProblemNode,
    SpotterResult,
)
from ..progress import estimate_series_duration
from ..results import DATA_SUB_DIR, RESULT_RESOURCES_SUB_DIR, load_dataset_collection

logger = logging.getLogger(__name__)


class ExperimentReuser:
    """
    Capability of controllers that analyse the experiments of their parent.

    The engine attaches such a controller to its parent's controller. The
    parent then adds the reuser's instrumentation to its own series, and the
    reuser reads the parent's datasets instead of running experiments. A
    reuser without a parent controller runs its own series.
    """


class DetectionController(ABC):
    """
    Base class of all detection controllers.

    Subclasses parse their node's config in `load_properties` and may
    override `instrumentation_description` to declare what their
    experiments need instrumented.
    """

    def __init__(self, problem: ProblemNode, context: SpotterContext):
        self.problem = problem
        self.context = context
        self.reusers: List[DetectionController] = []
        self._parent_data_dir: Optional[Path] = None
        self._data_dir: Optional[Path] = None
        self._runner: Optional[ExperimentRunner] = None

    @property
    def problem_id(self) -> str:
        return self.problem.unique_id

    @property
    def name(self) -> str:
        return self.problem.extension_name or type(self).__name__

    @property
    def base_dir(self) -> Path:
        return self.context.run_dir / f"{self.name}-{self.problem_id}"

    @property
    def data_dir(self) -> Path:
        if self._data_dir is None:
            self._data_dir = self.base_dir / DATA_SUB_DIR
        return self._data_dir

    @property
    def resources_dir(self) -> Path:
        path = self.base_dir / RESULT_RESOURCES_SUB_DIR
        path.mkdir(parents=True, exist_ok=True)
        return path

    @property
    def runner(self) -> ExperimentRunner:
        if self._runner is None:
            self._runner = ExperimentRunner(self.context, self.problem_id, self.data_dir)
        return self._runner

    # --- contract ---

    def load_properties(self) -> None:
        """Parse `self.problem.config` into attributes; no side effects."""

    @abstractmethod
    def num_experiments(self) -> int:
        ...

    @abstractmethod
    def execute_experiments(self) -> None:
        """Run the experiments; most controllers call `execute_default_experiment_series`."""

    @abstractmethod
    def analyze(self, data: DatasetCollection) -> SpotterResult:
        ...

    def instrumentation_description(self) -> InstrumentationDescription:
        return InstrumentationDescription()

    def experiment_series_duration(self) -> float:
        """Estimated seconds `execute_experiments` takes."""
        return estimate_series_duration(self.context.config.workload, self.num_experiments())

    # --- experiment reuse ---

    def add_reuser(self, reuser: "DetectionController") -> None:
        self.reusers.append(reuser)
        reuser.set_parent_data_dir(self.data_dir)

    def set_parent_data_dir(self, path: Path) -> None:
        self._parent_data_dir = Path(path)

    @property
    def reuses_parent_experiments(self) -> bool:
        return isinstance(self, ExperimentReuser) and self._parent_data_dir is not None

    # --- lifecycle ---

    def analyze_problem(self) -> SpotterResult:
        """
        Produce the verdict for this controller's problem.

        Experiments are skipped when the run uses prerecorded data or when
        this controller reuses its parent's experiments.
        """
        config = self.context.config
        progress = self.context.progress

        runs_experiments = not (config.omit_experiments or self.reuses_parent_experiments)
        progress.set_current_problem(
            self.problem_id, self.experiment_series_duration() if runs_experiments else 0.0
        )
        if runs_experiments and not config.omit_warmup:
            progress.add_additional_duration(config.prewarmup_duration)
        progress.update_status(self.problem_id, DiagnosisStatus.INITIALIZING)

        if config.omit_experiments:
            logger.info(f"{self.name}: using prerecorded data from {config.dummy_data_dir}")
            self._data_dir = Path(config.dummy_data_dir)
        elif self.reuses_parent_experiments:
            logger.info(f"{self.name}: reusing experiments stored in {self._parent_data_dir}")
            self._data_dir = self._parent_data_dir
        else:
            self.context.instrumentation.initialize()
            self.context.measurement.initialize()
            self.context.workload.initialize()
            if not config.omit_warmup:
                self.runner.warm_up()
            self.execute_experiments()

        progress.update_status(self.problem_id, DiagnosisStatus.ANALYSING)
        return self.analyze(self.load_data())

    def execute_default_experiment_series(self) -> None:
        """
        Run the default series with this controller's instrumentation and
        that of every attached reuser.
        """
        description = self.instrumentation_description()
        for reuser in self.reusers:
            description = description.merge(reuser.instrumentation_description())
        self.runner.run_series(description, self.num_experiments())

    def load_data(self) -> DatasetCollection:
        return load_dataset_collection(self.data_dir, self.context.storage)

    def store_text_resource(self, file_name: str, result: SpotterResult, text: str) -> Path:
        """Write `text` next to the results and reference it from `result`."""
        path = self.resources_dir / f"{file_name}.txt"
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
        result.add_resource_file(str(path))
        return path
