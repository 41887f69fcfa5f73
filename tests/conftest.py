"""
Pytest configuration and shared fixtures for the perfspotter test suite.

This module provides common fixtures, recording fake satellites, scripted
detection controllers and configuration files for all test modules.
"""

import shutil
import sys
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pytest

# Add src to Python path for testing
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from perfspotter.detection import DetectionController, ExperimentReuser  # noqa: E402
from perfspotter.extensions import ExtensionRegistry  # noqa: E402
from perfspotter.models import (  # noqa: E402
    InstrumentationDescription,
    LoadConfig,
    MeasurementData,
    SatelliteDescriptor,
    SpotterConfig,
    SpotterResult,
    WorkloadConfig,
)
from perfspotter.satellites import (  # noqa: E402
    InstrumentationAdapter,
    InstrumentationBroker,
    MeasurementAdapter,
    MeasurementBroker,
    WorkloadAdapter,
    WorkloadBroker,
)


# ============================================================================
# Test Configuration
# ============================================================================


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "e2e: mark test as an end-to-end test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


# ============================================================================
# Recording Satellites
# ============================================================================


class CallLog:
    """Thread-safe, ordered log of (satellite, operation, argument) entries."""

    def __init__(self):
        self._lock = threading.Lock()
        self.entries: List[Tuple[str, str, Any]] = []

    def record(self, satellite: str, operation: str, argument: Any = None) -> None:
        with self._lock:
            self.entries.append((satellite, operation, argument))

    def operations(self, satellite: Optional[str] = None) -> List[str]:
        with self._lock:
            return [op for name, op, _ in self.entries if satellite is None or name == satellite]

    def count(self, operation: str) -> int:
        return self.operations().count(operation)


class _Recording:
    """Mixin recording every call; `fail_on` operations raise, `delays` sleep first."""

    def _setup_recording(self, log: CallLog, fail_on=(), delays: Optional[Dict[str, float]] = None,
                         error: Optional[Exception] = None):
        self.log = log
        self.fail_on = set(fail_on)
        self.delays = delays or {}
        self.error = error
        self.completed: List[str] = []

    def _call(self, operation: str, argument: Any = None) -> None:
        self.log.record(self.name, operation, argument)
        if operation in self.delays:
            time.sleep(self.delays[operation])
        if operation in self.fail_on:
            raise self.error or RuntimeError(f"{self.name} failed {operation}")
        self.completed.append(operation)


class RecordingInstrumentationAdapter(_Recording, InstrumentationAdapter):
    def __init__(self, descriptor: SatelliteDescriptor, log: CallLog, **kwargs):
        InstrumentationAdapter.__init__(self, descriptor)
        self._setup_recording(log, **kwargs)
        self.descriptions: List[InstrumentationDescription] = []

    def initialize(self) -> None:
        self._call("initialize")

    def instrument(self, description: InstrumentationDescription) -> None:
        self.descriptions.append(description)
        self._call("instrument", description)

    def uninstrument(self) -> None:
        self._call("uninstrument")


class RecordingMeasurementAdapter(_Recording, MeasurementAdapter):
    """Emits one `response_time` record per enabled monitoring window."""

    def __init__(self, descriptor: SatelliteDescriptor, log: CallLog, **kwargs):
        MeasurementAdapter.__init__(self, descriptor)
        self._setup_recording(log, **kwargs)
        self.windows = 0
        self.reports: List[str] = []
        self.prepared: List[InstrumentationDescription] = []

    def initialize(self) -> None:
        self._call("initialize")

    def prepare_monitoring(self, description: InstrumentationDescription) -> None:
        self.prepared.append(description)
        self._call("prepare_monitoring", description)

    def reset_monitoring(self) -> None:
        self._call("reset_monitoring")

    def enable_monitoring(self) -> None:
        self._call("enable_monitoring")
        self.windows += 1

    def disable_monitoring(self) -> None:
        self._call("disable_monitoring")

    def get_measurement_data(self) -> MeasurementData:
        self._call("get_measurement_data")
        data = MeasurementData()
        data.add("response_time", 1000 * self.windows, satellite=self.name, value=float(self.windows))
        return data

    def store_report(self, path: str) -> None:
        self.reports.append(path)
        self._call("store_report", path)


class RecordingWorkloadAdapter(_Recording, WorkloadAdapter):
    def __init__(self, descriptor: SatelliteDescriptor, log: CallLog, **kwargs):
        WorkloadAdapter.__init__(self, descriptor)
        self._setup_recording(log, **kwargs)
        self.loads: List[LoadConfig] = []

    def initialize(self) -> None:
        self._call("initialize")

    def start_load(self, load_config: LoadConfig) -> None:
        self.loads.append(load_config)
        self._call("start_load", load_config.num_users)

    def wait_for_warmup_phase_termination(self) -> None:
        self._call("wait_for_warmup_phase_termination")

    def wait_for_experiment_phase_termination(self) -> None:
        self._call("wait_for_experiment_phase_termination")

    def wait_for_finished_load(self) -> None:
        self._call("wait_for_finished_load")


def make_descriptor(kind: str, name: str, **properties) -> SatelliteDescriptor:
    return SatelliteDescriptor(
        kind=kind,
        extension="recording",
        name=name,
        properties={k: str(v) for k, v in properties.items()},
    )


# ============================================================================
# Scripted Detection Controllers
# ============================================================================


class ScriptedController(DetectionController):
    """
    Controller whose verdict comes from its node config.

    Config keys: `detected` (bool), `experiments` (int, 0 runs none),
    `fail` (raise from analyze), `scope` (instrumented scope).
    """

    def load_properties(self) -> None:
        config = self.problem.config
        self.detected = bool(config.get("detected", False))
        self.experiments = int(config.get("experiments", 0))
        self.fail = bool(config.get("fail", False))
        self.scope = config.get("scope", "")
        self.analyzed_with: Optional[Any] = None

    def num_experiments(self) -> int:
        return max(self.experiments, 1)

    def instrumentation_description(self) -> InstrumentationDescription:
        description = InstrumentationDescription()
        if self.scope:
            description.add_entity(self.scope, "response_time")
        return description

    def execute_experiments(self) -> None:
        if self.experiments:
            self.execute_default_experiment_series()

    def analyze(self, data) -> SpotterResult:
        self.analyzed_with = data
        if self.fail:
            raise RuntimeError(f"analysis of {self.problem.name} failed")
        result = SpotterResult(detected=self.detected)
        result.add_message(f"{len(data)} dataset(s) analysed")
        return result


class ReusingController(ScriptedController, ExperimentReuser):
    """Scripted controller analysing its parent's experiments."""


# ============================================================================
# Core Fixtures
# ============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def call_log():
    """Shared log of every recorded satellite call."""
    return CallLog()


@pytest.fixture
def fakes():
    """Provide the recording satellite and scripted controller classes."""

    class Fakes:
        CallLog = CallLog
        InstrumentationAdapter = RecordingInstrumentationAdapter
        MeasurementAdapter = RecordingMeasurementAdapter
        WorkloadAdapter = RecordingWorkloadAdapter
        ScriptedController = ScriptedController
        ReusingController = ReusingController
        make_descriptor = staticmethod(make_descriptor)

    return Fakes


@pytest.fixture
def spotter_config(temp_dir):
    """A SpotterConfig for runs against recording satellites, warm-up disabled."""
    return SpotterConfig(
        result_dir=temp_dir / "results",
        hierarchy_file=None,
        environment_file=None,
        omit_warmup=True,
        prewarmup_duration=0.0,
        progress_interval=0.05,
        workload=WorkloadConfig(max_users=4, experiment_duration=0.0),
    )


@pytest.fixture
def brokers(call_log):
    """One recording satellite per kind, wired into fresh brokers."""
    instrumentation = InstrumentationBroker()
    measurement = MeasurementBroker()
    workload = WorkloadBroker()
    instrumentation.set_controllers(
        [RecordingInstrumentationAdapter(make_descriptor("instrumentation", "inst-1"), call_log)]
    )
    measurement.set_controllers(
        [RecordingMeasurementAdapter(make_descriptor("measurement", "meas-1"), call_log)]
    )
    workload.set_controllers(
        [RecordingWorkloadAdapter(make_descriptor("workload", "load-1"), call_log)]
    )
    yield instrumentation, measurement, workload
    for broker in (instrumentation, measurement, workload):
        broker.close()


@pytest.fixture
def spotter_context(spotter_config, brokers, temp_dir):
    """A SpotterContext over the recording brokers, storing parquet datasets."""
    from perfspotter.context import SpotterContext
    from perfspotter.progress import ProgressTracker
    from perfspotter.results import ResultBlackboard
    from perfspotter.storage import create_storage

    instrumentation, measurement, workload = brokers
    return SpotterContext(
        config=spotter_config,
        instrumentation=instrumentation,
        measurement=measurement,
        workload=workload,
        blackboard=ResultBlackboard(),
        progress=ProgressTracker(),
        storage=create_storage("parquet"),
        run_dir=temp_dir / "run",
    )


@pytest.fixture
def recording_registry(call_log):
    """Registry resolving `recording` satellites and the scripted controllers."""
    registry = ExtensionRegistry()
    registry.register(
        "instrumentation", "recording", lambda d: RecordingInstrumentationAdapter(d, call_log)
    )
    registry.register("measurement", "recording", lambda d: RecordingMeasurementAdapter(d, call_log))
    registry.register("workload", "recording", lambda d: RecordingWorkloadAdapter(d, call_log))
    registry.register("controller", "scripted", ScriptedController)
    registry.register("controller", "reusing", ReusingController)
    return registry


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def sample_hierarchy_toml():
    """Hierarchy with one detected branch and one not-detected branch."""
    return """
[root]
name = "Root"
id = "root"
config = { detectable = false }

[[root.children]]
name = "Ramp"
id = "ramp"
extension = "scripted"
config = { detected = true, experiments = 2, scope = "shop.checkout" }

[[root.children.children]]
name = "Stifle"
id = "stifle"
extension = "reusing"
config = { detected = true, scope = "shop.db" }

[[root.children]]
name = "Blob"
id = "blob"
extension = "scripted"
config = { detected = false }

[[root.children.children]]
name = "Hiccups"
id = "hiccups"
extension = "scripted"
"""


@pytest.fixture
def sample_environment_data():
    """Measurement environment with one recording satellite per kind."""
    return {
        "satellites": [
            {"kind": "instrumentation", "extension": "recording", "name": "inst-1"},
            {"kind": "measurement", "extension": "recording", "name": "meas-1", "port": 8090},
            {"kind": "workload", "extension": "recording", "name": "load-1"},
        ]
    }


@pytest.fixture
def sample_spotter_data():
    """Main configuration pointing at relative hierarchy and environment files."""
    return {
        "spotter": {
            "result_dir": "results",
            "hierarchy_file": "hierarchy.toml",
            "environment_file": "environment.toml",
            "omit_warmup": True,
            "prewarmup_duration": 0,
            "progress_interval": 0.05,
            "pruning_policy": "prune_and_mark",
            "storage_format": "parquet",
        },
        "workload": {
            "max_users": 4,
            "experiment_duration": 0,
            "ramp_up": {"interval_length": 0, "users_per_interval": 1},
            "cool_down": {"interval_length": 0, "users_per_interval": 1},
        },
        "broker": {"max_workers": 4, "thread_name_prefix": "TestSatellite"},
    }


@pytest.fixture
def config_files(temp_dir, sample_spotter_data, sample_environment_data, sample_hierarchy_toml):
    """Create temporary configuration files for testing."""
    import toml

    config_file = temp_dir / "spotter.toml"
    with open(config_file, "w") as f:
        toml.dump(sample_spotter_data, f)

    environment_file = temp_dir / "environment.toml"
    with open(environment_file, "w") as f:
        toml.dump(sample_environment_data, f)

    hierarchy_file = temp_dir / "hierarchy.toml"
    hierarchy_file.write_text(sample_hierarchy_toml, encoding="utf-8")

    return {
        "config": config_file,
        "environment": environment_file,
        "hierarchy": hierarchy_file,
        "dir": temp_dir,
    }


@pytest.fixture(autouse=True)
def clear_config_after_test():
    """Automatically clear configuration cache after each test."""
    from perfspotter.config import clear_config_cache, get_config_path, set_config_path

    original_config_path = get_config_path()

    yield  # Run the test

    clear_config_cache()
    set_config_path(original_config_path)
