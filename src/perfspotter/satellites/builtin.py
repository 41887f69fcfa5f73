"""
Satellites that run inside the diagnosis process.

They make a diagnosis runnable without remote services. `noop` accepts
instrumentation requests, `system` samples host CPU and memory utilization
with psutil and `timed` holds the load phases for their computed durations
while the actual load is generated externally.
"""

import logging
import threading
import time
from typing import List, Optional

import psutil

from ..models import InstrumentationDescription, LoadConfig, MeasurementData, SatelliteDescriptor
from ..validation import MeasurementError, WorkloadError, validate_positive_integer
from .base import InstrumentationAdapter, MeasurementAdapter, WorkloadAdapter, current_time_millis

logger = logging.getLogger(__name__)

CPU_UTILIZATION = "cpu_utilization"
MEMORY_UTILIZATION = "memory_utilization"
CPU_AGGREGATED = "CPU-aggregated"

# Adapter property: sampling delay of the system satellite in ms.
SAMPLING_DELAY = "sampling.delay"
DEFAULT_SAMPLING_DELAY = 500


class NoopInstrumentationAdapter(InstrumentationAdapter):
    """Records instrumentation requests without touching the system under test."""

    def __init__(self, descriptor: SatelliteDescriptor):
        super().__init__(descriptor)
        self.instrumented = False
        self.last_description: Optional[InstrumentationDescription] = None

    def initialize(self) -> None:
        self.instrumented = False

    def instrument(self, description: InstrumentationDescription) -> None:
        logger.info(
            f"{self.name}: instrumenting {len(description.entities)} scope(s), "
            f"includes={sorted(description.restriction.inclusions)}, "
            f"excludes={sorted(description.restriction.exclusions)}"
        )
        self.last_description = description
        self.instrumented = True

    def uninstrument(self) -> None:
        self.instrumented = False


class SystemMeasurementAdapter(MeasurementAdapter):
    """Samples CPU and memory utilization of the local host while enabled."""

    def __init__(self, descriptor: SatelliteDescriptor):
        super().__init__(descriptor)
        self._records = MeasurementData()
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._sampler: Optional[threading.Thread] = None

    @property
    def sampling_delay(self) -> float:
        delay = validate_positive_integer(
            self.properties.get(SAMPLING_DELAY, DEFAULT_SAMPLING_DELAY),
            min_value=10,
            field_name=f"{self.name}.{SAMPLING_DELAY}",
        )
        return delay / 1000.0

    def initialize(self) -> None:
        # Prime psutil so the first sample reports utilization since now.
        psutil.cpu_percent(percpu=True)

    def reset_monitoring(self) -> None:
        with self._lock:
            self._records = MeasurementData()

    def enable_monitoring(self) -> None:
        if self._sampler is not None:
            raise MeasurementError(f"{self.name}: monitoring already enabled")
        self.reset_monitoring()
        self._stop.clear()
        self._sampler = threading.Thread(
            target=self._sample_loop, name=f"{self.name}-sampler", daemon=True
        )
        self._sampler.start()

    def disable_monitoring(self) -> None:
        if self._sampler is None:
            return
        self._stop.set()
        self._sampler.join()
        self._sampler = None

    def get_measurement_data(self) -> MeasurementData:
        with self._lock:
            return MeasurementData(list(self._records.records))

    def _sample_loop(self) -> None:
        delay = self.sampling_delay
        while not self._stop.wait(delay):
            self.sample()

    def sample(self) -> None:
        timestamp = current_time_millis()
        per_cpu: List[float] = psutil.cpu_percent(percpu=True)
        memory = psutil.virtual_memory()
        with self._lock:
            for index, percent in enumerate(per_cpu):
                self._records.add(CPU_UTILIZATION, timestamp, resource=f"CPU-{index}",
                                  utilization=percent / 100.0)
            if per_cpu:
                self._records.add(CPU_UTILIZATION, timestamp, resource=CPU_AGGREGATED,
                                  utilization=sum(per_cpu) / len(per_cpu) / 100.0)
            self._records.add(MEMORY_UTILIZATION, timestamp, resource="memory",
                              utilization=memory.percent / 100.0, used_bytes=memory.used)


class TimedWorkloadAdapter(WorkloadAdapter):
    """
    Signals the end of each load phase after its computed duration.

    The load itself is expected to be driven by an external generator
    following the same profile.
    """

    def __init__(self, descriptor: SatelliteDescriptor):
        super().__init__(descriptor)
        self._warmup_done = threading.Event()
        self._experiment_done = threading.Event()
        self._finished = threading.Event()
        self._driver: Optional[threading.Thread] = None

    def initialize(self) -> None:
        self._finished.set()

    def start_load(self, load_config: LoadConfig) -> None:
        if self._driver is not None and self._driver.is_alive():
            raise WorkloadError(f"{self.name}: load is already running")
        self._warmup_done.clear()
        self._experiment_done.clear()
        self._finished.clear()
        self._driver = threading.Thread(
            target=self._drive, args=(load_config,), name=f"{self.name}-load", daemon=True
        )
        self._driver.start()

    def _drive(self, load_config: LoadConfig) -> None:
        logger.info(
            f"{self.name}: {load_config.num_users} user(s), ramp-up {load_config.ramp_up_duration()}s, "
            f"stable {load_config.experiment_duration}s, cool-down {load_config.cool_down_duration()}s"
        )
        time.sleep(load_config.ramp_up_duration())
        self._warmup_done.set()
        time.sleep(load_config.experiment_duration)
        self._experiment_done.set()
        time.sleep(load_config.cool_down_duration())
        self._finished.set()

    def wait_for_warmup_phase_termination(self) -> None:
        self._warmup_done.wait()

    def wait_for_experiment_phase_termination(self) -> None:
        self._experiment_done.wait()

    def wait_for_finished_load(self) -> None:
        self._finished.wait()
        if self._driver is not None:
            self._driver.join()


def register_builtin_satellites(registry) -> None:
    registry.register("instrumentation", "noop", NoopInstrumentationAdapter)
    registry.register("measurement", "system", SystemMeasurementAdapter)
    registry.register("workload", "timed", TimedWorkloadAdapter)
