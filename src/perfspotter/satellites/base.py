"""
Satellite adapter contracts.

A satellite is an independently running service that instruments the system
under test, measures it or puts load on it. Each adapter wraps one satellite
endpoint. The endpoint fields (name, host, port, free-form properties) come
from the SatelliteDescriptor the adapter was built from, and the three
abstract classes below add the operations of each satellite kind.
"""

import io
import time
from abc import ABC, abstractmethod
from typing import Dict, Optional, TextIO

from ..models import (
    InstrumentationDescription,
    LoadConfig,
    MeasurementData,
    SatelliteDescriptor,
)

# Adapter properties holding comma separated scope filters.
INSTRUMENTATION_INCLUDES = "instrumentation.includes"
INSTRUMENTATION_EXCLUDES = "instrumentation.excludes"


def current_time_millis() -> int:
    return int(time.time() * 1000)


class SatelliteAdapter(ABC):
    """Endpoint fields shared by every satellite adapter."""

    kind = "satellite"

    def __init__(self, descriptor: SatelliteDescriptor):
        self.descriptor = descriptor
        self.properties: Dict[str, str] = dict(descriptor.properties)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def host(self) -> str:
        return self.descriptor.host

    @property
    def port(self) -> int:
        return self.descriptor.port

    def get_properties(self) -> Dict[str, str]:
        return self.properties

    def set_properties(self, properties: Dict[str, str]) -> None:
        self.properties = dict(properties)

    @abstractmethod
    def initialize(self) -> None:
        """Connect to the satellite and prepare it for a diagnosis run."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, host={self.host!r}, port={self.port})"


class InstrumentationAdapter(SatelliteAdapter):
    kind = "instrumentation"

    @abstractmethod
    def instrument(self, description: InstrumentationDescription) -> None:
        """Inject the probes described by `description`."""

    @abstractmethod
    def uninstrument(self) -> None:
        """Remove every probe injected by this adapter."""


class MeasurementAdapter(SatelliteAdapter):
    kind = "measurement"

    def __init__(self, descriptor: SatelliteDescriptor):
        super().__init__(descriptor)
        # Offset of this satellite's clock against the controller, in ms.
        self.controller_relative_time = 0

    def prepare_monitoring(self, description: InstrumentationDescription) -> None:
        """Prepare samplers for the next monitoring window."""

    def reset_monitoring(self) -> None:
        """Drop data recorded so far."""

    @abstractmethod
    def enable_monitoring(self) -> None:
        ...

    @abstractmethod
    def disable_monitoring(self) -> None:
        ...

    @abstractmethod
    def get_measurement_data(self) -> MeasurementData:
        ...

    def pipe_to_output_stream(self, stream: TextIO) -> None:
        """Write the recorded data to `stream`, one record per line."""
        self.get_measurement_data().write_lines(stream)

    def store_report(self, path: str) -> None:
        """Store satellite-side reports for the experiment stored under `path`."""

    def get_current_time(self) -> int:
        return current_time_millis()


class WorkloadAdapter(SatelliteAdapter):
    kind = "workload"

    @abstractmethod
    def start_load(self, load_config: LoadConfig) -> None:
        """Start putting load on the system; returns without waiting."""

    @abstractmethod
    def wait_for_warmup_phase_termination(self) -> None:
        """Block until every user has entered the system (end of ramp-up)."""

    @abstractmethod
    def wait_for_experiment_phase_termination(self) -> None:
        """Block until the stable phase is over."""

    @abstractmethod
    def wait_for_finished_load(self) -> None:
        """Block until every user has left the system (end of cool-down)."""


def pipe_to_buffer(adapter: MeasurementAdapter) -> str:
    buffer = io.StringIO()
    adapter.pipe_to_output_stream(buffer)
    return buffer.getvalue()


def split_filter(value: Optional[str]) -> list:
    """Split a comma separated property value into its non-empty parts."""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
