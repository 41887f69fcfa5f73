"""
Broker driving all measurement satellites.
"""

import logging
from typing import TextIO

from ..models import InstrumentationDescription, MeasurementData
from ..validation import MeasurementError
from .base import MeasurementAdapter, current_time_millis, pipe_to_buffer
from .broker import SatelliteBroker

logger = logging.getLogger(__name__)


class MeasurementBroker(SatelliteBroker[MeasurementAdapter]):
    kind = "measurement"
    error_type = MeasurementError

    def prepare_monitoring(self, description: InstrumentationDescription) -> None:
        self._fan_out("prepare_monitoring", lambda adapter: adapter.prepare_monitoring(description))

    def reset_monitoring(self) -> None:
        self._fan_out("reset_monitoring", lambda adapter: adapter.reset_monitoring())

    def enable_monitoring(self) -> None:
        trigger = current_time_millis()
        self._fan_out("enable_monitoring", lambda adapter: self._enable(adapter, trigger))

    def disable_monitoring(self) -> None:
        self._fan_out("disable_monitoring", lambda adapter: adapter.disable_monitoring())

    def get_measurement_data(self) -> MeasurementData:
        """Concatenate the records of all satellites, in adapter order."""
        combined = MeasurementData()
        for data in self._fan_out("get_measurement_data", lambda adapter: adapter.get_measurement_data()):
            combined.extend(data)
        return combined

    def pipe_to_output_stream(self, stream: TextIO) -> None:
        """
        Let every satellite pipe its data concurrently, then write the
        buffered streams to `stream` one after another.
        """
        for chunk in self._fan_out("pipe_to_output_stream", pipe_to_buffer):
            stream.write(chunk)

    def store_report(self, path: str) -> None:
        self._fan_out("store_report", lambda adapter: adapter.store_report(path))

    def get_current_time(self) -> int:
        return current_time_millis()

    @staticmethod
    def _enable(adapter: MeasurementAdapter, trigger: int) -> None:
        # Estimate the satellite clock offset assuming a symmetric round trip.
        start = current_time_millis()
        adapter_time = adapter.get_current_time()
        end = current_time_millis()
        adapter.controller_relative_time = adapter_time - (end - start) // 2 - (start - trigger)
        adapter.enable_monitoring()
