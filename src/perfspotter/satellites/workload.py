"""
Broker driving all workload satellites.
"""

import logging

from ..models import LoadConfig
from ..validation import WorkloadError
from .base import WorkloadAdapter
from .broker import SatelliteBroker

logger = logging.getLogger(__name__)


class WorkloadBroker(SatelliteBroker[WorkloadAdapter]):
    kind = "workload"
    error_type = WorkloadError

    def start_load(self, load_config: LoadConfig) -> None:
        logger.info(f"Starting load with {load_config.num_users} user(s)")
        self._fan_out("start_load", lambda adapter: adapter.start_load(load_config))

    def wait_for_warmup_phase_termination(self) -> None:
        self._fan_out(
            "wait_for_warmup_phase_termination",
            lambda adapter: adapter.wait_for_warmup_phase_termination(),
        )

    def wait_for_experiment_phase_termination(self) -> None:
        self._fan_out(
            "wait_for_experiment_phase_termination",
            lambda adapter: adapter.wait_for_experiment_phase_termination(),
        )

    def wait_for_finished_load(self) -> None:
        self._fan_out("wait_for_finished_load", lambda adapter: adapter.wait_for_finished_load())
