"""
Configuration data models.

This module contains the configuration structures for a diagnosis run, the
load profile handed to workload satellites and the descriptors of the
satellites making up the measurement environment.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .hierarchy import PruningPolicy


@dataclass
class PhaseProfile:
    """
    How users enter (ramp-up) or leave (cool-down) the system under test.
    """

    # Length of one interval in seconds.
    interval_length: float = 1.0
    # Number of users added or removed per interval.
    users_per_interval: int = 1


@dataclass
class WorkloadConfig:
    """
    Global workload settings, loaded from the `[workload]` section.
    """

    max_users: int = 10
    # Duration of the stable phase in seconds.
    experiment_duration: float = 10.0
    ramp_up: PhaseProfile = field(default_factory=PhaseProfile)
    cool_down: PhaseProfile = field(default_factory=PhaseProfile)


@dataclass
class BrokerConfig:
    """
    Thread pool settings for the satellite brokers, loaded from `[broker]`.
    """

    max_workers: int = 8
    thread_name_prefix: str = "SatelliteWorker"


@dataclass
class SpotterConfig:
    """
    Configuration of one diagnosis run, loaded from the main TOML file.
    """

    # [spotter]
    result_dir: Path
    hierarchy_file: Optional[Path]
    environment_file: Optional[Path]
    omit_experiments: bool = False
    omit_warmup: bool = False
    prewarmup_duration: float = 180.0
    dummy_data_dir: Optional[Path] = None
    pruning_policy: PruningPolicy = PruningPolicy.PRUNE_AND_MARK
    progress_interval: float = 1.0
    storage_format: str = "parquet"

    # [workload]
    workload: WorkloadConfig = field(default_factory=WorkloadConfig)

    # [broker]
    broker: BrokerConfig = field(default_factory=BrokerConfig)


@dataclass
class LoadConfig:
    """
    Load profile of a single experiment, passed to `start_load`.

    Durations are in seconds.
    """

    num_users: int
    ramp_up_interval_length: float
    ramp_up_users_per_interval: int
    cool_down_interval_length: float
    cool_down_users_per_interval: int
    experiment_duration: float

    @classmethod
    def from_workload(cls, workload: WorkloadConfig, num_users: int,
                      experiment_duration: Optional[float] = None) -> "LoadConfig":
        return cls(
            num_users=num_users,
            ramp_up_interval_length=workload.ramp_up.interval_length,
            ramp_up_users_per_interval=workload.ramp_up.users_per_interval,
            cool_down_interval_length=workload.cool_down.interval_length,
            cool_down_users_per_interval=workload.cool_down.users_per_interval,
            experiment_duration=(
                workload.experiment_duration
                if experiment_duration is None
                else experiment_duration
            ),
        )

    def ramp_up_duration(self) -> float:
        return phase_duration(
            self.num_users, self.ramp_up_users_per_interval, self.ramp_up_interval_length
        )

    def cool_down_duration(self) -> float:
        return phase_duration(
            self.num_users, self.cool_down_users_per_interval, self.cool_down_interval_length
        )

    def to_properties(self) -> Dict[str, str]:
        """Flatten the profile into the string map sent to remote satellites."""
        return {
            "workload.num_users": str(self.num_users),
            "workload.ramp_up.interval_length": str(self.ramp_up_interval_length),
            "workload.ramp_up.users_per_interval": str(self.ramp_up_users_per_interval),
            "workload.cool_down.interval_length": str(self.cool_down_interval_length),
            "workload.cool_down.users_per_interval": str(self.cool_down_users_per_interval),
            "workload.experiment_duration": str(self.experiment_duration),
        }


# Satellite kinds known to the measurement environment.
SATELLITE_KINDS = ["instrumentation", "measurement", "workload"]


@dataclass
class SatelliteDescriptor:
    """
    One satellite of the measurement environment.
    """

    kind: str
    extension: str
    name: str
    host: str = "localhost"
    port: int = 8080
    properties: Dict[str, str] = field(default_factory=dict)


@dataclass
class EnvironmentConfig:
    """The measurement environment: every satellite the run talks to."""

    satellites: List[SatelliteDescriptor] = field(default_factory=list)

    def of_kind(self, kind: str) -> List[SatelliteDescriptor]:
        return [s for s in self.satellites if s.kind == kind]


def phase_duration(num_users: int, users_per_interval: int, interval_length: float) -> float:
    """
    Time needed to move `num_users` users in or out of the system.

    Users enter in batches of `users_per_interval`, one batch per interval.
    No interval is spent after the last full batch, so an exact multiple
    needs one interval less than a remainder does.
    """
    if users_per_interval <= 0 or num_users <= 0:
        return 0.0
    intervals = math.ceil(num_users / users_per_interval)
    if num_users % users_per_interval == 0:
        intervals -= 1
    return intervals * interval_length
