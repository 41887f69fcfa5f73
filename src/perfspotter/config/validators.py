"""
Configuration validation utilities.

Turns raw TOML data into the validated configuration dataclasses.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List

from ..models import (
    SATELLITE_KINDS,
    BrokerConfig,
    EnvironmentConfig,
    PhaseProfile,
    PruningPolicy,
    SatelliteDescriptor,
    SpotterConfig,
    WorkloadConfig,
)
from ..validation import (
    ValidationError,
    validate_boolean,
    validate_enum_choice,
    validate_non_empty_string,
    validate_positive_float,
    validate_positive_integer,
)
from .loader import resolve_path

logger = logging.getLogger(__name__)

STORAGE_FORMATS = ["parquet", "csv"]


def _validate_phase(phase_data: Dict[str, Any], section: str) -> PhaseProfile:
    return PhaseProfile(
        interval_length=validate_positive_float(
            phase_data.get("interval_length", 1.0),
            min_value=0.0,
            field_name=f"{section}.interval_length",
        ),
        users_per_interval=validate_positive_integer(
            phase_data.get("users_per_interval", 1),
            min_value=1,
            field_name=f"{section}.users_per_interval",
        ),
    )


def validate_workload_config(workload_data: Dict[str, Any]) -> WorkloadConfig:
    """
    Validate the `[workload]` section.

    Raises:
        ValidationError: If validation fails
    """
    return WorkloadConfig(
        max_users=validate_positive_integer(
            workload_data.get("max_users", 10),
            min_value=1,
            field_name="workload.max_users",
        ),
        experiment_duration=validate_positive_float(
            workload_data.get("experiment_duration", 10.0),
            min_value=0.0,
            field_name="workload.experiment_duration",
        ),
        ramp_up=_validate_phase(workload_data.get("ramp_up", {}), "workload.ramp_up"),
        cool_down=_validate_phase(workload_data.get("cool_down", {}), "workload.cool_down"),
    )


def validate_broker_config(broker_data: Dict[str, Any]) -> BrokerConfig:
    return BrokerConfig(
        max_workers=validate_positive_integer(
            broker_data.get("max_workers", 8),
            min_value=1,
            max_value=256,
            field_name="broker.max_workers",
        ),
        thread_name_prefix=validate_non_empty_string(
            broker_data.get("thread_name_prefix", "SatelliteWorker"),
            field_name="broker.thread_name_prefix",
        ),
    )


def validate_spotter_config(config_data: Dict[str, Any], config_dir: Path) -> SpotterConfig:
    """
    Validate and create a SpotterConfig from raw configuration data.

    Args:
        config_data: Raw configuration from TOML
        config_dir: Directory of the configuration file, for relative paths

    Returns:
        Validated SpotterConfig instance

    Raises:
        ValidationError: If validation fails
    """
    spotter = config_data.get("spotter", {})

    try:
        pruning_policy = PruningPolicy(
            validate_enum_choice(
                spotter.get("pruning_policy", PruningPolicy.PRUNE_AND_MARK.value),
                choices=[p.value for p in PruningPolicy],
                field_name="spotter.pruning_policy",
                case_sensitive=False,
            )
        )

        config = SpotterConfig(
            result_dir=resolve_path(spotter.get("result_dir", "results"), config_dir),
            hierarchy_file=resolve_path(spotter.get("hierarchy_file"), config_dir),
            environment_file=resolve_path(spotter.get("environment_file"), config_dir),
            omit_experiments=validate_boolean(
                spotter.get("omit_experiments", False), field_name="spotter.omit_experiments"
            ),
            omit_warmup=validate_boolean(
                spotter.get("omit_warmup", False), field_name="spotter.omit_warmup"
            ),
            prewarmup_duration=validate_positive_float(
                spotter.get("prewarmup_duration", 180.0),
                min_value=0.0,
                field_name="spotter.prewarmup_duration",
            ),
            dummy_data_dir=resolve_path(spotter.get("dummy_data_dir"), config_dir),
            pruning_policy=pruning_policy,
            progress_interval=validate_positive_float(
                spotter.get("progress_interval", 1.0),
                min_value=0.01,
                max_value=3600.0,
                field_name="spotter.progress_interval",
            ),
            storage_format=validate_enum_choice(
                spotter.get("storage_format", "parquet"),
                choices=STORAGE_FORMATS,
                field_name="spotter.storage_format",
            ),
            workload=validate_workload_config(config_data.get("workload", {})),
            broker=validate_broker_config(config_data.get("broker", {})),
        )
    except ValidationError as e:
        logger.error(f"Spotter configuration validation failed: {e}")
        raise

    if config.omit_experiments and config.dummy_data_dir is None:
        raise ValidationError(
            "spotter.dummy_data_dir is required when spotter.omit_experiments is set",
            field_name="spotter.dummy_data_dir",
        )
    return config


def validate_satellite_descriptor(data: Dict[str, Any], index: int) -> SatelliteDescriptor:
    prefix = f"satellites[{index}]"
    kind = validate_enum_choice(
        data.get("kind", ""), choices=SATELLITE_KINDS, field_name=f"{prefix}.kind"
    )
    extension = validate_non_empty_string(data.get("extension"), field_name=f"{prefix}.extension")
    properties = data.get("properties", {})
    if not isinstance(properties, dict):
        raise ValidationError(
            f"{prefix}.properties must be a table", field_name=f"{prefix}.properties", value=properties
        )

    return SatelliteDescriptor(
        kind=kind,
        extension=extension,
        name=validate_non_empty_string(data.get("name", extension), field_name=f"{prefix}.name"),
        host=validate_non_empty_string(data.get("host", "localhost"), field_name=f"{prefix}.host"),
        port=validate_positive_integer(
            data.get("port", 8080), min_value=0, max_value=65535, field_name=f"{prefix}.port"
        ),
        # Satellite properties travel as strings.
        properties={str(k): str(v).lower() if isinstance(v, bool) else str(v) for k, v in properties.items()},
    )


def validate_environment_config(satellites_data: List[Dict[str, Any]]) -> EnvironmentConfig:
    """
    Validate the satellite descriptors of the measurement environment.

    Raises:
        ValidationError: If a descriptor is malformed or names are duplicated
    """
    descriptors = [validate_satellite_descriptor(d, i) for i, d in enumerate(satellites_data)]

    seen = set()
    for descriptor in descriptors:
        key = (descriptor.kind, descriptor.name)
        if key in seen:
            raise ValidationError(
                f"Duplicate {descriptor.kind} satellite name '{descriptor.name}'",
                field_name="satellites.name",
                value=descriptor.name,
            )
        seen.add(key)

    return EnvironmentConfig(satellites=descriptors)
