"""
Persisting measurement data of experiments and reading it back for analysis.

Each experiment of a controller gets its own directory holding one dataset
file per record type. Every row is tagged with the experiment's load
parameters, so concatenating all experiments keeps them apart.
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, List

import polars as pl

from ..models import DatasetCollection, MeasurementData
from ..storage import DataStorage

logger = logging.getLogger(__name__)


def write_experiment_datasets(
    lines: Iterable[str],
    experiment_dir: Path,
    parameters: Dict[str, object],
    storage: DataStorage,
) -> List[Path]:
    """
    Parse piped measurement records and store them as datasets.

    Args:
        lines: Measurement records, one JSON document per line
        experiment_dir: Directory of this experiment
        parameters: Load parameters added as constant columns
        storage: Backend writing the dataset files

    Returns:
        Paths of the written dataset files
    """
    data = MeasurementData.read_lines(lines)
    experiment_dir.mkdir(parents=True, exist_ok=True)

    written = []
    for record_type, frame in data.to_frames().items():
        frame = frame.with_columns([pl.lit(value).alias(name) for name, value in parameters.items()])
        path = experiment_dir / f"{record_type}.{storage.extension}"
        storage.save_dataframe(frame, str(path))
        written.append(path)

    logger.info(f"Stored {len(data)} record(s) in {len(written)} dataset(s) under {experiment_dir}")
    return written


def load_dataset_collection(data_dir: Path, storage: DataStorage) -> DatasetCollection:
    """
    Read every experiment stored below `data_dir`.

    Both a directory of experiment directories and a single experiment
    directory are accepted. A missing directory yields an empty collection.
    """
    collection = DatasetCollection()
    data_dir = Path(data_dir)
    if not data_dir.is_dir():
        logger.warning(f"No measurement data found in {data_dir}")
        return collection

    directories = [data_dir] + sorted(p for p in data_dir.iterdir() if p.is_dir())
    for directory in directories:
        for path in storage.list_dataframes(str(directory)):
            collection.add(path.stem, storage.load_dataframe(str(path)))

    logger.debug(f"Loaded datasets {collection.record_types()} from {data_dir}")
    return collection
