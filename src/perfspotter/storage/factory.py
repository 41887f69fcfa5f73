"""
Choosing the dataset backend configured by `spotter.storage_format`.
"""

import logging

from .base import DataStorage
from .csv_storage import CsvStorage
from .parquet_storage import ParquetCompression, ParquetStorage

logger = logging.getLogger(__name__)

STORAGE_BACKENDS = {
    "parquet": ParquetStorage,
    "csv": CsvStorage,
}


def create_storage(format_type: str = "parquet", compression: ParquetCompression = "snappy") -> DataStorage:
    """
    Create the storage backend for `format_type`.

    Args:
        format_type: 'parquet' or 'csv'
        compression: Parquet compression, ignored for CSV

    Raises:
        ValueError: If the format is not supported
    """
    if format_type not in STORAGE_BACKENDS:
        raise ValueError(f"Unsupported storage format: {format_type}")
    logger.debug(f"Storing experiment datasets as {format_type}")
    if format_type == "parquet":
        return ParquetStorage(compression=compression)
    return STORAGE_BACKENDS[format_type]()
