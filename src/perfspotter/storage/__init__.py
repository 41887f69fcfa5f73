"""
Storage backends for experiment datasets and diagnosis results.

Datasets are written with Polars, either as compressed Parquet files or as
CSV; structured results are written as JSON.
"""

from .base import DataStorage
from .csv_storage import CsvStorage
from .factory import create_storage
from .parquet_storage import ParquetStorage

__all__ = ["DataStorage", "CsvStorage", "ParquetStorage", "create_storage"]
