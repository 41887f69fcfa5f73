"""
CSV datasets, for runs whose data is inspected by hand or processed by tools
without Parquet support. Column types are inferred again on reading.
"""

from pathlib import Path
from typing import List, Optional

import polars as pl

from .base import DataStorage


class CsvStorage(DataStorage):
    extension = "csv"

    def __init__(self, separator: str = ","):
        self.separator = separator

    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        df.write_csv(path, separator=self.separator)

    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        return pl.read_csv(path, separator=self.separator, columns=columns)
