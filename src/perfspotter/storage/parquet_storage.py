"""
Parquet datasets: compressed and typed, the default for diagnosis runs.
"""

from pathlib import Path
from typing import List, Literal, Optional

import polars as pl

from .base import DataStorage

ParquetCompression = Literal["snappy", "gzip", "brotli", "lz4", "zstd"]


class ParquetStorage(DataStorage):
    extension = "parquet"

    def __init__(self, compression: ParquetCompression = "snappy"):
        self.compression = compression

    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        df.write_parquet(path, compression=self.compression)

    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        # Parquet reads only the requested columns from disk.
        return pl.read_parquet(path, columns=columns)
