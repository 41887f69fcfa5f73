"""
Storage of experiment datasets and diagnosis results.

A dataset is one polars DataFrame per record type and experiment, stored as
`<record type>.<extension>` in the experiment directory. The backend only
decides the file format; directory handling, logging and error reporting
are shared here. Diagnosis results are small documents and are written as
JSON by every backend.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

import polars as pl

logger = logging.getLogger(__name__)


class DataStorage(ABC):
    """Reads and writes experiment datasets in one file format."""

    # File extension of datasets written by this backend, without the dot.
    extension = ""

    @abstractmethod
    def _write_frame(self, df: pl.DataFrame, path: Path) -> None:
        ...

    @abstractmethod
    def _read_frame(self, path: Path, columns: Optional[List[str]]) -> pl.DataFrame:
        ...

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Write one dataset, creating the experiment directory if needed.

        Raises:
            Exception: Whatever polars raised, after logging it
        """
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            self._write_frame(df, target)
        except Exception as e:
            logger.error(f"Failed to write dataset '{target.stem}' to {target.parent}: {e}")
            raise
        logger.debug(f"Wrote {len(df)} '{target.stem}' record(s) to {target}")

    def load_dataframe(self, path: str, columns: Optional[List[str]] = None) -> pl.DataFrame:
        """Read one dataset, optionally only the given columns."""
        source = Path(path)
        try:
            df = self._read_frame(source, columns)
        except Exception as e:
            logger.error(f"Failed to read dataset '{source.stem}' from {source}: {e}")
            raise
        logger.debug(f"Read {len(df)} '{source.stem}' record(s) from {source}")
        return df

    def list_dataframes(self, directory: str) -> List[Path]:
        """Return the dataset files of this backend in one experiment directory."""
        base = Path(directory)
        if not base.is_dir():
            return []
        return sorted(base.glob(f"*.{self.extension}"))

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        try:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except Exception as e:
            logger.error(f"Failed to write {path}: {e}")
            raise
        logger.debug(f"Wrote {path}")

    def load_dict(self, path: str) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except Exception as e:
            logger.error(f"Failed to read {path}: {e}")
            raise
