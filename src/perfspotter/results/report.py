"""
Writing the outcome of a diagnosis run to its run directory.
"""

import logging
from pathlib import Path
from typing import Any, Dict

from ..models import ResultsContainer
from ..storage import DataStorage
from .locations import REPORT_FILE_NAME, RESULTS_FILE_NAME

logger = logging.getLogger(__name__)


def format_duration(seconds: float) -> str:
    total = int(round(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours}:{minutes:02d}:{secs:02d}"


def write_report(run_dir: Path, report: str, duration: float) -> Path:
    """Write the text report, prefixed by the duration of the analysis."""
    run_dir.mkdir(parents=True, exist_ok=True)
    path = run_dir / REPORT_FILE_NAME
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"PPD analysis took {format_duration(duration)}\n")
        f.write(report)
    logger.info(f"Report written to {path}")
    return path


def save_results(container: ResultsContainer, run_dir: Path, storage: DataStorage) -> Path:
    path = run_dir / RESULTS_FILE_NAME
    storage.save_dict(container.to_dict(), str(path))
    logger.info(f"Results written to {path}")
    return path


def load_results(run_dir: Path, storage: DataStorage) -> Dict[str, Any]:
    return storage.load_dict(str(run_dir / RESULTS_FILE_NAME))
