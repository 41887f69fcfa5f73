"""
Detection results, measurement datasets and reports.
"""

from .blackboard import ResultBlackboard
from .datasets import load_dataset_collection, write_experiment_datasets
from .locations import DATA_SUB_DIR, REPORT_FILE_NAME, RESULT_RESOURCES_SUB_DIR, RESULTS_FILE_NAME
from .report import format_duration, load_results, save_results, write_report

__all__ = [
    "ResultBlackboard",
    "load_dataset_collection",
    "write_experiment_datasets",
    "DATA_SUB_DIR",
    "REPORT_FILE_NAME",
    "RESULT_RESOURCES_SUB_DIR",
    "RESULTS_FILE_NAME",
    "format_duration",
    "load_results",
    "save_results",
    "write_report",
]
