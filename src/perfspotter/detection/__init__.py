"""
Detection controllers: the per-problem experiment and analysis policy.
"""

from .controller import DetectionController, ExperimentReuser

__all__ = ["DetectionController", "ExperimentReuser"]
