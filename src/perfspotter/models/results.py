"""
Detection result data models.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .hierarchy import ProblemNode


@dataclass
class ProblemOccurrence:
    """A concrete place where a detected problem manifests."""

    root_cause_location: str
    message: str = ""
    resource_files: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.root_cause_location is None:
            raise ValueError("root_cause_location must not be None")


@dataclass
class SpotterResult:
    """
    Verdict of one detection controller for one problem node.

    The message only grows through `add_message`.
    """

    detected: bool = False
    message: str = ""
    resource_files: List[str] = field(default_factory=list)
    occurrences: List[ProblemOccurrence] = field(default_factory=list)

    def add_message(self, text: str) -> None:
        self.message += f"   # {text}\n"

    def add_resource_file(self, path: str) -> None:
        self.resource_files.append(path)

    def add_occurrence(self, occurrence: ProblemOccurrence) -> None:
        self.occurrences.append(occurrence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "detected": self.detected,
            "message": self.message,
            "resource_files": list(self.resource_files),
            "occurrences": [
                {
                    "root_cause_location": o.root_cause_location,
                    "message": o.message,
                    "resource_files": list(o.resource_files),
                }
                for o in self.occurrences
            ],
        }


@dataclass
class ResultsContainer:
    """Everything a finished (or cancelled) run hands back to its caller."""

    root_problem: Optional[ProblemNode]
    report: str
    results: Dict[str, SpotterResult] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hierarchy": self.root_problem.to_dict() if self.root_problem else None,
            "report": self.report,
            "results": {pid: r.to_dict() for pid, r in self.results.items()},
        }
