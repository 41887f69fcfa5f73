"""
Store of detection verdicts for one diagnosis run.

The diagnosis worker writes results while status queries read them from
other threads, so every access goes through one lock. Results are copied
on the way in and on the way out, so a recorded verdict cannot change
afterwards.
"""

import copy
import logging
import threading
from typing import Dict, List, Optional

from ..models import ProblemNode, SpotterResult

logger = logging.getLogger(__name__)

SEPARATOR = "#" * 92
SUB_SEPARATOR = "-" * 92


class ResultBlackboard:
    """
    Maps problem ids to their SpotterResult and remembers the order in which
    problems were investigated.
    """

    def __init__(self):
        self._lock = threading.RLock()
        self._results: Dict[str, SpotterResult] = {}
        self._known_problems: List[ProblemNode] = []

    def put_result(self, problem: ProblemNode, result: SpotterResult) -> None:
        """Record `result` for `problem`; a second put for the same id overwrites."""
        with self._lock:
            if problem.unique_id not in self._results:
                self._known_problems.append(problem)
            self._results[problem.unique_id] = copy.deepcopy(result)
        logger.debug(f"Recorded result for '{problem.name}': detected={result.detected}")

    def get_result(self, problem_id: str) -> Optional[SpotterResult]:
        with self._lock:
            result = self._results.get(problem_id)
            return copy.deepcopy(result) if result is not None else None

    def has_been_detected(self, problem_id: str) -> bool:
        """
        Raises:
            KeyError: If no result has been recorded for `problem_id`
        """
        with self._lock:
            if problem_id not in self._results:
                raise KeyError(f"No result recorded for problem '{problem_id}'")
            return self._results[problem_id].detected

    def get_results(self) -> Dict[str, SpotterResult]:
        with self._lock:
            return copy.deepcopy(self._results)

    def get_known_problems(self) -> List[ProblemNode]:
        with self._lock:
            return list(self._known_problems)

    def reset(self) -> None:
        with self._lock:
            self._results.clear()
            self._known_problems.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._results)

    def render_report(self) -> str:
        """Human readable report, in investigation order."""
        with self._lock:
            entries = [(p, self._results[p.unique_id]) for p in self._known_problems]

        lines = [
            "#####################################",
            "########  PPD Results  ##############",
            "#####################################",
            "",
        ]
        for problem, result in entries:
            lines.append(SEPARATOR)
            lines.append(f"### performance problem under investigation: {problem.name}")
            lines.append("    # DETECTED ! " if result.detected else "    # Problem not detected.")
            lines.append(SUB_SEPARATOR)
            lines.append(result.message)
            lines.append("")
            lines.append("")
        return "\n".join(lines) + "\n"
