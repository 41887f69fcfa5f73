"""
Measurement data models.

Satellites report measurements as flat records (dicts carrying at least a
`record_type` and a millisecond `timestamp`). Persisted experiments are read
back as a DatasetCollection of polars DataFrames, one per record type.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, TextIO

import polars as pl

RECORD_TYPE = "record_type"
TIMESTAMP = "timestamp"
# Column added to every persisted dataset identifying the experiment load.
NUM_USERS = "num_users"


@dataclass
class MeasurementData:
    """Records collected during one monitoring window."""

    records: List[Dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.records)

    def add(self, record_type: str, timestamp: int, **values: Any) -> None:
        record = {RECORD_TYPE: record_type, TIMESTAMP: timestamp}
        record.update(values)
        self.records.append(record)

    def extend(self, other: "MeasurementData") -> "MeasurementData":
        self.records.extend(other.records)
        return self

    def record_types(self) -> List[str]:
        seen = []
        for record in self.records:
            if record[RECORD_TYPE] not in seen:
                seen.append(record[RECORD_TYPE])
        return seen

    def select(self, record_type: str) -> List[Dict[str, Any]]:
        return [r for r in self.records if r[RECORD_TYPE] == record_type]

    def to_frames(self) -> Dict[str, pl.DataFrame]:
        """Group the records into one DataFrame per record type."""
        return {rt: pl.DataFrame(self.select(rt)) for rt in self.record_types()}

    def write_lines(self, stream: TextIO) -> None:
        """Write one JSON document per record to a text stream."""
        for record in self.records:
            stream.write(json.dumps(record, sort_keys=True))
            stream.write("\n")

    @classmethod
    def read_lines(cls, lines: Iterable[str]) -> "MeasurementData":
        data = cls()
        for line in lines:
            line = line.strip()
            if line:
                data.records.append(json.loads(line))
        return data


class DatasetCollection:
    """
    All datasets recorded by one controller, keyed by record type.

    Each dataset concatenates the records of every experiment and carries a
    `num_users` column telling which experiment a row belongs to.
    """

    def __init__(self, datasets: Optional[Dict[str, pl.DataFrame]] = None):
        self._datasets: Dict[str, pl.DataFrame] = dict(datasets or {})

    def add(self, record_type: str, frame: pl.DataFrame) -> None:
        if record_type in self._datasets:
            self._datasets[record_type] = pl.concat(
                [self._datasets[record_type], frame], how="diagonal_relaxed"
            )
        else:
            self._datasets[record_type] = frame

    def get_dataset(self, record_type: str) -> Optional[pl.DataFrame]:
        return self._datasets.get(record_type)

    def record_types(self) -> List[str]:
        return sorted(self._datasets)

    def is_empty(self) -> bool:
        return not self._datasets

    def __contains__(self, record_type: str) -> bool:
        return record_type in self._datasets

    def __len__(self) -> int:
        return len(self._datasets)
