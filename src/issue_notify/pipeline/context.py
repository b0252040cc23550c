"""Execution context handed to a pipeline step by the analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, Tuple


class StepStatistics:
    """Named integer counters a step reports for observability.

    Names are unique within a step; reporting the same name twice is a
    programming error.
    """

    def __init__(self) -> None:
        self._values: Dict[str, int] = {}

    def add(self, name: str, value: int) -> "StepStatistics":
        if name in self._values:
            raise ValueError(f"Statistic '{name}' is already defined")
        self._values[name] = value
        return self

    def get(self, name: str, default: int = 0) -> int:
        return self._values.get(name, default)

    def as_dict(self) -> Dict[str, int]:
        return dict(self._values)

    def __iter__(self) -> Iterator[Tuple[str, int]]:
        return iter(self._values.items())

    def __len__(self) -> int:
        return len(self._values)


@dataclass
class StepContext:
    statistics: StepStatistics = field(default_factory=StepStatistics)
