"""Fixed-length history of recorded values, newest first."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class Record:
    """A recorded value and the frame time it was recorded with."""

    value: Any = None
    delta_time: float = 0.0


class Records:
    """History of records; index 0 is the most recent one.

    Unfilled slots hold a ``Record`` whose value is ``None``.
    """

    def __init__(self, length: int) -> None:
        self._records: deque[Record] = deque()
        self.resize(length)

    def resize(self, length: int) -> None:
        """Reset to ``length`` empty records if the length differs."""
        if length < 0:
            raise ValueError("record length cannot be negative")
        if len(self._records) != length:
            self._records = deque(Record() for _ in range(length))

    def push(self, value: Any, delta_time: float) -> None:
        """Drop the oldest record and put a new one in front."""
        if self._records:
            self._records.pop()
        self._records.appendleft(Record(value, delta_time))

    def __len__(self) -> int:
        return len(self._records)

    def __getitem__(self, index: int) -> Record:
        return self._records[index]

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)