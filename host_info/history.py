"""Fixed-capacity rolling history of recent samples."""
from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, List, TypeVar

T = TypeVar("T")


class RollingHistory(Generic[T]):
    """FIFO buffer keeping only the ``capacity`` most recent samples."""

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._samples: Deque[T] = deque()
        self._lock = threading.Lock()

    def record(self, sample: T) -> List[T]:
        """Append ``sample``, evict the oldest entries past capacity and return a copy."""
        with self._lock:
            self._samples.append(sample)
            while len(self._samples) > self.capacity:
                self._samples.popleft()
            return list(self._samples)

    def snapshot(self) -> List[T]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)
