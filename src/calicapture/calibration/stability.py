"""
Temporal stability gate for capture decisions.

A capture is accepted only after the pattern has been seen for a full
window of frames without drifting more than a fixed distance.
"""

from __future__ import annotations

import math
from collections import deque

import numpy as np

DEFAULT_CAPACITY = 30
DEFAULT_MAX_OFFSET = math.sqrt(1280 * 1280 + 960 * 960) / 20.0


class StabilityGate:
    """
    Keeps the most recent anchor points, newest first.

    Every observed frame evicts the oldest anchor once the history is full,
    whether or not the pattern was detected. Only detected frames add an
    anchor. A missed frame therefore shortens the window by one.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY, max_offset: float = DEFAULT_MAX_OFFSET):
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self.max_offset = max_offset
        self._history: deque[tuple[float, float]] = deque()

    def __len__(self) -> int:
        return len(self._history)

    @property
    def history(self) -> tuple[tuple[float, float], ...]:
        """Snapshot of stored anchors, newest first."""
        return tuple(self._history)

    def observe(self, anchor: tuple[float, float] | None) -> bool:
        """
        Record one frame and report whether a capture should fire.

        Args:
            anchor: Representative pattern point, or None if not detected

        Returns:
            True when the window is full, this frame was detected and the
            newest and oldest anchors are closer than max_offset. The caller
            must reset() after a trigger.
        """
        if len(self._history) == self.capacity:
            self._history.pop()
        if anchor is None:
            return False

        self._history.appendleft((float(anchor[0]), float(anchor[1])))
        if len(self._history) < self.capacity:
            return False

        newest = np.asarray(self._history[0])
        oldest = np.asarray(self._history[-1])
        return bool(np.linalg.norm(newest - oldest) < self.max_offset)

    def reset(self) -> None:
        self._history.clear()
