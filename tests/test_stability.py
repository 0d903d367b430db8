"""
Tests for calicapture.calibration.stability.
"""

import math

import pytest

from calicapture.calibration.stability import DEFAULT_MAX_OFFSET, StabilityGate


def feed(gate, anchors):
    """Observe each anchor, returning the indices that triggered."""
    triggers = []
    for index, anchor in enumerate(anchors):
        if gate.observe(anchor):
            triggers.append(index)
            gate.reset()
    return triggers


class TestDefaults:
    def test_threshold_is_five_percent_of_diagonal(self):
        assert DEFAULT_MAX_OFFSET == pytest.approx(math.hypot(1280, 960) / 20)
        assert DEFAULT_MAX_OFFSET == pytest.approx(80.0)

    def test_starts_empty(self):
        gate = StabilityGate()
        assert len(gate) == 0
        assert gate.capacity == 30

    def test_invalid_capacity(self):
        with pytest.raises(ValueError):
            StabilityGate(capacity=0)


class TestTrigger:
    def test_steady_window_fires_once(self):
        gate = StabilityGate()
        triggers = feed(gate, [(400.0, 300.0)] * 30)
        assert triggers == [29]
        assert len(gate) == 0

    def test_small_drift_still_fires(self):
        gate = StabilityGate()
        anchors = [(400.0 + 2.0 * k, 300.0) for k in range(30)]
        assert feed(gate, anchors) == [29]

    def test_fewer_than_capacity_never_fires(self):
        gate = StabilityGate()
        assert feed(gate, [(400.0, 300.0)] * 29) == []
        assert len(gate) == 29

    def test_missing_detections_after_short_hold_never_fire(self):
        gate = StabilityGate()
        anchors = [(400.0, 300.0)] * 29 + [None] * 50
        assert feed(gate, anchors) == []

    def test_moving_board_never_fires(self):
        gate = StabilityGate()
        anchors = [(100.0 + 5.0 * k, 300.0) for k in range(100)]
        assert feed(gate, anchors) == []
        assert len(gate) == 30

    def test_missed_frame_does_not_trigger(self):
        gate = StabilityGate(capacity=3, max_offset=10.0)
        assert not gate.observe((0.0, 0.0))
        assert not gate.observe((0.0, 0.0))
        assert not gate.observe(None)
        assert len(gate) == 2

    def test_repeated_windows(self):
        gate = StabilityGate()
        triggers = feed(gate, [(400.0, 300.0)] * 90)
        assert triggers == [29, 59, 89]


class TestEviction:
    def test_history_never_exceeds_capacity(self):
        gate = StabilityGate(capacity=5, max_offset=1.0)
        for k in range(20):
            gate.observe((10.0 * k, 0.0))
            assert len(gate) <= 5

    def test_newest_first(self):
        gate = StabilityGate(capacity=5, max_offset=1.0)
        for k in range(3):
            gate.observe((float(k), 0.0))
        assert gate.history == ((2.0, 0.0), (1.0, 0.0), (0.0, 0.0))

    def test_missed_frame_evicts_oldest(self):
        """A miss at full capacity drops the oldest anchor."""
        gate = StabilityGate()
        anchors = [(900.0, 900.0)] + [(400.0, 300.0)] * 29
        assert feed(gate, anchors) == []
        assert len(gate) == 30

        assert gate.observe(None) is False
        assert len(gate) == 29
        assert (900.0, 900.0) not in gate.history

        # Next detection refills the window with only steady anchors
        assert gate.observe((400.0, 300.0)) is True

    def test_reset_clears_history(self):
        gate = StabilityGate()
        feed(gate, [(1.0, 1.0)] * 10)
        gate.reset()
        assert len(gate) == 0
        assert gate.history == ()
